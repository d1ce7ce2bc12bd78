"""
Implementation SQLModel du repository des jobs.

La table jobs porte les trois files (scan, metadata-scrape,
collection-scrape). Un job est pris en passant de waiting/delayed a active ;
les jobs restes actifs apres un arret brutal sont remis en attente au
demarrage du worker.
"""

import json
from datetime import datetime
from typing import Optional, Sequence

from sqlalchemy import delete, func, update
from sqlmodel import Session, col, select

from src.core.entities.job import Job, JobState
from src.core.ports.repositories import IJobRepository
from src.infrastructure.persistence.models import JobModel

PENDING_STATES = (JobState.WAITING.value, JobState.DELAYED.value)


class SQLModelJobRepository(IJobRepository):
    """
    Repository SQLModel pour les jobs.

    Les lectures forcent populate_existing : le drapeau d'annulation peut
    etre pose par un autre processus (commande cancel-scan).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: JobModel) -> Job:
        return Job(
            id=model.id,
            queue=model.queue,
            key=model.key,
            payload=json.loads(model.payload_json) if model.payload_json else {},
            state=JobState(model.state),
            attempts_made=model.attempts_made,
            max_attempts=model.max_attempts,
            run_at=model.run_at,
            progress=model.progress,
            result=json.loads(model.result_json) if model.result_json else None,
            error=model.error,
            cancel_requested=model.cancel_requested,
            created_at=model.created_at,
            finished_at=model.finished_at,
        )

    def _fresh(self, statement):
        return self._session.exec(statement.execution_options(populate_existing=True))

    def _apply(self, model: JobModel, job: Job) -> JobModel:
        model.queue = job.queue
        model.key = job.key
        model.payload_json = json.dumps(job.payload)
        model.state = job.state.value
        model.attempts_made = job.attempts_made
        model.max_attempts = job.max_attempts
        model.run_at = job.run_at or datetime.now()
        model.progress = job.progress
        model.result_json = json.dumps(job.result) if job.result is not None else None
        model.error = job.error
        model.cancel_requested = job.cancel_requested
        model.finished_at = job.finished_at
        model.updated_at = datetime.now()
        return model

    def get_by_id(self, job_id: int) -> Optional[Job]:
        model = self._fresh(select(JobModel).where(JobModel.id == job_id)).first()
        return self._to_entity(model) if model else None

    def get_by_key(self, queue: str, key: str) -> Optional[Job]:
        statement = select(JobModel).where(JobModel.queue == queue, JobModel.key == key)
        model = self._fresh(statement).first()
        return self._to_entity(model) if model else None

    def add(self, job: Job) -> Job:
        model = self._apply(JobModel(queue=job.queue, key=job.key), job)
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def update(self, job: Job) -> Job:
        model = self._session.get(JobModel, job.id)
        if model is None:
            raise ValueError(f"Job {job.id} not found")
        # Le drapeau d'annulation n'est jamais efface par le worker
        self._session.refresh(model)
        cancel_requested = model.cancel_requested or job.cancel_requested
        self._apply(model, job)
        model.cancel_requested = cancel_requested
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def delete(self, job_id: int) -> bool:
        model = self._session.get(JobModel, job_id)
        if model is None:
            return False
        self._session.delete(model)
        self._session.commit()
        return True

    def request_cancel(self, job_id: int) -> bool:
        """Pose le drapeau d'annulation si le job est toujours actif, sans toucher au reste."""
        statement = (
            update(JobModel)
            .where(JobModel.id == job_id, JobModel.state == JobState.ACTIVE.value)
            .values(cancel_requested=True, updated_at=datetime.now())
        )
        result = self._session.exec(statement)
        self._session.commit()
        return result.rowcount > 0

    def delete_pending(self, job_id: int) -> bool:
        """Supprime le job s'il n'a pas encore ete pris."""
        statement = delete(JobModel).where(
            JobModel.id == job_id, col(JobModel.state).in_(PENDING_STATES)
        )
        result = self._session.exec(statement)
        self._session.commit()
        return result.rowcount > 0

    def claim_next(self, queue: str, now: datetime) -> Optional[Job]:
        """Passe le prochain job echu a active, par run_at puis ordre d'insertion."""
        statement = (
            select(JobModel)
            .where(
                JobModel.queue == queue,
                col(JobModel.state).in_(PENDING_STATES),
                JobModel.run_at <= now,
            )
            .order_by(JobModel.run_at, JobModel.id)
        )
        model = self._fresh(statement).first()
        if model is None:
            return None
        model.state = JobState.ACTIVE.value
        model.updated_at = now
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def requeue_active(self, queue: str) -> int:
        statement = select(JobModel).where(
            JobModel.queue == queue, JobModel.state == JobState.ACTIVE.value
        )
        models = self._fresh(statement).all()
        for model in models:
            model.state = JobState.WAITING.value
            model.run_at = datetime.now()
            self._session.add(model)
        self._session.commit()
        return len(models)

    def is_cancel_requested(self, job_id: int) -> bool:
        statement = select(JobModel.cancel_requested).where(JobModel.id == job_id)
        value = self._fresh(statement).first()
        return bool(value)

    def list_jobs(
        self,
        queue: str,
        states: Optional[Sequence[JobState]] = None,
        limit: int = 50,
    ) -> list[Job]:
        statement = select(JobModel).where(JobModel.queue == queue)
        if states:
            statement = statement.where(col(JobModel.state).in_([s.value for s in states]))
        statement = statement.order_by(col(JobModel.id).desc()).limit(limit)
        return [self._to_entity(model) for model in self._fresh(statement).all()]

    def count_by_state(self, queue: str) -> dict[JobState, int]:
        statement = (
            select(JobModel.state, func.count())
            .where(JobModel.queue == queue)
            .group_by(JobModel.state)
        )
        counts = {state: 0 for state in JobState}
        for state, count in self._session.exec(statement).all():
            counts[JobState(state)] = count
        return counts

    def next_run_at(self, queue: str) -> Optional[datetime]:
        statement = select(func.min(JobModel.run_at)).where(
            JobModel.queue == queue, col(JobModel.state).in_(PENDING_STATES)
        )
        return self._session.exec(statement).one()

    def prune(
        self,
        queue: str,
        state: JobState,
        older_than: datetime,
        keep_count: Optional[int] = None,
    ) -> int:
        """
        Supprime les jobs termines au-dela de la fenetre de retention.

        Un job est supprime s'il est termine avant older_than, ou s'il
        depasse les keep_count plus recents.
        """
        statement = (
            select(JobModel)
            .where(JobModel.queue == queue, JobModel.state == state.value)
            .order_by(col(JobModel.finished_at).desc(), col(JobModel.id).desc())
        )
        models = self._fresh(statement).all()

        removed = 0
        for position, model in enumerate(models):
            finished_at = model.finished_at or model.updated_at or model.created_at
            too_old = finished_at is not None and finished_at < older_than
            over_count = keep_count is not None and position >= keep_count
            if too_old or over_count:
                self._session.delete(model)
                removed += 1
        if removed:
            self._session.commit()
        return removed
