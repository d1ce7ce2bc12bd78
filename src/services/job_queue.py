"""
Files d'attente persistantes et boucle de traitement.

Trois files a topologie fixe, stockees dans la table jobs :

| File              | Tentatives | Backoff          | Limite     | Cle                         |
|-------------------|------------|------------------|------------|-----------------------------|
| scan              | 1          | -                | -          | scan-{libraryId}            |
| metadata-scrape   | 3          | 5s exponentiel   | 10 / 10s   | scrape-{mediaId}[-{ts}]     |
| collection-scrape | 3          | 5s exponentiel   | 10 / 10s   | collection-scrape-{id}-{ts} |

Livraison au moins une fois : un job reste actif apres un arret brutal est
remis en attente au demarrage du worker suivant.

Usage:
    queue = JobQueue(METADATA_POLICY, SQLModelJobRepository(session))
    queue.schedule_if_absent("scrape-42", request.to_payload())
    await queue.run(handler, until_idle=True)
"""

import asyncio
import time
from collections import deque
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Optional

from loguru import logger

from src.core.entities.job import Job, JobState
from src.core.errors import TargetGoneError
from src.core.ports.repositories import IJobRepository

SCAN_QUEUE = "scan"
METADATA_QUEUE = "metadata-scrape"
COLLECTION_QUEUE = "collection-scrape"


@dataclass(frozen=True)
class QueuePolicy:
    """
    Politique d'une file : concurrence, retry, limite de debit et retention.

    Attributs:
        name: Nom de la file
        concurrency: Jobs executes simultanement
        max_attempts: Tentatives avant l'etat failed
        backoff_ms: Delai de base du backoff exponentiel
        rate_limit_max: Jobs autorises par fenetre (None = pas de limite)
        rate_limit_window_ms: Duree de la fenetre glissante
        keep_completed_age / keep_completed_count: Retention des jobs termines
        keep_failed_age: Retention des jobs en echec
    """

    name: str
    concurrency: int = 1
    max_attempts: int = 1
    backoff_ms: int = 0
    rate_limit_max: Optional[int] = None
    rate_limit_window_ms: int = 0
    keep_completed_age: timedelta = timedelta(hours=24)
    keep_completed_count: int = 1000
    keep_failed_age: timedelta = timedelta(days=7)

    def backoff_delay(self, attempts_made: int) -> timedelta:
        """Delai avant la tentative suivante : backoff x 2^(tentative-1)."""
        return timedelta(milliseconds=self.backoff_ms * 2 ** max(attempts_made - 1, 0))


SCAN_POLICY = QueuePolicy(
    name=SCAN_QUEUE,
    max_attempts=1,
    keep_completed_count=100,
)

METADATA_POLICY = QueuePolicy(
    name=METADATA_QUEUE,
    max_attempts=3,
    backoff_ms=5000,
    rate_limit_max=10,
    rate_limit_window_ms=10_000,
)

COLLECTION_POLICY = QueuePolicy(
    name=COLLECTION_QUEUE,
    max_attempts=3,
    backoff_ms=5000,
    rate_limit_max=10,
    rate_limit_window_ms=10_000,
)


class SlidingWindowRateLimiter:
    """
    Limiteur a fenetre glissante : au plus max_calls par fenetre.

    Example:
        limiter = SlidingWindowRateLimiter(10, 10.0)
        if limiter.wait_time() == 0:
            limiter.record()
    """

    def __init__(
        self,
        max_calls: int,
        window_seconds: float,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_calls = max_calls
        self._window = window_seconds
        self._clock = clock
        self._calls: deque[float] = deque()

    def _purge(self, now: float) -> None:
        while self._calls and now - self._calls[0] >= self._window:
            self._calls.popleft()

    def wait_time(self) -> float:
        """Secondes a attendre avant le prochain appel autorise (0 = immediat)."""
        now = self._clock()
        self._purge(now)
        if len(self._calls) < self._max_calls:
            return 0.0
        return max(self._window - (now - self._calls[0]), 0.0)

    def record(self) -> None:
        """Enregistre un appel."""
        now = self._clock()
        self._purge(now)
        self._calls.append(now)


class JobContext:
    """Vue d'un job en cours d'execution, passee au handler."""

    def __init__(self, job: Job, queue: "JobQueue") -> None:
        self.job = job
        self._queue = queue

    @property
    def payload(self) -> dict[str, Any]:
        return self.job.payload

    def update_progress(self, progress: int) -> None:
        """Enregistre l'avancement du job (0-100)."""
        if progress == self.job.progress:
            return
        self.job.progress = progress
        self.job = self._queue.repository.update(self.job)

    def is_cancel_requested(self) -> bool:
        """Relit le drapeau d'annulation du job en base."""
        return self._queue.repository.is_cancel_requested(self.job.id)


JobHandler = Callable[[JobContext], Awaitable[Optional[dict[str, Any]]]]


class JobQueue:
    """
    File d'attente persistante.

    Les cles sont uniques par file : une demande pour une cle portee par
    un job vivant (waiting, delayed, active) est fusionnee avec lui.
    """

    def __init__(
        self,
        policy: QueuePolicy,
        repository: IJobRepository,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        """
        Args:
            policy: Politique de la file
            repository: Stockage des jobs
            clock: Horloge (injectable pour les tests)
        """
        self.policy = policy
        self.repository = repository
        self._clock = clock
        self._limiter: Optional[SlidingWindowRateLimiter] = None
        if policy.rate_limit_max:
            self._limiter = SlidingWindowRateLimiter(
                policy.rate_limit_max, policy.rate_limit_window_ms / 1000
            )

    @property
    def name(self) -> str:
        return self.policy.name

    def _new_job(self, key: str, payload: dict[str, Any], delay_ms: int) -> Job:
        now = self._clock()
        return Job(
            queue=self.name,
            key=key,
            payload=payload,
            state=JobState.DELAYED if delay_ms > 0 else JobState.WAITING,
            max_attempts=self.policy.max_attempts,
            run_at=now + timedelta(milliseconds=delay_ms),
            created_at=now,
        )

    def schedule_if_absent(
        self, key: str, payload: dict[str, Any], delay_ms: int = 0
    ) -> tuple[Job, bool]:
        """
        Planifie un job sauf si un job vivant porte deja la cle.

        Un job termine (completed, failed) sous la meme cle est efface puis
        remplace.

        Returns:
            (job, True si un nouveau job a ete cree)
        """
        existing = self.repository.get_by_key(self.name, key)
        if existing is not None:
            if existing.state.is_live:
                logger.debug("Job deja planifie", queue=self.name, key=key, job_id=existing.id)
                return existing, False
            self.repository.delete(existing.id)

        job = self.repository.add(self._new_job(key, payload, delay_ms))
        logger.debug("Job planifie", queue=self.name, key=key, job_id=job.id, delay_ms=delay_ms)
        return job, True

    def schedule_forced(self, key: str, payload: dict[str, Any], delay_ms: int = 0) -> Job:
        """
        Planifie toujours un nouveau job, sous la cle {key}-{timestamp_ms}.
        """
        timestamp = int(self._clock().timestamp() * 1000)
        forced_key = f"{key}-{timestamp}"
        while self.repository.get_by_key(self.name, forced_key) is not None:
            timestamp += 1
            forced_key = f"{key}-{timestamp}"

        job = self.repository.add(self._new_job(forced_key, payload, delay_ms))
        logger.debug("Job force planifie", queue=self.name, key=forced_key, job_id=job.id)
        return job

    def get(self, key: str) -> Optional[Job]:
        return self.repository.get_by_key(self.name, key)

    def request_cancel(self, key: str) -> Optional[JobState]:
        """
        Annule le job porte par une cle.

        - active : le drapeau cancel_requested est pose, le handler s'arrete
          a son prochain point de controle
        - waiting/delayed : le job est supprime

        Le worker peut tourner dans un autre processus : les ecritures sont
        conditionnees a l'etat en base, jamais faites depuis une copie lue.

        Returns:
            L'etat du job au moment de la demande, None si aucun job vivant
        """
        job = self.get(key)
        if job is None or not job.state.is_live:
            return None

        state = job.state
        if state != JobState.ACTIVE and not self.repository.delete_pending(job.id):
            # Pris par un worker entre la lecture et la suppression
            state = JobState.ACTIVE
        if state == JobState.ACTIVE and not self.repository.request_cancel(job.id):
            logger.debug("Job deja termine, annulation ignoree", queue=self.name, key=key)
            return None
        logger.info("Annulation demandee", queue=self.name, key=key, state=state.value)
        return state

    def list(self, states: Optional[list[JobState]] = None, limit: int = 50) -> list[Job]:
        return self.repository.list_jobs(self.name, states, limit)

    def counts(self) -> dict[JobState, int]:
        return self.repository.count_by_state(self.name)

    def prune(self) -> int:
        """
        Applique la retention : jobs termines (24h, nombre max) et en echec (7j).

        Returns:
            Nombre de jobs supprimes
        """
        now = self._clock()
        removed = self.repository.prune(
            self.name,
            JobState.COMPLETED,
            now - self.policy.keep_completed_age,
            self.policy.keep_completed_count,
        )
        removed += self.repository.prune(
            self.name, JobState.FAILED, now - self.policy.keep_failed_age
        )
        if removed:
            logger.debug("Jobs purges", queue=self.name, removed=removed)
        return removed

    async def execute(self, job: Job, handler: JobHandler) -> Job:
        """
        Execute un job deja pris (etat active) et enregistre son issue.

        - succes : completed avec le resultat du handler
        - TargetGoneError : completed sans effet (cible supprimee)
        - autre erreur : delayed avec backoff, puis failed quand les
          tentatives sont epuisees
        """
        context = JobContext(job, self)
        logger.info("Job demarre", queue=self.name, key=job.key, job_id=job.id, attempt=job.attempts_made + 1)
        try:
            result = await handler(context)
        except TargetGoneError as e:
            result = {"skipped": True, "reason": str(e)}
            logger.info("Cible disparue, job ignore", queue=self.name, job_id=job.id, reason=str(e))
        except Exception as e:
            return self._record_failure(context.job, e)

        job = context.job
        job.attempts_made += 1
        job.state = JobState.COMPLETED
        job.progress = 100
        job.result = result
        job.error = None
        job.finished_at = self._clock()
        job = self.repository.update(job)
        logger.info("Job termine", queue=self.name, key=job.key, job_id=job.id)
        self.prune()
        return job

    def _record_failure(self, job: Job, error: Exception) -> Job:
        job.attempts_made += 1
        job.error = str(error) or error.__class__.__name__
        now = self._clock()
        if job.attempts_made < job.max_attempts:
            job.state = JobState.DELAYED
            job.run_at = now + self.policy.backoff_delay(job.attempts_made)
            logger.warning(
                "Job en echec, nouvelle tentative planifiee",
                queue=self.name,
                job_id=job.id,
                attempt=job.attempts_made,
                run_at=job.run_at.isoformat(),
                error=job.error,
            )
        else:
            job.state = JobState.FAILED
            job.finished_at = now
            logger.error(
                "Job en echec definitif",
                queue=self.name,
                job_id=job.id,
                attempts=job.attempts_made,
                error=job.error,
            )
        job = self.repository.update(job)
        self.prune()
        return job

    def _claim(self) -> tuple[Optional[Job], float]:
        """
        Prend le prochain job echu si la limite de debit le permet.

        Returns:
            (job ou None, secondes a attendre imposees par le limiteur)
        """
        if self._limiter is not None:
            wait = self._limiter.wait_time()
            if wait > 0:
                return None, wait

        job = self.repository.claim_next(self.name, self._clock())
        if job is not None and self._limiter is not None:
            self._limiter.record()
        return job, 0.0

    async def run(
        self,
        handler: JobHandler,
        until_idle: bool = False,
        stop_event: Optional[asyncio.Event] = None,
        poll_interval: float = 1.0,
    ) -> int:
        """
        Boucle de traitement de la file.

        Args:
            handler: Coroutine executant un job
            until_idle: S'arreter quand la file est vide (jobs differes compris)
            stop_event: Evenement d'arret
            poll_interval: Attente maximale entre deux interrogations

        Returns:
            Nombre de jobs executes
        """
        recovered = self.repository.requeue_active(self.name)
        if recovered:
            logger.warning("Jobs interrompus remis en attente", queue=self.name, count=recovered)

        processed = 0
        running: set[asyncio.Task] = set()
        while stop_event is None or not stop_event.is_set():
            throttle = 0.0
            while len(running) < self.policy.concurrency:
                job, throttle = self._claim()
                if job is None:
                    break
                running.add(asyncio.create_task(self.execute(job, handler)))

            if running:
                done, running = await asyncio.wait(
                    running, timeout=poll_interval, return_when=asyncio.FIRST_COMPLETED
                )
                for task in done:
                    task.result()
                    processed += 1
                continue

            next_run = self.repository.next_run_at(self.name)
            if next_run is None and until_idle:
                break

            wait = poll_interval
            if throttle > 0:
                wait = min(wait, throttle)
            elif next_run is not None:
                wait = min(wait, max((next_run - self._clock()).total_seconds(), 0.0))
            wait = max(wait, 0.01)
            await self._sleep(wait, stop_event)

        if running:
            await asyncio.gather(*running)
            processed += len(running)
        return processed

    async def _sleep(self, seconds: float, stop_event: Optional[asyncio.Event]) -> None:
        if stop_event is None:
            await asyncio.sleep(seconds)
            return
        try:
            await asyncio.wait_for(stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass
