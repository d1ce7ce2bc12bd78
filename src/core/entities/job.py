"""
Entité job de file d'attente.

Un job est persisté dans la table jobs et consommé au moins une fois par
le worker de sa file.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class JobState(Enum):
    """Etat d'un job dans sa file."""

    WAITING = "waiting"
    DELAYED = "delayed"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_live(self) -> bool:
        """Un job vivant bloque un nouveau job sous la meme cle."""
        return self in (JobState.WAITING, JobState.DELAYED, JobState.ACTIVE)


@dataclass
class Job:
    """
    Unite de travail persistee.

    Attributs :
        id : Identifiant interne
        queue : Nom de la file (scan, metadata-scrape, collection-scrape)
        key : Cle idempotente unique dans la file
        payload : Requete serialisee (dict)
        state : Etat courant
        attempts_made : Nombre de tentatives deja executees
        max_attempts : Nombre maximum de tentatives
        run_at : Date a partir de laquelle le job peut etre pris
        progress : Avancement 0-100
        result : Resultat du handler (dict) une fois termine
        error : Message de la derniere erreur
        cancel_requested : Annulation cooperative demandee
    """

    id: Optional[int] = None
    queue: str = ""
    key: str = ""
    payload: dict[str, Any] = field(default_factory=dict)
    state: JobState = JobState.WAITING
    attempts_made: int = 0
    max_attempts: int = 1
    run_at: Optional[datetime] = None
    progress: int = 0
    result: Optional[dict[str, Any]] = None
    error: Optional[str] = None
    cancel_requested: bool = False
    created_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None
