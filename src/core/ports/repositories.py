"""
Interfaces ports pour les repositories.

Interfaces abstraites (ports) définissant les contrats pour la persistance du
catalogue et des files d'attente. Les opérations sont volontairement réduites :
upsert par chemin (Media), find-or-create par (bibliothèque, nom, parent)
(Collection), upsert par cible (lignes de détail), suppression puis insertion
(crédits), comptage par propriétaire (images).
"""

from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

from src.core.entities.catalog import Collection, CollectionType, Library, Media
from src.core.entities.details import (
    AudioDetails,
    Credit,
    Image,
    ImageOwner,
    ImageType,
    Person,
    SeasonDetails,
    ShowDetails,
    VideoDetails,
)
from src.core.entities.job import Job, JobState


class ILibraryRepository(ABC):
    """Interface de stockage des bibliothèques."""

    @abstractmethod
    def get_by_id(self, library_id: int) -> Optional[Library]:
        """Récupère une bibliothèque par son ID."""
        ...

    @abstractmethod
    def list_all(self) -> list[Library]:
        """Liste toutes les bibliothèques."""
        ...

    @abstractmethod
    def save(self, library: Library) -> Library:
        """Sauvegarde une bibliothèque (insertion ou mise à jour)."""
        ...


class ICollectionRepository(ABC):
    """
    Interface de stockage des collections.

    Invariant : une seule collection par (library_id, name, parent_id).
    """

    @abstractmethod
    def get_by_id(self, collection_id: int) -> Optional[Collection]:
        """Récupère une collection par son ID."""
        ...

    @abstractmethod
    def find_or_create(
        self,
        library_id: int,
        name: str,
        parent_id: Optional[int],
        collection_type: CollectionType,
    ) -> tuple[Collection, bool]:
        """
        Trouve ou crée une collection ; met à jour son type s'il a changé.

        Retourne :
            (collection, True si créée)
        """
        ...

    @abstractmethod
    def list_by_library(self, library_id: int) -> list[Collection]:
        """Liste les collections d'une bibliothèque."""
        ...


class IMediaRepository(ABC):
    """Interface de stockage des médias (uniques par chemin)."""

    @abstractmethod
    def get_by_id(self, media_id: int) -> Optional[Media]:
        """Récupère un média par son ID (sans les flux)."""
        ...

    @abstractmethod
    def get_by_path(self, path: Path) -> Optional[Media]:
        """Récupère un média par son chemin."""
        ...

    @abstractmethod
    def upsert(self, media: Media) -> Media:
        """Insère ou met à jour un média et ses flux, par chemin."""
        ...

    @abstractmethod
    def rename(self, media_id: int, name: str) -> None:
        """Change le nom affiché d'un média."""
        ...

    @abstractmethod
    def list_by_collection(self, collection_id: int) -> list[Media]:
        """Liste les médias rattachés à une collection."""
        ...

    @abstractmethod
    def count_by_library(self, library_id: int) -> int:
        """Compte les médias d'une bibliothèque."""
        ...


class IDetailsRepository(ABC):
    """Interface de stockage des lignes de détail (upsert par cible)."""

    @abstractmethod
    def get_video_details(self, media_id: int) -> Optional[VideoDetails]:
        ...

    @abstractmethod
    def upsert_video_details(self, details: VideoDetails) -> VideoDetails:
        ...

    @abstractmethod
    def get_audio_details(self, media_id: int) -> Optional[AudioDetails]:
        ...

    @abstractmethod
    def upsert_audio_details(self, details: AudioDetails) -> AudioDetails:
        ...

    @abstractmethod
    def get_show_details(self, collection_id: int) -> Optional[ShowDetails]:
        ...

    @abstractmethod
    def upsert_show_details(self, details: ShowDetails) -> ShowDetails:
        ...

    @abstractmethod
    def get_season_details(self, collection_id: int) -> Optional[SeasonDetails]:
        ...

    @abstractmethod
    def upsert_season_details(self, details: SeasonDetails) -> SeasonDetails:
        ...


class IPersonRepository(ABC):
    """Interface de stockage des personnes dédupliquées."""

    @abstractmethod
    def get_by_id(self, person_id: int) -> Optional[Person]:
        ...

    @abstractmethod
    def find_by_imdb_id(self, imdb_id: str) -> Optional[Person]:
        ...

    @abstractmethod
    def find_by_tmdb_id(self, tmdb_id: int) -> Optional[Person]:
        ...

    @abstractmethod
    def find_by_tvdb_id(self, tvdb_id: int) -> Optional[Person]:
        ...

    @abstractmethod
    def find_by_name(self, name: str) -> Optional[Person]:
        """Rapprochement par nom exact."""
        ...

    @abstractmethod
    def save(self, person: Person) -> Person:
        ...


class ICreditRepository(ABC):
    """Interface de stockage des crédits (remplacement complet)."""

    @abstractmethod
    def replace_video_credits(
        self, video_details_id: int, credits: Sequence[Credit]
    ) -> list[Credit]:
        """Supprime tous les crédits des détails vidéo puis insère la liste."""
        ...

    @abstractmethod
    def replace_show_credits(
        self, show_details_id: int, credits: Sequence[Credit]
    ) -> list[Credit]:
        """Supprime tous les crédits de la série puis insère la liste."""
        ...

    @abstractmethod
    def list_video_credits(self, video_details_id: int) -> list[Credit]:
        ...

    @abstractmethod
    def list_show_credits(self, show_details_id: int) -> list[Credit]:
        ...


class IImageRepository(ABC):
    """
    Interface de stockage des images.

    Invariant : au plus une image primaire par (propriétaire, type).
    """

    @abstractmethod
    def count(self, owner: ImageOwner, image_type: Optional[ImageType] = None) -> int:
        """Compte les images d'un propriétaire, éventuellement d'un seul type."""
        ...

    @abstractmethod
    def get_primary(self, owner: ImageOwner, image_type: ImageType) -> Optional[Image]:
        ...

    @abstractmethod
    def save_image(self, image: Image) -> Image:
        """
        Enregistre une image.

        Si l'image est primaire, retire d'abord le drapeau primaire des autres
        images du même (propriétaire, type), puis remplace l'image existante de
        ce type ou en crée une nouvelle.
        """
        ...

    @abstractmethod
    def list_for_owner(self, owner: ImageOwner) -> list[Image]:
        ...


class IJobRepository(ABC):
    """Interface de stockage des jobs des files d'attente."""

    @abstractmethod
    def get_by_id(self, job_id: int) -> Optional[Job]:
        ...

    @abstractmethod
    def get_by_key(self, queue: str, key: str) -> Optional[Job]:
        ...

    @abstractmethod
    def add(self, job: Job) -> Job:
        ...

    @abstractmethod
    def update(self, job: Job) -> Job:
        ...

    @abstractmethod
    def delete(self, job_id: int) -> bool:
        ...

    @abstractmethod
    def request_cancel(self, job_id: int) -> bool:
        """Pose le drapeau d'annulation d'un job actif. False si le job n'est plus actif."""
        ...

    @abstractmethod
    def delete_pending(self, job_id: int) -> bool:
        """Supprime un job waiting/delayed. False s'il a ete pris ou n'existe plus."""
        ...

    @abstractmethod
    def claim_next(self, queue: str, now: datetime) -> Optional[Job]:
        """Passe le prochain job échu (waiting/delayed) à l'état active."""
        ...

    @abstractmethod
    def requeue_active(self, queue: str) -> int:
        """Remet en attente les jobs restés actifs (processus interrompu)."""
        ...

    @abstractmethod
    def is_cancel_requested(self, job_id: int) -> bool:
        """Relit le drapeau d'annulation depuis le stockage."""
        ...

    @abstractmethod
    def list_jobs(
        self,
        queue: str,
        states: Optional[Sequence[JobState]] = None,
        limit: int = 50,
    ) -> list[Job]:
        ...

    @abstractmethod
    def count_by_state(self, queue: str) -> dict[JobState, int]:
        ...

    @abstractmethod
    def next_run_at(self, queue: str) -> Optional[datetime]:
        """Date du prochain job en attente, None si la file est vide."""
        ...

    @abstractmethod
    def prune(
        self,
        queue: str,
        state: JobState,
        older_than: datetime,
        keep_count: Optional[int] = None,
    ) -> int:
        """
        Supprime les jobs terminés trop anciens ou au-delà de keep_count.

        Retourne :
            Nombre de jobs supprimés
        """
        ...
