"""
Interfaces ports pour les fournisseurs de métadonnées.

Un fournisseur déclare son identifiant, les types de médias supportés et
l'ensemble des opérations optionnelles qu'il implémente (capacités). Le
registre interroge ces capacités avant toute sélection.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional

from src.core.entities.catalog import MediaKind
from src.core.value_objects.metadata import (
    AudioMetadata,
    PersonMetadata,
    SearchResult,
    SeasonMetadata,
    SeriesMetadata,
    VideoMetadata,
)


class ScraperCapability(Enum):
    """Opérations optionnelles d'un fournisseur."""

    SEARCH_VIDEO = "search-video"
    SEARCH_SERIES = "search-series"
    SEARCH_AUDIO = "search-audio"
    VIDEO_METADATA = "video-metadata"
    SERIES_METADATA = "series-metadata"
    SEASON_METADATA = "season-metadata"
    EPISODE_METADATA = "episode-metadata"
    PERSON_METADATA = "person-metadata"
    AUDIO_METADATA = "audio-metadata"


class ScraperProvider(ABC):
    """
    Interface de base d'un fournisseur de métadonnées.

    Les opérations optionnelles lèvent NotImplementedError par défaut ;
    chaque implémentation les surcharge et les déclare dans `capabilities`.
    """

    @property
    @abstractmethod
    def id(self) -> str:
        """Identifiant stable (ex: 'tmdb')."""
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Nom lisible."""
        ...

    @property
    @abstractmethod
    def supported_kinds(self) -> frozenset[MediaKind]:
        """Types de médias supportés."""
        ...

    @property
    @abstractmethod
    def capabilities(self) -> frozenset[ScraperCapability]:
        """Opérations implémentées."""
        ...

    @abstractmethod
    def is_configured(self) -> bool:
        """Vrai si les identifiants requis sont présents."""
        ...

    def supports(self, capability: ScraperCapability) -> bool:
        """Vérifie qu'une opération est implémentée."""
        return capability in self.capabilities

    async def search_video(
        self,
        query: str,
        year: Optional[int] = None,
        video_type: Optional[str] = None,
    ) -> list[SearchResult]:
        """Recherche des films (ou tout type vidéo), triés par pertinence."""
        raise NotImplementedError

    async def search_series(self, query: str) -> list[SearchResult]:
        """Recherche des séries, triées par pertinence."""
        raise NotImplementedError

    async def search_audio(self, query: str) -> list[SearchResult]:
        """Recherche des pistes audio."""
        raise NotImplementedError

    async def get_video_metadata(self, external_id: str) -> Optional[VideoMetadata]:
        """Enregistrement complet d'une vidéo, None si inconnu."""
        raise NotImplementedError

    async def get_series_metadata(self, external_id: str) -> Optional[SeriesMetadata]:
        """Enregistrement complet d'une série, None si inconnue."""
        raise NotImplementedError

    async def get_season_metadata(
        self, series_external_id: str, season_number: int
    ) -> Optional[SeasonMetadata]:
        """Enregistrement complet d'une saison, None si inconnue."""
        raise NotImplementedError

    async def get_episode_metadata(
        self, series_external_id: str, season: int, episode: int
    ) -> Optional[VideoMetadata]:
        """Enregistrement complet d'un épisode, None si inconnu."""
        raise NotImplementedError

    async def get_audio_metadata(self, external_id: str) -> Optional[AudioMetadata]:
        """Enregistrement complet d'une piste audio, None si inconnue."""
        raise NotImplementedError

    async def get_person_metadata(self, external_id: str) -> Optional[PersonMetadata]:
        """Fiche d'une personne, None si inconnue."""
        raise NotImplementedError

    async def close(self) -> None:
        """Libère les ressources réseau."""
        return None
