"""
Requetes de travail echangees via les files d'attente.

Trois formes, une par file. Ce sont les contrats producteur/consommateur :
tout producteur externe doit respecter ces formes et les conventions de cles.

Usage:
    request = MediaScrapeRequest(media_id=42, media_name="Inception", year=2010)
    payload = request.to_payload()          # dict serialisable en JSON
    same = MediaScrapeRequest.from_payload(payload)
"""

from dataclasses import asdict, dataclass, fields
from enum import Enum
from typing import Any, Optional

from src.core.entities.catalog import CollectionType, MediaKind


def _serialize(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    return value


class _Payload:
    """Conversion dict <-> dataclass commune aux trois requetes."""

    _enum_fields: dict[str, type[Enum]] = {}

    def to_payload(self) -> dict[str, Any]:
        """Retourne un dict serialisable en JSON."""
        return {key: _serialize(value) for key, value in asdict(self).items()}

    @classmethod
    def from_payload(cls, payload: dict[str, Any]):
        """Reconstruit la requete, en ignorant les cles inconnues."""
        known = {f.name for f in fields(cls)}
        data = {key: value for key, value in payload.items() if key in known}
        for name, enum_type in cls._enum_fields.items():
            if data.get(name) is not None:
                data[name] = enum_type(data[name])
        return cls(**data)


@dataclass(frozen=True)
class LibraryScanRequest(_Payload):
    """Demande de scan d'une bibliotheque (full_scan = rescan force)."""

    library_id: int
    full_scan: bool = False


@dataclass(frozen=True)
class MediaScrapeRequest(_Payload):
    """
    Demande d'enrichissement d'un media.

    Attributs:
        media_id: Media cible
        media_name: Titre a rechercher
        media_kind: Video ou Audio
        year, season, episode, show_name: Indices de recherche
        scraper_id, external_id: Fournisseur epingle (pas de recherche)
        skip_images: Ne telecharger que les types d'images absents
        images_only: Ne rafraichir que les images
    """

    media_id: int
    media_name: str = ""
    media_kind: MediaKind = MediaKind.VIDEO
    year: Optional[int] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    show_name: Optional[str] = None
    scraper_id: Optional[str] = None
    external_id: Optional[str] = None
    skip_images: bool = False
    images_only: bool = False

    _enum_fields = {"media_kind": MediaKind}

    @property
    def is_pinned(self) -> bool:
        return bool(self.scraper_id and self.external_id)

    @property
    def is_episode(self) -> bool:
        return self.season is not None and self.episode is not None


@dataclass(frozen=True)
class CollectionScrapeRequest(_Payload):
    """
    Demande d'enrichissement d'une collection.

    parent_show_id / parent_external_id / parent_scraper_id ne concernent
    que les saisons : l'identite de la serie parente chez le fournisseur.
    """

    collection_id: int
    collection_name: str = ""
    collection_type: CollectionType = CollectionType.GENERIC
    library_id: Optional[int] = None
    parent_show_id: Optional[int] = None
    parent_external_id: Optional[str] = None
    parent_scraper_id: Optional[str] = None
    season_number: Optional[int] = None
    year: Optional[int] = None
    scraper_id: Optional[str] = None
    external_id: Optional[str] = None
    skip_images: bool = False
    images_only: bool = False

    _enum_fields = {"collection_type": CollectionType}

    @property
    def is_pinned(self) -> bool:
        return bool(self.scraper_id and self.external_id)
