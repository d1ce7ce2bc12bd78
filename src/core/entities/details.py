"""
Entités de métadonnées enrichies.

Lignes de détail rattachées aux médias et collections, personnes dédupliquées,
crédits et images téléchargées. Toutes sont écrites par la fusion de
métadonnées, jamais par le scanner.
"""

from dataclasses import dataclass
from datetime import date
from enum import Enum
from pathlib import Path
from typing import Optional


class CreditType(Enum):
    """Type d'attribution d'un crédit."""

    ACTOR = "Actor"
    DIRECTOR = "Director"
    WRITER = "Writer"
    PRODUCER = "Producer"
    COMPOSER = "Composer"
    CINEMATOGRAPHER = "Cinematographer"
    EDITOR = "Editor"

    @classmethod
    def from_provider(cls, value: Optional[str]) -> "CreditType":
        """Convertit le type renvoyé par un fournisseur (défaut : Actor)."""
        if value:
            for member in cls:
                if member.value.lower() == value.lower():
                    return member
        return cls.ACTOR


class ImageType(Enum):
    """Type d'image, utilisé aussi comme nom de fichier sur disque."""

    POSTER = "Poster"
    BACKDROP = "Backdrop"
    THUMBNAIL = "Thumbnail"
    LOGO = "Logo"
    PHOTO = "Photo"
    ALBUM_ART = "AlbumArt"


class ImageOwnerType(Enum):
    """Type de propriétaire d'une image. La valeur est le dossier de stockage."""

    MEDIA = "media"
    COLLECTION = "collections"
    PERSON = "people"


@dataclass(frozen=True)
class ImageOwner:
    """Propriétaire d'une image (média, collection ou personne)."""

    owner_type: ImageOwnerType
    owner_id: int


@dataclass
class VideoDetails:
    """
    Détails d'un média vidéo (un par média).

    Attributs :
        media_id : Média propriétaire
        scraper_id : Fournisseur ayant produit les données
        external_id : Identifiant chez le fournisseur
        show_name, season, episode : Rattachement pour les épisodes
        rating : Classification (ex: "PG-13")
    """

    id: Optional[int] = None
    media_id: int = 0
    scraper_id: Optional[str] = None
    external_id: Optional[str] = None
    original_title: Optional[str] = None
    show_name: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    description: Optional[str] = None
    release_date: Optional[date] = None
    rating: Optional[str] = None
    runtime: Optional[int] = None
    genres: tuple[str, ...] = ()


@dataclass
class AudioDetails:
    """Détails d'un média audio (un par média)."""

    id: Optional[int] = None
    media_id: int = 0
    artist: Optional[str] = None
    album_artist: Optional[str] = None
    album: Optional[str] = None
    track: Optional[int] = None
    disc: Optional[int] = None
    year: Optional[int] = None
    genre: Optional[str] = None


@dataclass
class ShowDetails:
    """
    Détails d'une collection de type Show (un par collection).

    scraper_id et external_id servent d'identité parente aux saisons.
    """

    id: Optional[int] = None
    collection_id: int = 0
    scraper_id: Optional[str] = None
    external_id: Optional[str] = None
    description: Optional[str] = None
    release_date: Optional[date] = None
    end_date: Optional[date] = None
    status: Optional[str] = None
    rating: Optional[float] = None
    genres: Optional[str] = None


@dataclass
class SeasonDetails:
    """Détails d'une collection de type Season (un par collection)."""

    id: Optional[int] = None
    collection_id: int = 0
    scraper_id: Optional[str] = None
    external_id: Optional[str] = None
    season_number: Optional[int] = None
    description: Optional[str] = None
    release_date: Optional[date] = None


@dataclass
class Person:
    """
    Personne dédupliquée par identifiants externes.

    Priorité de rapprochement : imdb_id, tmdb_id, tvdb_id, puis nom exact.
    """

    id: Optional[int] = None
    name: str = ""
    biography: Optional[str] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    birth_place: Optional[str] = None
    tmdb_id: Optional[int] = None
    tvdb_id: Optional[int] = None
    imdb_id: Optional[str] = None


@dataclass
class Credit:
    """Attribution d'un rôle sur des détails vidéo ou de série."""

    id: Optional[int] = None
    name: str = ""
    role: Optional[str] = None
    credit_type: CreditType = CreditType.ACTOR
    order: Optional[int] = None
    person_id: Optional[int] = None
    video_details_id: Optional[int] = None
    show_details_id: Optional[int] = None


@dataclass
class Image:
    """
    Image téléchargée et stockée localement.

    Invariant : au plus une image is_primary par (propriétaire, image_type).
    """

    id: Optional[int] = None
    owner: Optional[ImageOwner] = None
    image_type: ImageType = ImageType.POSTER
    path: Optional[Path] = None
    width: Optional[int] = None
    height: Optional[int] = None
    format: Optional[str] = None
    file_size: Optional[int] = None
    source_url: Optional[str] = None
    scraper_id: Optional[str] = None
    is_primary: bool = False
