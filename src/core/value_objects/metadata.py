"""
Enregistrements renvoyes par les fournisseurs de metadonnees.

SearchResult est un candidat de recherche ; les *Metadata sont les
enregistrements complets appliques par la fusion de metadonnees.
"""

from dataclasses import dataclass
from datetime import date
from typing import Optional


@dataclass(frozen=True)
class SearchResult:
    """
    Candidat renvoye par une recherche.

    Attributs:
        external_id: Identifiant chez le fournisseur (ex: "movie-27205")
        title: Titre
        year: Annee de sortie
        video_type: "movie", "tv_series" ou None
        poster_url: URL de l'affiche
        overview: Resume
        confidence: Score 0-1 defini par le fournisseur
        scraper_id: Fournisseur d'origine
    """

    external_id: str
    title: str
    year: Optional[int] = None
    video_type: Optional[str] = None
    poster_url: Optional[str] = None
    overview: Optional[str] = None
    confidence: Optional[float] = None
    scraper_id: Optional[str] = None


@dataclass(frozen=True)
class CreditInfo:
    """Credit tel que renvoye par un fournisseur."""

    name: str
    type: str = "actor"
    role: Optional[str] = None
    order: Optional[int] = None
    photo_url: Optional[str] = None
    tmdb_id: Optional[int] = None
    tvdb_id: Optional[int] = None
    imdb_id: Optional[str] = None


@dataclass(frozen=True)
class VideoMetadata:
    """Enregistrement complet d'un film ou d'un episode."""

    external_id: str
    title: str
    original_title: Optional[str] = None
    description: Optional[str] = None
    release_date: Optional[date] = None
    rating: Optional[str] = None
    runtime: Optional[int] = None
    genres: tuple[str, ...] = ()
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    logo_url: Optional[str] = None
    show_name: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    episode_title: Optional[str] = None
    credits: tuple[CreditInfo, ...] = ()


@dataclass(frozen=True)
class SeriesMetadata:
    """Enregistrement complet d'une serie."""

    external_id: str
    title: str
    original_title: Optional[str] = None
    description: Optional[str] = None
    first_air_date: Optional[date] = None
    last_air_date: Optional[date] = None
    status: Optional[str] = None
    rating: Optional[float] = None
    genres: tuple[str, ...] = ()
    poster_url: Optional[str] = None
    backdrop_url: Optional[str] = None
    thumbnail_url: Optional[str] = None
    logo_url: Optional[str] = None
    season_count: Optional[int] = None
    credits: tuple[CreditInfo, ...] = ()


@dataclass(frozen=True)
class SeasonMetadata:
    """Enregistrement complet d'une saison."""

    external_id: str
    season_number: int
    name: Optional[str] = None
    description: Optional[str] = None
    air_date: Optional[date] = None
    poster_url: Optional[str] = None
    episode_count: Optional[int] = None


@dataclass(frozen=True)
class AudioMetadata:
    """Enregistrement complet d'une piste audio."""

    external_id: str
    title: str
    artist: Optional[str] = None
    album_artist: Optional[str] = None
    album: Optional[str] = None
    track: Optional[int] = None
    disc: Optional[int] = None
    year: Optional[int] = None
    genre: Optional[str] = None
    album_art_url: Optional[str] = None


@dataclass(frozen=True)
class PersonMetadata:
    """Fiche d'une personne chez un fournisseur."""

    external_id: str
    name: str
    biography: Optional[str] = None
    birth_date: Optional[date] = None
    death_date: Optional[date] = None
    birth_place: Optional[str] = None
    photo_url: Optional[str] = None
    tmdb_id: Optional[int] = None
    tvdb_id: Optional[int] = None
    imdb_id: Optional[str] = None
