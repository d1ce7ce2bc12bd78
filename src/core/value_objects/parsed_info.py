"""
Objets valeur pour les indices extraits des noms de fichiers et de dossiers.

Les indices servent a la recherche chez les fournisseurs : titre, annee,
saison/episode et nom de serie.
"""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EpisodeHint:
    """
    Episode reconnu dans un nom de fichier (S01E02, 1x02).

    Attributs:
        season: Numero de saison
        episode: Numero d'episode
        show_name: Nom de serie deduit du prefixe, None si absent
        episode_title: Titre deduit du suffixe, sans les tags qualite
    """

    season: int
    episode: int
    show_name: Optional[str] = None
    episode_title: Optional[str] = None


@dataclass(frozen=True)
class MovieHint:
    """Titre et annee d'un film extraits d'un nom (fichier ou dossier)."""

    title: str
    year: Optional[int] = None


@dataclass(frozen=True)
class MediaHints:
    """
    Indices rattaches a un media nouvellement scanne.

    Combine le parsing du nom de fichier et le chemin de collections.
    """

    show_name: Optional[str] = None
    season: Optional[int] = None
    episode: Optional[int] = None
    year: Optional[int] = None
    collection_name: Optional[str] = None
