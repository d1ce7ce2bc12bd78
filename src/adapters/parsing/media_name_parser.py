"""
Implementation du parser de noms de medias.

Les episodes sont reconnus par expressions regulieres (S01E02, 1x02) ; les
titres et annees de films passent par guessit, avec un repli sur une
extraction d'annee quand guessit ne trouve pas de titre.
"""

import re
from typing import Any, Optional, Sequence

from guessit import guessit

from src.core.ports.parser import IMediaNameParser
from src.core.value_objects.parsed_info import EpisodeHint, MovieHint

# S01E02 / s1e2, delimite par un separateur ou les bornes du nom
SE_PATTERN = re.compile(r"(?:^|[.\s_-])s(\d{1,2})e(\d{1,2})(?:[.\s_-]|$)", re.IGNORECASE)

# 1x02 / 12x103
X_PATTERN = re.compile(r"(?:^|[.\s_-])(\d{1,2})x(\d{2,3})(?:[.\s_-]|$)", re.IGNORECASE)

# Titre d'episode avant les tags qualite
EPISODE_TITLE_PATTERN = re.compile(
    r"^[.\s_-]*(.+?)(?:\s*[.\s_-]\s*(?:\d{3,4}p|hdtv|web|bluray|x264|h\.?264|aac|mp3|proper|repack).*)?$",
    re.IGNORECASE,
)

SEASON_FOLDER_PATTERN = re.compile(r"^season\s*\d+$", re.IGNORECASE)
SEASON_NUMBER_PATTERN = re.compile(r"season\s*(\d+)", re.IGNORECASE)
YEAR_PATTERN = re.compile(r"\b((?:19|20)\d{2})\b")
TRAILING_YEAR_PATTERN = re.compile(r"\s*[(\[]?(?:19|20)\d{2}[)\]]?\s*$")
QUALITY_PATTERN = re.compile(
    r"[.\s_-](?:\d{3,4}p|bluray|web|hdtv|dvd|brrip|x264|h\.?264)", re.IGNORECASE
)

# Marqueurs retires d'un nom de media pour retrouver le nom de la serie
SHOW_NAME_STRIP_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\s*S\d{1,2}E\d{1,2}.*", re.IGNORECASE),
    re.compile(r"\s*\d{1,2}x\d{1,2}.*", re.IGNORECASE),
    re.compile(r"\s*-?\s*\d{1,2}\d{2}.*"),
    re.compile(r"\s*\[.*\].*"),
    re.compile(r"\s*\(.*\).*"),
)


def _spaces(text: str) -> str:
    """Remplace les separateurs . et _ par des espaces."""
    return re.sub(r"[._]", " ", text).strip()


def extract_year(text: str) -> Optional[int]:
    """Extrait une annee 19xx/20xx isolee, None si absente."""
    match = YEAR_PATTERN.search(text)
    return int(match.group(1)) if match else None


def strip_trailing_year(name: str) -> str:
    """
    Retire une annee finale d'un nom de dossier.

    Exemple: "Inception (2010)" -> "Inception"
    """
    stripped = TRAILING_YEAR_PATTERN.sub("", name).strip()
    return stripped or name


class MediaNameParser(IMediaNameParser):
    """
    Parser de noms de fichiers et de dossiers.

    Les noms passes sont des noms sans extension (stem) ou des noms de dossier.
    """

    def parse_episode(self, filename: str) -> Optional[EpisodeHint]:
        """
        Reconnait un episode dans un nom de fichier.

        Args:
            filename: Nom sans extension (ex: "Show.Name.S01E02.Pilot.720p")

        Returns:
            EpisodeHint avec saison, episode, nom de serie et titre si presents
        """
        match = SE_PATTERN.search(filename) or X_PATTERN.search(filename)
        if match is None:
            return None

        season = int(match.group(1))
        episode = int(match.group(2))

        show_name = _spaces(filename[: match.start()]) if match.start() > 0 else ""

        episode_title: Optional[str] = None
        title_match = EPISODE_TITLE_PATTERN.match(filename[match.end():])
        if title_match and title_match.group(1):
            episode_title = re.sub(r"^\s*-\s*", "", _spaces(title_match.group(1))).strip()

        return EpisodeHint(
            season=season,
            episode=episode,
            show_name=show_name or None,
            episode_title=episode_title or None,
        )

    def parse_movie(self, name: str) -> MovieHint:
        """
        Extrait titre et annee d'un nom de film.

        Args:
            name: Nom de fichier sans extension ou nom de dossier

        Returns:
            MovieHint ; le titre retombe sur le nom nettoye si guessit echoue
        """
        result = guessit(name, {"type": "movie"})
        title = self._extract_title(result)
        year = result.get("year")
        if isinstance(year, list):
            year = year[0]
        if title:
            return MovieHint(title=title, year=year if year else extract_year(name))
        return self._parse_movie_fallback(name)

    def show_name_from_path(self, collection_path: Sequence[str]) -> Optional[str]:
        """Nom de serie depuis le chemin de collections (parent ou grand-parent)."""
        if not collection_path:
            return None
        parent = collection_path[-1]
        if SEASON_FOLDER_PATTERN.match(parent) and len(collection_path) > 1:
            return collection_path[-2]
        return parent

    def season_number(self, name: str) -> Optional[int]:
        """Numero de saison d'un nom de dossier, None si absent."""
        match = SEASON_NUMBER_PATTERN.search(name)
        return int(match.group(1)) if match else None

    def clean_show_name(self, media_name: str) -> str:
        """
        Retire les marqueurs d'episode d'un nom de media.

        Exemple: "Breaking Bad S01E01" -> "Breaking Bad"
        """
        result = media_name
        for pattern in SHOW_NAME_STRIP_PATTERNS:
            result = pattern.sub("", result)
        return result.strip()

    def _extract_title(self, result: dict[str, Any]) -> Optional[str]:
        """Titre guessit, None si absent."""
        title = result.get("title")
        if isinstance(title, list):
            title = title[0]
        return str(title) if title else None

    def _parse_movie_fallback(self, name: str) -> MovieHint:
        """Titre = nom jusqu'aux tags qualite, annee si presente."""
        end = len(name)
        quality = QUALITY_PATTERN.search(name)
        if quality:
            end = quality.start()
        title = _spaces(name[:end]).rstrip("( ").strip()
        return MovieHint(title=title or name, year=extract_year(name))
