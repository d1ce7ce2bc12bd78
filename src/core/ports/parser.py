"""
Interfaces ports pour le parsing de noms et le sondage des fichiers media.

Interfaces abstraites (ports) definissant les contrats pour extraire des
indices de recherche depuis les noms de fichiers/dossiers et pour obtenir
les faits techniques d'un fichier (duree, flux).
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional, Sequence

from src.core.value_objects.parsed_info import EpisodeHint, MovieHint
from src.core.value_objects.probe import ProbeResult


class IMediaNameParser(ABC):
    """
    Interface pour le parsing de noms de fichiers et de dossiers.

    Les resultats alimentent les indices des requetes de scraping.
    """

    @abstractmethod
    def parse_episode(self, filename: str) -> Optional[EpisodeHint]:
        """
        Reconnait un episode (S01E02, 1x02) dans un nom de fichier.

        Retourne:
            EpisodeHint, ou None si le nom ne designe pas un episode
        """
        ...

    @abstractmethod
    def parse_movie(self, name: str) -> MovieHint:
        """
        Extrait titre et annee d'un nom de film.

        Retourne:
            MovieHint ; le titre est toujours renseigne
        """
        ...

    @abstractmethod
    def show_name_from_path(self, collection_path: Sequence[str]) -> Optional[str]:
        """
        Deduit le nom de la serie depuis le chemin de collections.

        Le grand-parent est utilise quand le parent est un dossier "Season N".
        """
        ...

    @abstractmethod
    def season_number(self, name: str) -> Optional[int]:
        """Extrait le numero de saison d'un nom de dossier ("Season 2" -> 2)."""
        ...

    @abstractmethod
    def clean_show_name(self, media_name: str) -> str:
        """Retire les marqueurs d'episode d'un nom de media."""
        ...


class IMediaProber(ABC):
    """
    Interface pour le sondage technique d'un fichier media.

    Les implementations enveloppent un outil externe (mediainfo, ffprobe).
    """

    @abstractmethod
    async def probe(self, path: Path) -> ProbeResult:
        """
        Sonde un fichier et retourne sa duree et ses flux.

        Args:
            path: Chemin complet du fichier

        Retourne:
            ProbeResult

        Raises:
            ProbeError: Outil absent, code de sortie non nul ou sortie illisible
        """
        ...
