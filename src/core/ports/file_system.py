"""
Interfaces ports pour le système de fichiers.

Interfaces abstraites (ports) définissant les contrats pour le parcours en
lecture seule des bibliothèques et l'écriture des images téléchargées.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path


@dataclass(frozen=True)
class DirectoryListing:
    """
    Contenu d'un répertoire après résolution des liens symboliques.

    Attributs :
        files : Fichiers (liens vers fichiers inclus), triés par nom
        directories : Sous-répertoires (liens vers répertoires inclus), triés par nom
    """

    files: tuple[Path, ...] = field(default_factory=tuple)
    directories: tuple[Path, ...] = field(default_factory=tuple)


class IFileSystem(ABC):
    """
    Interface pour les opérations sur les fichiers.

    Le scanner ne fait que lire ; seule l'ingestion d'images écrit.
    """

    @abstractmethod
    def list_directory(self, path: Path) -> DirectoryListing:
        """
        Liste un répertoire en résolvant les liens symboliques.

        Les liens cassés sont ignorés.

        Args :
            path : Répertoire à lister

        Retourne :
            DirectoryListing

        Raises :
            FilesystemReadError : Le répertoire ne peut pas être lu
        """
        ...

    @abstractmethod
    def is_directory(self, path: Path) -> bool:
        """Vérifie si un chemin est un répertoire (liens résolus)."""
        ...

    @abstractmethod
    def write_bytes(self, path: Path, content: bytes) -> int:
        """
        Ecrit un fichier, en créant les répertoires parents.

        Retourne :
            Taille écrite en octets
        """
        ...
