"""
Adaptateur pour les operations sur le systeme de fichiers.

Implementation concrete de IFileSystem pour le parcours des bibliotheques et
l'ecriture des images. Definit aussi les extensions reconnues par type de
bibliotheque.
"""

import os
from pathlib import Path

from src.core.entities.catalog import LibraryType
from src.core.errors import FilesystemReadError
from src.core.ports.file_system import DirectoryListing, IFileSystem

# Extensions video supportees
VIDEO_EXTENSIONS: frozenset[str] = frozenset({
    ".mp4", ".mkv", ".avi", ".mov", ".wmv", ".flv", ".webm", ".m4v"
})

# Extensions audio supportees (bibliotheques Music)
AUDIO_EXTENSIONS: frozenset[str] = frozenset({
    ".mp3", ".flac", ".wav", ".aac", ".ogg", ".m4a", ".wma"
})

# Suffixe des repertoires de vignettes pre-generees
TRICKPLAY_SUFFIX = ".trickplay"


def extensions_for(library_type: LibraryType) -> frozenset[str]:
    """Retourne les extensions scannees pour un type de bibliotheque."""
    if library_type == LibraryType.MUSIC:
        return AUDIO_EXTENSIONS
    return VIDEO_EXTENSIONS


class FileSystemAdapter(IFileSystem):
    """
    Implementation de IFileSystem pour le systeme de fichiers reel.

    Le listing suit les liens symboliques : un lien vers un repertoire est
    traite comme un repertoire, un lien casse est ignore.
    """

    def list_directory(self, path: Path) -> DirectoryListing:
        """Liste un repertoire, trie par nom, liens resolus."""
        try:
            entries = sorted(os.scandir(path), key=lambda e: e.name)
        except OSError as e:
            raise FilesystemReadError(str(path), e.strerror or str(e)) from e

        files: list[Path] = []
        directories: list[Path] = []
        for entry in entries:
            try:
                # follow_symlinks=True par defaut : resout la cible
                if entry.is_dir():
                    directories.append(Path(entry.path))
                elif entry.is_file():
                    files.append(Path(entry.path))
            except OSError:
                # Lien casse ou cible inaccessible
                continue
        return DirectoryListing(files=tuple(files), directories=tuple(directories))

    def is_directory(self, path: Path) -> bool:
        """Verifie si un chemin est un repertoire."""
        return path.is_dir()

    def write_bytes(self, path: Path, content: bytes) -> int:
        """Ecrit le contenu, cree les repertoires parents si necessaire."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        return len(content)
