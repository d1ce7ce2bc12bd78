"""
Service de scan des bibliotheques.

Parcourt recursivement l'arbre d'une bibliotheque, cree les collections
(une par repertoire) et les medias (un par fichier reconnu), sonde les
nouveaux fichiers et extrait les indices de recherche des noms.

Le parcours est idempotent : re-scanner un arbre inchange ne cree aucune
ligne. Les erreurs de lecture d'un repertoire ou de traitement d'un fichier
sont consignees dans le rapport sans interrompre le parcours.
"""

import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from loguru import logger

from src.adapters.file_system import TRICKPLAY_SUFFIX, extensions_for
from src.core.entities.catalog import (
    CollectionType,
    Library,
    LibraryType,
    Media,
    MediaKind,
)
from src.core.errors import FilesystemReadError, ProbeError
from src.core.ports.file_system import IFileSystem
from src.core.ports.parser import IMediaNameParser, IMediaProber
from src.core.ports.repositories import ICollectionRepository, IMediaRepository
from src.core.value_objects.parsed_info import MediaHints
from src.core.value_objects.probe import ProbeResult
from src.services.cancellation import CancellationToken

# Le dernier pourcent est reserve a la fin du scan
PROGRESS_CEILING = 95

# Type de collection par (type de bibliotheque, profondeur)
COLLECTION_TYPES: dict[tuple[LibraryType, int], CollectionType] = {
    (LibraryType.TELEVISION, 0): CollectionType.SHOW,
    (LibraryType.TELEVISION, 1): CollectionType.SEASON,
    (LibraryType.MUSIC, 0): CollectionType.ARTIST,
    (LibraryType.MUSIC, 1): CollectionType.ALBUM,
    (LibraryType.FILM, 0): CollectionType.FILM,
}


def collection_type_for(library_type: LibraryType, depth: int) -> CollectionType:
    """Type d'une collection selon sa profondeur (0 = sous la racine)."""
    return COLLECTION_TYPES.get((library_type, depth), CollectionType.GENERIC)


def scan_progress(processed: int, found: int) -> int:
    """Avancement du scan, plafonne a 95 avant la fin."""
    return min(PROGRESS_CEILING, math.floor(processed / max(found, 1) * PROGRESS_CEILING))


async def probe_or_empty(prober: IMediaProber, path: Path) -> ProbeResult:
    """
    Sonde un fichier, en degradant vers un resultat vide en cas d'echec.

    Le media est cree quand meme, avec une duree de 0.
    """
    try:
        return await prober.probe(path)
    except ProbeError as e:
        logger.warning("Sondage impossible, duree a 0", path=str(path), error=str(e))
        return ProbeResult.empty()


@dataclass(frozen=True)
class ScannedMedia:
    """Media touche par le scan, avec ses indices de recherche."""

    media_id: int
    name: str
    kind: MediaKind
    hints: MediaHints = field(default_factory=MediaHints)


@dataclass(frozen=True)
class ScannedCollection:
    """Collection touchee par le scan."""

    collection_id: int
    name: str
    collection_type: CollectionType
    parent_id: Optional[int] = None
    season_number: Optional[int] = None
    year: Optional[int] = None


@dataclass
class ScanReport:
    """
    Resultat d'un scan.

    Attributs:
        files_found: Fichiers reconnus (extension de la bibliotheque)
        files_processed: Fichiers traites (crees, deja connus ou en erreur)
        collections_created: Nouvelles collections
        media_created: Nouveaux medias
        errors: Messages d'erreur consignes pendant le parcours
        media: Medias a enrichir, dans l'ordre du parcours
        collections: Collections a enrichir, dans l'ordre du parcours
    """

    files_found: int = 0
    files_processed: int = 0
    collections_created: int = 0
    media_created: int = 0
    errors: list[str] = field(default_factory=list)
    media: list[ScannedMedia] = field(default_factory=list)
    collections: list[ScannedCollection] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Resume serialisable stocke comme resultat du job."""
        return {
            "files_found": self.files_found,
            "files_processed": self.files_processed,
            "collections_created": self.collections_created,
            "media_created": self.media_created,
            "errors": list(self.errors),
        }


ProgressCallback = Callable[[int], None]


class LibraryScanner:
    """
    Service de scan d'une bibliotheque.

    Coordonne:
    - Le systeme de fichiers (IFileSystem) pour lister les repertoires
    - Le prober (IMediaProber) pour la duree et les flux des nouveaux fichiers
    - Le parser de noms (IMediaNameParser) pour les indices de recherche
    - Les repositories de collections et de medias
    """

    def __init__(
        self,
        file_system: IFileSystem,
        prober: IMediaProber,
        parser: IMediaNameParser,
        collection_repo: ICollectionRepository,
        media_repo: IMediaRepository,
    ) -> None:
        self._file_system = file_system
        self._prober = prober
        self._parser = parser
        self._collection_repo = collection_repo
        self._media_repo = media_repo

    async def scan(
        self,
        library: Library,
        full_scan: bool = False,
        token: Optional[CancellationToken] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> ScanReport:
        """
        Scanne une bibliotheque.

        Args:
            library: Bibliotheque a parcourir
            full_scan: Re-signaler aussi les medias et collections deja connus
            token: Jeton d'annulation consulte a chaque repertoire
            on_progress: Rappel recevant l'avancement (0-100)

        Returns:
            ScanReport

        Raises:
            FilesystemReadError: La racine de la bibliotheque n'existe pas
            ScanCancelledError: Le scan a ete annule
        """
        if not self._file_system.is_directory(library.path):
            raise FilesystemReadError(str(library.path), "library path does not exist")

        logger.info(
            "Debut du scan",
            library_id=library.id,
            path=str(library.path),
            full_scan=full_scan,
        )
        report = ScanReport()
        await self._scan_directory(
            library=library,
            directory=library.path,
            parent_id=None,
            collection_path=[],
            depth=0,
            full_scan=full_scan,
            token=token,
            on_progress=on_progress,
            report=report,
        )
        if on_progress is not None:
            on_progress(100)

        logger.info(
            "Scan termine",
            library_id=library.id,
            files_found=report.files_found,
            media_created=report.media_created,
            collections_created=report.collections_created,
            errors=len(report.errors),
        )
        return report

    async def _scan_directory(
        self,
        library: Library,
        directory: Path,
        parent_id: Optional[int],
        collection_path: list[str],
        depth: int,
        full_scan: bool,
        token: Optional[CancellationToken],
        on_progress: Optional[ProgressCallback],
        report: ScanReport,
    ) -> None:
        if token is not None:
            token.raise_if_cancelled(library.id)

        try:
            listing = self._file_system.list_directory(directory)
        except FilesystemReadError as e:
            logger.warning("Repertoire illisible", path=str(directory), error=e.reason)
            report.errors.append(str(e))
            return

        extensions = extensions_for(library.library_type)
        media_files = [f for f in listing.files if f.suffix.lower() in extensions]
        report.files_found += len(media_files)

        for file_path in media_files:
            try:
                await self._process_file(
                    library, file_path, parent_id, collection_path, full_scan, report
                )
            except Exception as e:
                logger.warning("Erreur de traitement", path=str(file_path), error=str(e))
                report.errors.append(f"Error processing {file_path}: {e}")
            report.files_processed += 1
            if on_progress is not None:
                on_progress(scan_progress(report.files_processed, report.files_found))

        for subdirectory in listing.directories:
            name = subdirectory.name
            if name.startswith(".") or name.endswith(TRICKPLAY_SUFFIX):
                continue

            collection_type = collection_type_for(library.library_type, depth)
            collection, created = self._collection_repo.find_or_create(
                library.id, name, parent_id, collection_type
            )
            if created:
                report.collections_created += 1
            if created or full_scan:
                report.collections.append(
                    ScannedCollection(
                        collection_id=collection.id,
                        name=name,
                        collection_type=collection_type,
                        parent_id=parent_id,
                        season_number=self._parser.season_number(name),
                        year=(
                            self._parser.parse_movie(name).year
                            if collection_type == CollectionType.FILM
                            else None
                        ),
                    )
                )

            await self._scan_directory(
                library=library,
                directory=subdirectory,
                parent_id=collection.id,
                collection_path=[*collection_path, name],
                depth=depth + 1,
                full_scan=full_scan,
                token=token,
                on_progress=on_progress,
                report=report,
            )

    async def _process_file(
        self,
        library: Library,
        file_path: Path,
        collection_id: Optional[int],
        collection_path: list[str],
        full_scan: bool,
        report: ScanReport,
    ) -> None:
        stem = file_path.stem
        if library.library_type == LibraryType.FILM and collection_path:
            name = collection_path[-1]
        else:
            name = stem

        existing = self._media_repo.get_by_path(file_path)
        if existing is not None:
            if full_scan:
                report.media.append(
                    ScannedMedia(
                        media_id=existing.id,
                        name=name,
                        kind=existing.kind,
                        hints=self._hints(library, name, stem, collection_path),
                    )
                )
            return

        trickplay = file_path.with_name(f"{stem}{TRICKPLAY_SUFFIX}")
        probe = await probe_or_empty(self._prober, file_path)
        media = self._media_repo.upsert(
            Media(
                path=file_path,
                name=name,
                kind=library.media_kind,
                duration=probe.duration,
                library_id=library.id,
                collection_id=collection_id,
                thumbnails=trickplay if self._file_system.is_directory(trickplay) else None,
                streams=list(probe.streams),
            )
        )
        report.media_created += 1
        report.media.append(
            ScannedMedia(
                media_id=media.id,
                name=name,
                kind=media.kind,
                hints=self._hints(library, name, stem, collection_path),
            )
        )
        logger.debug("Media cree", media_id=media.id, path=str(file_path))

    def _hints(
        self,
        library: Library,
        name: str,
        stem: str,
        collection_path: list[str],
    ) -> MediaHints:
        """Indices de recherche d'un media (episode, ou film avec annee)."""
        if library.library_type != LibraryType.MUSIC:
            episode = self._parser.parse_episode(stem)
            if episode is not None:
                return MediaHints(
                    show_name=episode.show_name or self._parser.show_name_from_path(collection_path),
                    season=episode.season,
                    episode=episode.episode,
                )

        year = None
        if collection_path:
            year = self._parser.parse_movie(collection_path[-1]).year
        if year is None:
            year = self._parser.parse_movie(name).year

        return MediaHints(
            year=year,
            collection_name=(
                collection_path[-1]
                if library.library_type == LibraryType.FILM and collection_path
                else None
            ),
        )
