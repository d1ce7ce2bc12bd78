"""
Producteur des trois files : scan, metadata-scrape, collection-scrape.

Construit les cles idempotentes et les requetes, et applique l'ordre de
scraping des collections : series, artistes et films immediatement ;
saisons et albums differes pour laisser leurs parents se resoudre.
"""

from typing import Iterable, Optional

from loguru import logger

from src.core.entities.catalog import CollectionType, Library, LibraryType
from src.core.entities.job import Job, JobState
from src.core.value_objects.requests import (
    CollectionScrapeRequest,
    LibraryScanRequest,
    MediaScrapeRequest,
)
from src.services.cancellation import CancellationRegistry
from src.services.job_queue import JobQueue
from src.services.scanner import ScanReport

# Delai minimum des collections enfants, et delai par parent planifie
MIN_CHILD_DELAY_MS = 5000
PER_PARENT_DELAY_MS = 2000

IMMEDIATE_TYPES = (CollectionType.SHOW, CollectionType.ARTIST, CollectionType.FILM)


def scan_key(library_id: int) -> str:
    return f"scan-{library_id}"


def media_scrape_key(media_id: int) -> str:
    return f"scrape-{media_id}"


def collection_scrape_key(collection_id: int) -> str:
    return f"collection-scrape-{collection_id}"


def child_delay_ms(parent_count: int) -> int:
    """Delai d'une saison (ou d'un album) : max(5000, parents x 2000) ms."""
    return max(MIN_CHILD_DELAY_MS, parent_count * PER_PARENT_DELAY_MS)


class ScrapeDispatcher:
    """
    Planifie les jobs des trois files.

    Attributes:
        scan_queue: File des scans de bibliotheque
        metadata_queue: File d'enrichissement des medias
        collection_queue: File d'enrichissement des collections
    """

    def __init__(
        self,
        scan_queue: JobQueue,
        metadata_queue: JobQueue,
        collection_queue: JobQueue,
        cancellation: CancellationRegistry,
    ) -> None:
        self.scan_queue = scan_queue
        self.metadata_queue = metadata_queue
        self.collection_queue = collection_queue
        self._cancellation = cancellation

    def queue_scan(self, library_id: int, full_scan: bool = False) -> tuple[Job, bool]:
        """
        Planifie le scan d'une bibliotheque.

        Un scan deja planifie ou en cours pour la bibliotheque absorbe la demande.

        Returns:
            (job, True si un nouveau job a ete cree)
        """
        request = LibraryScanRequest(library_id=library_id, full_scan=full_scan)
        return self.scan_queue.schedule_if_absent(scan_key(library_id), request.to_payload())

    def cancel_scan(self, library_id: int) -> Optional[JobState]:
        """
        Annule le scan d'une bibliotheque.

        Un scan actif recoit le drapeau d'annulation (en base et dans le jeton
        local) ; un scan en attente est supprime.

        Returns:
            Etat du job annule, None si aucun scan vivant
        """
        state = self.scan_queue.request_cancel(scan_key(library_id))
        if state == JobState.ACTIVE:
            self._cancellation.cancel(library_id)
        return state

    def queue_media_scrape(self, request: MediaScrapeRequest, delay_ms: int = 0) -> Job:
        """Planifie un enrichissement force (cle horodatee, jamais fusionne)."""
        return self.metadata_queue.schedule_forced(
            media_scrape_key(request.media_id), request.to_payload(), delay_ms
        )

    def queue_media_scrapes(self, requests: Iterable[MediaScrapeRequest]) -> int:
        """
        Planifie des enrichissements en masse sous cles idempotentes.

        Returns:
            Nombre de jobs crees (hors demandes fusionnees)
        """
        created = 0
        for request in requests:
            _, was_created = self.metadata_queue.schedule_if_absent(
                media_scrape_key(request.media_id), request.to_payload()
            )
            created += int(was_created)
        return created

    def queue_collection_scrape(self, request: CollectionScrapeRequest, delay_ms: int = 0) -> Job:
        """Planifie l'enrichissement d'une collection (cle horodatee)."""
        return self.collection_queue.schedule_forced(
            collection_scrape_key(request.collection_id), request.to_payload(), delay_ms
        )

    def queue_collection_scrapes(self, requests: Iterable[CollectionScrapeRequest]) -> list[Job]:
        """
        Planifie des enrichissements de collections en respectant l'ordre parent/enfant.

        Series, artistes et films partent sans delai ; chaque saison est
        differee de max(5000, series x 2000) ms et chaque album de
        max(5000, artistes x 2000) ms. Les collections generiques sont ignorees.

        Returns:
            Jobs crees
        """
        requests = list(requests)
        show_count = sum(1 for r in requests if r.collection_type == CollectionType.SHOW)
        artist_count = sum(1 for r in requests if r.collection_type == CollectionType.ARTIST)
        delays = {
            CollectionType.SEASON: child_delay_ms(show_count),
            CollectionType.ALBUM: child_delay_ms(artist_count),
        }

        jobs: list[Job] = []
        for request in requests:
            if request.collection_type in IMMEDIATE_TYPES:
                delay = 0
            elif request.collection_type in delays:
                delay = delays[request.collection_type]
            else:
                continue
            jobs.append(self.queue_collection_scrape(request, delay))

        logger.info(
            "Enrichissement des collections planifie",
            jobs=len(jobs),
            shows=show_count,
            artists=artist_count,
        )
        return jobs

    def enqueue_after_scan(self, library: Library, report: ScanReport) -> dict[str, int]:
        """
        Planifie l'enrichissement de tout ce que le scan a touche.

        Les medias des bibliotheques Film ne sont pas planifies : le scrape
        de la collection Film les enrichit en cascade.

        Returns:
            {"media_jobs": n, "collection_jobs": n}
        """
        media_jobs = 0
        if library.library_type != LibraryType.FILM:
            media_jobs = self.queue_media_scrapes(
                MediaScrapeRequest(
                    media_id=media.media_id,
                    media_name=media.hints.collection_name or media.name,
                    media_kind=media.kind,
                    year=media.hints.year,
                    season=media.hints.season,
                    episode=media.hints.episode,
                    show_name=media.hints.show_name,
                )
                for media in report.media
            )

        collection_jobs = self.queue_collection_scrapes(
            CollectionScrapeRequest(
                collection_id=collection.collection_id,
                collection_name=collection.name,
                collection_type=collection.collection_type,
                library_id=library.id,
                parent_show_id=collection.parent_id,
                season_number=collection.season_number,
                year=collection.year,
            )
            for collection in report.collections
        )
        return {"media_jobs": media_jobs, "collection_jobs": len(collection_jobs)}
