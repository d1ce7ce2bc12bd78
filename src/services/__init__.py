"""
Couche services (cas d'usage).

- LibraryScanner : parcours des bibliotheques
- JobQueue / ScrapeDispatcher : files durables et planification
- ScraperRegistry : selection des fournisseurs avec repli
- MetadataMerger / ImageIngestion : fusion des metadonnees et des images
- ScanJobHandler, MediaScrapeWorker, CollectionScrapeWorker : handlers des files
"""

from src.services.cancellation import CancellationRegistry, CancellationToken
from src.services.collection_scrape_worker import CollectionScrapeWorker
from src.services.image_ingestion import ImageIngestion, ImageRequest
from src.services.job_dispatcher import ScrapeDispatcher
from src.services.job_queue import (
    COLLECTION_POLICY,
    COLLECTION_QUEUE,
    METADATA_POLICY,
    METADATA_QUEUE,
    SCAN_POLICY,
    SCAN_QUEUE,
    JobContext,
    JobQueue,
    QueuePolicy,
)
from src.services.media_scrape_worker import MediaScrapeWorker
from src.services.metadata_merge import MergeResult, MetadataMerger, ScrapeOutcome
from src.services.person_resolver import PersonResolver
from src.services.scan_worker import ScanJobHandler
from src.services.scanner import LibraryScanner, ScanReport
from src.services.scraper_registry import Match, ScraperRegistry

__all__ = [
    "COLLECTION_POLICY",
    "COLLECTION_QUEUE",
    "CancellationRegistry",
    "CancellationToken",
    "CollectionScrapeWorker",
    "ImageIngestion",
    "ImageRequest",
    "JobContext",
    "JobQueue",
    "LibraryScanner",
    "METADATA_POLICY",
    "METADATA_QUEUE",
    "Match",
    "MediaScrapeWorker",
    "MergeResult",
    "MetadataMerger",
    "PersonResolver",
    "QueuePolicy",
    "SCAN_POLICY",
    "SCAN_QUEUE",
    "ScanJobHandler",
    "ScanReport",
    "ScrapeDispatcher",
    "ScrapeOutcome",
    "ScraperRegistry",
]
