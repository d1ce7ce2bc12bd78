"""
Container d'injection de dependances via dependency-injector.

Contexte explicite construit une fois au demarrage : configuration, base,
adapters, repositories, les trois files, le registre des fournisseurs et
les handlers des workers.
"""

from dependency_injector import containers, providers

from .adapters.api.cache import APICache
from .adapters.file_system import FileSystemAdapter
from .adapters.images.image_fetcher import HttpImageFetcher
from .adapters.parsing.media_name_parser import MediaNameParser
from .adapters.probing import FFprobeProber, MediaInfoProber
from .adapters.scrapers import TMDBScraper, TVDBScraper
from .config import Settings
from .infrastructure.persistence.database import get_session, init_db
from .infrastructure.persistence.repositories import (
    SQLModelCollectionRepository,
    SQLModelCreditRepository,
    SQLModelDetailsRepository,
    SQLModelImageRepository,
    SQLModelJobRepository,
    SQLModelLibraryRepository,
    SQLModelMediaRepository,
    SQLModelPersonRepository,
)
from .services.cancellation import CancellationRegistry
from .services.collection_scrape_worker import CollectionScrapeWorker
from .services.image_ingestion import ImageIngestion
from .services.job_dispatcher import ScrapeDispatcher
from .services.job_queue import COLLECTION_POLICY, METADATA_POLICY, SCAN_POLICY, JobQueue
from .services.media_scrape_worker import MediaScrapeWorker
from .services.metadata_merge import MetadataMerger
from .services.person_enricher import PersonEnricher
from .services.person_resolver import PersonResolver
from .services.scan_worker import ScanJobHandler
from .services.scanner import LibraryScanner
from .services.scraper_registry import ScraperRegistry


def build_scraper_registry(*scrapers) -> ScraperRegistry:
    """Registre des fournisseurs, dans l'ordre de priorite (TMDB puis TVDB)."""
    registry = ScraperRegistry()
    for scraper in scrapers:
        registry.register(scraper)
    return registry


class Container(containers.DeclarativeContainer):
    """Container DI de l'application.

    Une seule session est partagee : tout le travail tourne dans la boucle
    asyncio d'un seul thread, et les lectures croisees entre repositories
    voient ainsi les ecritures des autres.

    Utilisation :
        container = Container()
        container.database.init()  # Initialise la DB une fois
        dispatcher = container.dispatcher()
        dispatcher.queue_scan(library_id=1)
    """

    # Configuration - singleton charge une seule fois
    config = providers.Singleton(Settings)

    # Database - Resource pour initialisation unique
    database = providers.Resource(init_db)

    session = providers.Singleton(lambda: next(get_session()))

    # Adapters - implementations concretes des ports
    file_system = providers.Singleton(FileSystemAdapter)
    name_parser = providers.Singleton(MediaNameParser)
    prober = providers.Selector(
        config.provided.prober,
        mediainfo=providers.Singleton(MediaInfoProber),
        ffprobe=providers.Singleton(
            FFprobeProber,
            ffprobe_path=config.provided.ffprobe_path,
        ),
    )

    # Cache API - Singleton pour partage entre fournisseurs
    api_cache = providers.Singleton(
        APICache,
        cache_dir=config.provided.cache_dir,
    )

    # Fournisseurs - un fournisseur sans cle reste enregistre mais n'est pas selectionne
    tmdb_scraper = providers.Singleton(
        TMDBScraper,
        api_key=config.provided.tmdb_api_key,
        cache=api_cache,
        language=config.provided.tmdb_language,
    )
    tvdb_scraper = providers.Singleton(
        TVDBScraper,
        api_key=config.provided.tvdb_api_key,
        cache=api_cache,
        language=config.provided.tvdb_language,
    )
    scraper_registry = providers.Singleton(
        build_scraper_registry,
        tmdb_scraper,
        tvdb_scraper,
    )
    image_fetcher = providers.Singleton(HttpImageFetcher)

    # Repositories - Factory sur la session partagee
    library_repository = providers.Factory(SQLModelLibraryRepository, session=session)
    collection_repository = providers.Factory(SQLModelCollectionRepository, session=session)
    media_repository = providers.Factory(SQLModelMediaRepository, session=session)
    details_repository = providers.Factory(SQLModelDetailsRepository, session=session)
    person_repository = providers.Factory(SQLModelPersonRepository, session=session)
    credit_repository = providers.Factory(SQLModelCreditRepository, session=session)
    image_repository = providers.Factory(SQLModelImageRepository, session=session)
    job_repository = providers.Factory(SQLModelJobRepository, session=session)

    # Files d'attente - une instance par file (le limiteur de debit est en memoire)
    scan_queue = providers.Singleton(JobQueue, policy=SCAN_POLICY, repository=job_repository)
    metadata_queue = providers.Singleton(JobQueue, policy=METADATA_POLICY, repository=job_repository)
    collection_queue = providers.Singleton(
        JobQueue, policy=COLLECTION_POLICY, repository=job_repository
    )
    cancellation_registry = providers.Singleton(CancellationRegistry)

    dispatcher = providers.Singleton(
        ScrapeDispatcher,
        scan_queue=scan_queue,
        metadata_queue=metadata_queue,
        collection_queue=collection_queue,
        cancellation=cancellation_registry,
    )

    # Services
    scanner = providers.Factory(
        LibraryScanner,
        file_system=file_system,
        prober=prober,
        parser=name_parser,
        collection_repo=collection_repository,
        media_repo=media_repository,
    )
    image_ingestion = providers.Factory(
        ImageIngestion,
        fetcher=image_fetcher,
        file_system=file_system,
        image_repo=image_repository,
        images_dir=config.provided.images_dir,
    )
    metadata_merger = providers.Factory(
        MetadataMerger,
        media_repo=media_repository,
        details_repo=details_repository,
        credit_repo=credit_repository,
        image_repo=image_repository,
        person_resolver=providers.Factory(PersonResolver, person_repo=person_repository),
        ingestion=image_ingestion,
    )
    person_enricher = providers.Factory(
        PersonEnricher,
        person_repo=person_repository,
        image_repo=image_repository,
        registry=scraper_registry,
        ingestion=image_ingestion,
    )

    # Handlers des workers
    scan_handler = providers.Factory(
        ScanJobHandler,
        library_repo=library_repository,
        scanner=scanner,
        dispatcher=dispatcher,
        cancellation=cancellation_registry,
    )
    media_scrape_worker = providers.Factory(
        MediaScrapeWorker,
        media_repo=media_repository,
        registry=scraper_registry,
        merger=metadata_merger,
        parser=name_parser,
    )
    collection_scrape_worker = providers.Factory(
        CollectionScrapeWorker,
        collection_repo=collection_repository,
        media_repo=media_repository,
        details_repo=details_repository,
        registry=scraper_registry,
        merger=metadata_merger,
        dispatcher=dispatcher,
    )
