"""
Fixtures des tests de services : ingestion d'images, fusion de
metadonnees et donnees de catalogue pre-remplies.
"""

from pathlib import Path

import pytest

from src.core.entities.catalog import Collection, CollectionType, Library, LibraryType, Media
from src.services.cancellation import CancellationRegistry
from src.services.image_ingestion import ImageIngestion
from src.services.job_dispatcher import ScrapeDispatcher
from src.services.job_queue import COLLECTION_POLICY, METADATA_POLICY, SCAN_POLICY, JobQueue
from src.services.metadata_merge import MetadataMerger
from src.services.person_resolver import PersonResolver


@pytest.fixture
def images_dir(tmp_path: Path) -> Path:
    return tmp_path / "images"


@pytest.fixture
def ingestion(mock_image_fetcher, file_system, image_repo, images_dir) -> ImageIngestion:
    return ImageIngestion(mock_image_fetcher, file_system, image_repo, images_dir)


@pytest.fixture
def merger(media_repo, details_repo, credit_repo, image_repo, person_repo, ingestion) -> MetadataMerger:
    return MetadataMerger(
        media_repo, details_repo, credit_repo, image_repo, PersonResolver(person_repo), ingestion
    )


@pytest.fixture
def library(library_repo) -> Library:
    return library_repo.save(
        Library(name="TV", path=Path("/srv/tv"), library_type=LibraryType.TELEVISION)
    )


@pytest.fixture
def show(collection_repo, library) -> Collection:
    show, _ = collection_repo.find_or_create(library.id, "Breaking Bad", None, CollectionType.SHOW)
    return show


@pytest.fixture
def season(collection_repo, library, show) -> Collection:
    season, _ = collection_repo.find_or_create(library.id, "Season 1", show.id, CollectionType.SEASON)
    return season


@pytest.fixture
def episode(media_repo, library, season) -> Media:
    return media_repo.upsert(
        Media(
            path=Path("/srv/tv/Breaking Bad/Season 1/Breaking.Bad.S01E01.mkv"),
            name="Breaking.Bad.S01E01",
            library_id=library.id,
            collection_id=season.id,
        )
    )


@pytest.fixture
def dispatcher(job_repo) -> ScrapeDispatcher:
    return ScrapeDispatcher(
        JobQueue(SCAN_POLICY, job_repo),
        JobQueue(METADATA_POLICY, job_repo),
        JobQueue(COLLECTION_POLICY, job_repo),
        CancellationRegistry(),
    )
