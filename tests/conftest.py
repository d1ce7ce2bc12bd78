"""
Fixtures pytest partagees pour les tests mediacat.

Ce module contient les fixtures communes utilisees dans les tests:
- Base SQLite en memoire et repositories SQLModel
- Mocks des interfaces (IMediaProber, IImageFetcher)
- Arbre de bibliotheque temporaire
"""

from pathlib import Path
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from src.adapters.file_system import FileSystemAdapter
from src.adapters.parsing.media_name_parser import MediaNameParser
from src.core.entities.catalog import Library, LibraryType
from src.core.ports.images import FetchedImage, IImageFetcher
from src.core.ports.parser import IMediaProber
from src.core.value_objects.probe import ProbeResult
from src.infrastructure.persistence.database import _enable_foreign_keys, init_db
from src.infrastructure.persistence.repositories import (
    SQLModelCollectionRepository,
    SQLModelCreditRepository,
    SQLModelDetailsRepository,
    SQLModelImageRepository,
    SQLModelJobRepository,
    SQLModelLibraryRepository,
    SQLModelMediaRepository,
    SQLModelPersonRepository,
)


@pytest.fixture
def engine():
    """Engine SQLite en memoire, partage par toutes les connexions du test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def library_repo(session) -> SQLModelLibraryRepository:
    return SQLModelLibraryRepository(session)


@pytest.fixture
def collection_repo(session) -> SQLModelCollectionRepository:
    return SQLModelCollectionRepository(session)


@pytest.fixture
def media_repo(session) -> SQLModelMediaRepository:
    return SQLModelMediaRepository(session)


@pytest.fixture
def details_repo(session) -> SQLModelDetailsRepository:
    return SQLModelDetailsRepository(session)


@pytest.fixture
def person_repo(session) -> SQLModelPersonRepository:
    return SQLModelPersonRepository(session)


@pytest.fixture
def credit_repo(session) -> SQLModelCreditRepository:
    return SQLModelCreditRepository(session)


@pytest.fixture
def image_repo(session) -> SQLModelImageRepository:
    return SQLModelImageRepository(session)


@pytest.fixture
def job_repo(session) -> SQLModelJobRepository:
    return SQLModelJobRepository(session)


@pytest.fixture
def mock_prober() -> MagicMock:
    """
    Mock de IMediaProber.

    Retourne une duree de 120s sans flux par defaut.
    """
    mock = MagicMock(spec=IMediaProber)
    mock.probe = AsyncMock(return_value=ProbeResult(duration=120, streams=()))
    return mock


@pytest.fixture
def mock_image_fetcher() -> MagicMock:
    """Mock de IImageFetcher renvoyant un petit JPEG fictif."""
    mock = MagicMock(spec=IImageFetcher)
    mock.fetch = AsyncMock(
        return_value=FetchedImage(content=b"\xff\xd8fake", format="jpg", width=10, height=15)
    )
    mock.close = AsyncMock()
    return mock


@pytest.fixture
def file_system() -> FileSystemAdapter:
    return FileSystemAdapter()


@pytest.fixture
def name_parser() -> MediaNameParser:
    return MediaNameParser()


def make_tree(root: Path, files: list[str]) -> None:
    """Cree les fichiers (vides) d'un arbre de bibliotheque."""
    for relative in files:
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(b"")


@pytest.fixture
def tv_library(tmp_path: Path, library_repo) -> Library:
    """Bibliotheque Television avec une serie de deux saisons."""
    root = tmp_path / "tv"
    make_tree(
        root,
        [
            "Breaking Bad/Season 1/Breaking.Bad.S01E01.Pilot.720p.mkv",
            "Breaking Bad/Season 1/Breaking.Bad.S01E02.mkv",
            "Breaking Bad/Season 2/Breaking.Bad.S02E01.mkv",
        ],
    )
    return library_repo.save(
        Library(name="TV", path=root, library_type=LibraryType.TELEVISION)
    )


@pytest.fixture
def film_library(tmp_path: Path, library_repo) -> Library:
    """Bibliotheque Film avec un dossier par film."""
    root = tmp_path / "films"
    make_tree(
        root,
        [
            "Inception (2010)/inception.1080p.mkv",
            "Heat (1995)/heat.mkv",
        ],
    )
    return library_repo.save(Library(name="Films", path=root, library_type=LibraryType.FILM))
