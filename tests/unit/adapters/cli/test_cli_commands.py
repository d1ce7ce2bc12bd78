"""
Tests unitaires pour les commandes CLI de mediacat.

Le Container est mocke (patch dans helpers.py, la ou @with_container()
l'instancie) ; les commandes sont invoquees via l'application Typer.
"""

from datetime import date
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from typer.testing import CliRunner

from src.core.entities.catalog import Library, LibraryType
from src.core.entities.details import Person
from src.core.entities.job import Job, JobState
from src.core.errors import TargetGoneError
from src.logging_config import verbosity_level
from src.main import app
from src.services.person_enricher import PersonRefreshResult

runner = CliRunner()


@pytest.fixture(autouse=True)
def log_to_tmp(tmp_path: Path, monkeypatch) -> None:
    """Les logs de la CLI vont dans un repertoire temporaire."""
    monkeypatch.setenv("MEDIACAT_LOG_FILE", str(tmp_path / "logs" / "mediacat.log"))


@pytest.fixture
def mock_container():
    """Mock le Container injecte par @with_container()."""
    with patch("src.adapters.cli.helpers.Container") as mock_cls:
        container = MagicMock()
        mock_cls.return_value = container
        container.database.init = MagicMock()
        container.scraper_registry.return_value.close = AsyncMock()
        container.image_fetcher.return_value.close = AsyncMock()
        yield container


class TestHelp:
    """Aide de l'application."""

    def test_lists_commands(self) -> None:
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        commands = ("library-add", "scan", "cancel-scan", "jobs", "work", "scrape", "person-refresh", "search")
        for command in commands:
            assert command in result.stdout

    def test_version(self) -> None:
        result = runner.invoke(app, ["version"])

        assert result.exit_code == 0
        assert "mediacat v" in result.stdout


class TestLibraryCommands:
    """library-add et library-list."""

    def test_add_missing_directory(self, mock_container, tmp_path: Path) -> None:
        result = runner.invoke(app, ["library-add", "TV", str(tmp_path / "missing")])

        assert result.exit_code == 1
        mock_container.library_repository.return_value.save.assert_not_called()

    def test_add_library(self, mock_container, tmp_path: Path) -> None:
        save = mock_container.library_repository.return_value.save
        save.side_effect = lambda library: Library(
            id=1, name=library.name, path=library.path, library_type=library.library_type
        )

        result = runner.invoke(app, ["library-add", "TV", str(tmp_path), "--type", "television"])

        assert result.exit_code == 0
        saved = save.call_args.args[0]
        assert saved.library_type == LibraryType.TELEVISION
        assert saved.path == tmp_path.resolve()

    def test_list_empty(self, mock_container) -> None:
        mock_container.library_repository.return_value.list_all.return_value = []

        result = runner.invoke(app, ["library-list"])

        assert result.exit_code == 0
        assert "Aucune bibliotheque" in result.stdout


class TestQueueCommands:
    """scan, cancel-scan et jobs."""

    def test_scan_unknown_library(self, mock_container) -> None:
        mock_container.library_repository.return_value.get_by_id.return_value = None

        result = runner.invoke(app, ["scan", "9"])

        assert result.exit_code == 1
        mock_container.dispatcher.return_value.queue_scan.assert_not_called()

    def test_scan_is_queued(self, mock_container) -> None:
        dispatcher = mock_container.dispatcher.return_value
        dispatcher.queue_scan.return_value = (Job(id=3, queue="scan", key="scan-1"), True)

        result = runner.invoke(app, ["scan", "1", "--full"])

        assert result.exit_code == 0
        dispatcher.queue_scan.assert_called_once_with(1, full_scan=True)
        assert "scan-1" in result.stdout

    def test_scan_already_running(self, mock_container) -> None:
        dispatcher = mock_container.dispatcher.return_value
        dispatcher.queue_scan.return_value = (
            Job(id=3, queue="scan", key="scan-1", state=JobState.ACTIVE),
            False,
        )

        result = runner.invoke(app, ["scan", "1"])

        assert "active" in result.stdout

    def test_cancel_active_scan(self, mock_container) -> None:
        mock_container.dispatcher.return_value.cancel_scan.return_value = JobState.ACTIVE

        result = runner.invoke(app, ["cancel-scan", "1"])

        assert result.exit_code == 0
        assert "Annulation demandee" in result.stdout

    def test_jobs_unknown_queue(self, mock_container) -> None:
        result = runner.invoke(app, ["jobs", "--queue", "nope"])

        assert result.exit_code == 1


class TestPersonRefresh:
    """person-refresh."""

    def test_refreshed_person(self, mock_container) -> None:
        person = Person(id=4, name="Bryan Cranston", birth_date=date(1956, 3, 7), birth_place="Hollywood")
        refresh = AsyncMock(return_value=PersonRefreshResult(person, scraper_id="tmdb", photo_saved=True))
        mock_container.person_enricher.return_value.refresh = refresh

        result = runner.invoke(app, ["person-refresh", "4", "--force"])

        assert result.exit_code == 0
        refresh.assert_awaited_once_with(4, force=True)
        assert "rafraichi depuis tmdb" in result.stdout
        assert "1956-03-07 (Hollywood)" in result.stdout

    def test_nothing_found(self, mock_container) -> None:
        mock_container.person_enricher.return_value.refresh = AsyncMock(
            return_value=PersonRefreshResult(Person(id=4, name="Figurant"))
        )

        result = runner.invoke(app, ["person-refresh", "4"])

        assert result.exit_code == 0
        assert "Aucune nouvelle fiche" in result.stdout

    def test_unknown_person(self, mock_container) -> None:
        mock_container.person_enricher.return_value.refresh = AsyncMock(
            side_effect=TargetGoneError("Person 9 not found")
        )

        result = runner.invoke(app, ["person-refresh", "9"])

        assert result.exit_code == 1
        assert "introuvable" in result.stdout


class TestVerbosity:
    """Niveau de log selon -v / -q."""

    def test_levels(self) -> None:
        assert verbosity_level("INFO") == "INFO"
        assert verbosity_level("INFO", verbose=1) == "DEBUG"
        assert verbosity_level("INFO", verbose=5) == "TRACE"
        assert verbosity_level("DEBUG", quiet=True) == "ERROR"
