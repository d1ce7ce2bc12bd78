"""
Tests unitaires pour PersonEnricher.

Fournisseurs factices, base SQLite en memoire : verifie l'ordre TMDB puis
TVDB, la mise a jour des champs de la personne et la photo.
"""

from datetime import date

import pytest

from src.core.entities.details import ImageOwner, ImageOwnerType, ImageType, Person
from src.core.errors import TargetGoneError, TransientProviderError
from src.core.value_objects.metadata import PersonMetadata
from src.services.person_enricher import PersonEnricher
from tests.fixtures.fake_scrapers import FakeScraper, registry_with

CRANSTON_TMDB = PersonMetadata(
    external_id="17419",
    name="Bryan Cranston",
    biography="Bryan Lee Cranston is an American actor.",
    birth_date=date(1956, 3, 7),
    birth_place="Hollywood, California, USA",
    photo_url="https://img/bc.jpg",
    tmdb_id=17419,
    imdb_id="nm0186505",
)

CRANSTON_TVDB = PersonMetadata(
    external_id="tvdb-290357",
    name="Bryan Cranston",
    biography="Acteur americain.",
    birth_date=date(1956, 3, 7),
    tvdb_id=290357,
)


@pytest.fixture
def tmdb() -> FakeScraper:
    return FakeScraper("tmdb")


@pytest.fixture
def tvdb() -> FakeScraper:
    return FakeScraper("tvdb")


@pytest.fixture
def enricher(person_repo, image_repo, tmdb, tvdb, ingestion) -> PersonEnricher:
    return PersonEnricher(person_repo, image_repo, registry_with(tmdb, tvdb), ingestion)


class TestRefresh:
    """Tests pour refresh."""

    @pytest.mark.asyncio
    async def test_tmdb_fields_are_written(self, enricher, person_repo, tmdb, tvdb) -> None:
        person = person_repo.save(Person(name="Bryan Cranston", tmdb_id=17419, tvdb_id=290357))
        tmdb.get_person_metadata.return_value = CRANSTON_TMDB

        result = await enricher.refresh(person.id)

        stored = person_repo.get_by_id(person.id)
        assert result.scraper_id == "tmdb"
        assert stored.biography == "Bryan Lee Cranston is an American actor."
        assert stored.birth_date == date(1956, 3, 7)
        assert stored.birth_place == "Hollywood, California, USA"
        assert stored.imdb_id == "nm0186505"
        assert stored.tvdb_id == 290357
        tmdb.get_person_metadata.assert_awaited_once_with("17419")
        tvdb.get_person_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_to_tvdb(self, enricher, person_repo, tmdb, tvdb) -> None:
        person = person_repo.save(Person(name="Bryan Cranston", tmdb_id=17419, tvdb_id=290357))
        tmdb.get_person_metadata.side_effect = TransientProviderError("HTTP 503")
        tvdb.get_person_metadata.return_value = CRANSTON_TVDB

        result = await enricher.refresh(person.id)

        assert result.scraper_id == "tvdb"
        assert person_repo.get_by_id(person.id).biography == "Acteur americain."
        tvdb.get_person_metadata.assert_awaited_once_with("290357")

    @pytest.mark.asyncio
    async def test_person_without_external_ids_is_left_alone(self, enricher, person_repo, tmdb) -> None:
        person = person_repo.save(Person(name="Figurant"))

        result = await enricher.refresh(person.id)

        assert result.scraper_id is None
        tmdb.get_person_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_existing_biography_skipped_unless_forced(self, enricher, person_repo, tmdb) -> None:
        person = person_repo.save(Person(name="Bryan Cranston", biography="Deja la", tmdb_id=17419))
        tmdb.get_person_metadata.return_value = CRANSTON_TMDB

        skipped = await enricher.refresh(person.id)
        forced = await enricher.refresh(person.id, force=True)

        assert skipped.scraper_id is None
        assert forced.scraper_id == "tmdb"
        assert person_repo.get_by_id(person.id).biography.startswith("Bryan Lee")

    @pytest.mark.asyncio
    async def test_unconfigured_provider_is_not_called(self, person_repo, image_repo, ingestion) -> None:
        tmdb = FakeScraper("tmdb", configured=False)
        enricher = PersonEnricher(person_repo, image_repo, registry_with(tmdb), ingestion)
        person = person_repo.save(Person(name="Bryan Cranston", tmdb_id=17419))

        result = await enricher.refresh(person.id)

        assert result.scraper_id is None
        tmdb.get_person_metadata.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_person(self, enricher) -> None:
        with pytest.raises(TargetGoneError):
            await enricher.refresh(404)


class TestPhoto:
    """Photo de la personne."""

    @pytest.mark.asyncio
    async def test_photo_downloaded_when_absent(
        self, enricher, person_repo, image_repo, tmdb, mock_image_fetcher
    ) -> None:
        person = person_repo.save(Person(name="Bryan Cranston", tmdb_id=17419))
        tmdb.get_person_metadata.return_value = CRANSTON_TMDB

        result = await enricher.refresh(person.id)

        assert result.photo_saved is True
        photo = image_repo.get_primary(ImageOwner(ImageOwnerType.PERSON, person.id), ImageType.PHOTO)
        assert photo.source_url == "https://img/bc.jpg"
        assert photo.scraper_id == "tmdb"
        mock_image_fetcher.fetch.assert_awaited_once_with("https://img/bc.jpg")

    @pytest.mark.asyncio
    async def test_existing_photo_is_kept(
        self, enricher, person_repo, tmdb, mock_image_fetcher
    ) -> None:
        person = person_repo.save(Person(name="Bryan Cranston", tmdb_id=17419))
        tmdb.get_person_metadata.return_value = CRANSTON_TMDB
        await enricher.refresh(person.id)
        mock_image_fetcher.fetch.reset_mock()

        result = await enricher.refresh(person.id, force=True)

        assert result.photo_saved is False
        mock_image_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_photo_failure_keeps_fields(
        self, enricher, person_repo, tmdb, mock_image_fetcher
    ) -> None:
        person = person_repo.save(Person(name="Bryan Cranston", tmdb_id=17419))
        tmdb.get_person_metadata.return_value = CRANSTON_TMDB
        mock_image_fetcher.fetch.side_effect = TransientProviderError("Timeout")

        result = await enricher.refresh(person.id)

        assert result.photo_saved is False
        assert person_repo.get_by_id(person.id).birth_place == "Hollywood, California, USA"
