"""
Tests unitaires pour TVDBScraper.

Verifie l'authentification JWT (obtenue une seule fois), la recherche
de series et le mapping des fiches serie, saison, episode et personne.
"""

from datetime import date
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
import respx

from src.adapters.api.cache import APICache
from src.adapters.scrapers.tvdb_scraper import TVDBScraper
from src.core.errors import PermanentProviderError
from tests.fixtures.tvdb_responses import (
    TVDB_EPISODE_EXTENDED_RESPONSE,
    TVDB_EPISODES_RESPONSE,
    TVDB_LOGIN_RESPONSE,
    TVDB_PERSON_RESPONSE,
    TVDB_SEARCH_RESPONSE,
    TVDB_SEASON_EXTENDED_RESPONSE,
    TVDB_SERIES_EXTENDED_RESPONSE,
)

BASE = "https://api4.thetvdb.com/v4"


@pytest.fixture
def cache(tmp_path: Path) -> APICache:
    cache = APICache(cache_dir=str(tmp_path / "cache"))
    yield cache
    cache.close()


@pytest_asyncio.fixture
async def scraper(cache: APICache) -> TVDBScraper:
    scraper = TVDBScraper(api_key="tvdb-key", cache=cache)
    yield scraper
    await scraper.close()


def mock_login() -> respx.Route:
    return respx.post(f"{BASE}/login").mock(
        return_value=httpx.Response(200, json=TVDB_LOGIN_RESPONSE)
    )


def mock_series() -> respx.Route:
    return respx.get(f"{BASE}/series/81189/extended").mock(
        return_value=httpx.Response(200, json=TVDB_SERIES_EXTENDED_RESPONSE)
    )


class TestAuthentication:
    """Tests du token JWT."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_token_obtained_once_and_sent_as_bearer(self, scraper: TVDBScraper) -> None:
        login = mock_login()
        search = respx.get(f"{BASE}/search").mock(
            return_value=httpx.Response(200, json=TVDB_SEARCH_RESPONSE)
        )

        await scraper.search_series("Breaking Bad")
        await scraper.search_series("The Wire")

        assert login.call_count == 1
        assert search.calls.last.request.headers["Authorization"] == "Bearer jwt-token-abc"
        assert search.calls.last.request.headers["Accept-Language"] == "eng"

    @pytest.mark.asyncio
    async def test_missing_key_raises(self, cache: APICache) -> None:
        scraper = TVDBScraper(api_key=None, cache=cache)

        assert scraper.is_configured() is False
        with pytest.raises(PermanentProviderError, match="not configured"):
            await scraper.search_series("Breaking Bad")


class TestSearch:
    """Tests pour search_video / search_series."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_search_results(self, scraper: TVDBScraper) -> None:
        mock_login()
        route = respx.get(f"{BASE}/search").mock(
            return_value=httpx.Response(200, json=TVDB_SEARCH_RESPONSE)
        )

        results = await scraper.search_video("Breaking Bad", year=2008, video_type="movie")

        assert [r.external_id for r in results] == ["series-81189", "series-273181"]
        assert results[0].year == 2008
        assert results[1].year is None
        assert all(r.video_type == "tv_series" for r in results)
        assert all(r.scraper_id == "tvdb" for r in results)
        params = route.calls.last.request.url.params
        assert params["type"] == "series"
        assert params["year"] == "2008"


class TestSeriesMetadata:
    """Tests pour get_series_metadata et get_video_metadata."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_series_fields(self, scraper: TVDBScraper) -> None:
        mock_login()
        mock_series()

        series = await scraper.get_series_metadata("series-81189")

        assert series.external_id == "series-81189"
        assert series.status == "Ended"
        assert series.rating == 8.9
        assert series.first_air_date == date(2008, 1, 20)
        assert series.genres == ("Drama", "Thriller")
        assert series.poster_url.endswith("/posters/81189-1.jpg")
        assert series.backdrop_url.endswith("/fanart/81189-1.jpg")
        assert series.logo_url.endswith("/clearlogo/81189.png")
        assert series.season_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_characters_sorted_and_typed(self, scraper: TVDBScraper) -> None:
        mock_login()
        mock_series()

        series = await scraper.get_series_metadata("81189")

        assert [(c.name, c.type, c.role) for c in series.credits] == [
            ("Bryan Cranston", "actor", "Walter White"),
            ("Aaron Paul", "actor", "Jesse Pinkman"),
            ("Vince Gilligan", "director", "Creator"),
        ]
        assert series.credits[0].tvdb_id == 290357

    @pytest.mark.asyncio
    @respx.mock
    async def test_series_as_video_has_us_rating(self, scraper: TVDBScraper) -> None:
        mock_login()
        mock_series()

        video = await scraper.get_video_metadata("series-81189")

        assert video.rating == "TV-MA"
        assert video.show_name == "Breaking Bad"

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_series_returns_none(self, scraper: TVDBScraper) -> None:
        mock_login()
        respx.get(f"{BASE}/series/1/extended").mock(return_value=httpx.Response(404))

        assert await scraper.get_series_metadata("series-1") is None


class TestSeasonAndEpisode:
    """Tests pour get_season_metadata et get_episode_metadata."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_season_uses_official_order(self, scraper: TVDBScraper) -> None:
        mock_login()
        mock_series()
        season_route = respx.get(f"{BASE}/seasons/30273/extended").mock(
            return_value=httpx.Response(200, json=TVDB_SEASON_EXTENDED_RESPONSE)
        )

        season = await scraper.get_season_metadata("series-81189", 1)

        assert season_route.called
        assert season.external_id == "season-30273"
        assert season.season_number == 1
        assert season.air_date == date(2008, 1, 20)
        assert season.episode_count == 2
        assert season.poster_url.endswith("/seasons/81189-1-2.jpg")

    @pytest.mark.asyncio
    @respx.mock
    async def test_unknown_season_number(self, scraper: TVDBScraper) -> None:
        mock_login()
        mock_series()

        assert await scraper.get_season_metadata("series-81189", 9) is None

    @pytest.mark.asyncio
    @respx.mock
    async def test_episode_fields(self, scraper: TVDBScraper) -> None:
        mock_login()
        respx.get(f"{BASE}/series/81189/episodes/default").mock(
            return_value=httpx.Response(200, json=TVDB_EPISODES_RESPONSE)
        )
        respx.get(f"{BASE}/episodes/349231/extended").mock(
            return_value=httpx.Response(200, json=TVDB_EPISODE_EXTENDED_RESPONSE)
        )

        episode = await scraper.get_episode_metadata("series-81189", 1, 1)

        assert episode.external_id == "episode-349231"
        assert episode.episode_title == "Pilot"
        assert episode.show_name == "Breaking Bad"
        assert episode.runtime == 58
        assert (episode.season, episode.episode) == (1, 1)
        assert [c.name for c in episode.credits] == ["Bryan Cranston"]

    @pytest.mark.asyncio
    @respx.mock
    async def test_episode_without_extended_record(self, scraper: TVDBScraper) -> None:
        mock_login()
        respx.get(f"{BASE}/series/81189/episodes/default").mock(
            return_value=httpx.Response(200, json=TVDB_EPISODES_RESPONSE)
        )
        respx.get(f"{BASE}/episodes/349232/extended").mock(return_value=httpx.Response(404))

        episode = await scraper.get_episode_metadata("series-81189", 1, 2)

        assert episode.title == "Cat's in the Bag..."
        assert episode.credits == ()

    @pytest.mark.asyncio
    @respx.mock
    async def test_missing_episode_number(self, scraper: TVDBScraper) -> None:
        mock_login()
        respx.get(f"{BASE}/series/81189/episodes/default").mock(
            return_value=httpx.Response(200, json=TVDB_EPISODES_RESPONSE)
        )

        assert await scraper.get_episode_metadata("series-81189", 1, 42) is None


class TestPersonMetadata:
    """Tests pour get_person_metadata."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_person_biography_in_configured_language(self, scraper: TVDBScraper) -> None:
        mock_login()
        respx.get(f"{BASE}/people/290357/extended").mock(
            return_value=httpx.Response(200, json=TVDB_PERSON_RESPONSE)
        )

        person = await scraper.get_person_metadata("tvdb-290357")

        assert person.external_id == "tvdb-290357"
        assert person.tvdb_id == 290357
        assert person.biography == "American actor."
        assert person.birth_date == date(1956, 3, 7)
