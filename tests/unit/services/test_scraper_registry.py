"""
Tests unitaires pour ScraperRegistry : selection des candidats, repli
sur le fournisseur suivant et fournisseurs epingles.
"""

import pytest

from src.core.entities.catalog import MediaKind
from src.core.errors import TransientProviderError
from src.core.ports.scrapers import ScraperCapability
from src.core.value_objects.metadata import PersonMetadata, SearchResult, SeasonMetadata, VideoMetadata
from src.services.scraper_registry import UnknownScraperError
from tests.fixtures.fake_scrapers import FakeScraper, registry_with

INCEPTION = VideoMetadata(external_id="movie-27205", title="Inception")


def result(external_id: str, confidence=None, scraper_id="tmdb") -> SearchResult:
    return SearchResult(external_id=external_id, title=external_id, confidence=confidence, scraper_id=scraper_id)


class TestCandidates:
    """Tests pour candidates."""

    def test_filters_kind_capability_and_configuration(self) -> None:
        tmdb = FakeScraper("tmdb")
        unconfigured = FakeScraper("tvdb", configured=False)
        music = FakeScraper("music", capabilities={ScraperCapability.SEARCH_AUDIO}, kinds=(MediaKind.AUDIO,))
        registry = registry_with(tmdb, unconfigured, music)

        assert registry.candidates(MediaKind.VIDEO, ScraperCapability.SEARCH_VIDEO) == [tmdb]
        assert registry.candidates(MediaKind.AUDIO, ScraperCapability.SEARCH_AUDIO) == [music]
        assert registry.candidates(MediaKind.VIDEO, ScraperCapability.SEARCH_VIDEO, "tvdb") == []

    def test_registration_order_is_kept(self) -> None:
        first, second = FakeScraper("a"), FakeScraper("b")

        assert registry_with(first, second).configured() == [first, second]


class TestFindVideo:
    """Recherche puis fiche, avec repli."""

    @pytest.mark.asyncio
    async def test_first_provider_wins(self) -> None:
        tmdb, tvdb = FakeScraper("tmdb"), FakeScraper("tvdb")
        tmdb.search_video.return_value = [result("movie-27205"), result("movie-1")]
        tmdb.get_video_metadata.return_value = INCEPTION
        registry = registry_with(tmdb, tvdb)

        match = await registry.find_video("Inception", year=2010)

        assert match.provider_id == "tmdb"
        assert match.record == INCEPTION
        tmdb.search_video.assert_awaited_once_with("Inception", 2010, None)
        tmdb.get_video_metadata.assert_awaited_once_with("movie-27205")
        tvdb.search_video.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_falls_back_when_first_provider_raises(self) -> None:
        tmdb, tvdb = FakeScraper("tmdb"), FakeScraper("tvdb")
        tmdb.search_video.side_effect = TransientProviderError("Timeout")
        tvdb.search_video.return_value = [result("series-81189", scraper_id="tvdb")]
        tvdb.get_video_metadata.return_value = VideoMetadata(external_id="series-81189", title="Breaking Bad")
        registry = registry_with(tmdb, tvdb)

        match = await registry.find_video("Breaking Bad")

        assert match.provider_id == "tvdb"
        assert match.record.title == "Breaking Bad"

    @pytest.mark.asyncio
    async def test_falls_back_when_fetch_returns_nothing(self) -> None:
        tmdb, tvdb = FakeScraper("tmdb"), FakeScraper("tvdb")
        tmdb.search_video.return_value = [result("movie-1")]
        tvdb.search_video.return_value = [result("series-2")]
        tvdb.get_video_metadata.return_value = INCEPTION
        registry = registry_with(tmdb, tvdb)

        match = await registry.find_video("Inception")

        assert match.provider_id == "tvdb"

    @pytest.mark.asyncio
    async def test_no_match_anywhere(self) -> None:
        registry = registry_with(FakeScraper("tmdb"), FakeScraper("tvdb"))

        assert await registry.find_video("Nothing") is None

    @pytest.mark.asyncio
    async def test_requested_provider_only(self) -> None:
        tmdb, tvdb = FakeScraper("tmdb"), FakeScraper("tvdb")
        tvdb.search_video.return_value = [result("series-2")]
        tvdb.get_video_metadata.return_value = INCEPTION
        registry = registry_with(tmdb, tvdb)

        match = await registry.find_video("Inception", requested_id="tvdb")

        assert match.provider_id == "tvdb"
        tmdb.search_video.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_provider_without_fetch_capability_is_skipped(self) -> None:
        search_only = FakeScraper("search", capabilities={ScraperCapability.SEARCH_VIDEO})
        registry = registry_with(search_only)

        assert await registry.find_video("Inception") is None
        search_only.search_video.assert_not_awaited()


class TestFindEpisode:
    """Recherche d'un episode via la serie."""

    @pytest.mark.asyncio
    async def test_episode_uses_series_search(self) -> None:
        tmdb = FakeScraper("tmdb")
        tmdb.search_series.return_value = [result("tv-1396")]
        tmdb.get_episode_metadata.return_value = VideoMetadata(external_id="episode-62085", title="Pilot")
        registry = registry_with(tmdb)

        match = await registry.find_episode("Breaking Bad", 1, 1)

        assert match.record.external_id == "episode-62085"
        tmdb.get_episode_metadata.assert_awaited_once_with("tv-1396", 1, 1)


class TestSearchAll:
    """Agregation des recherches."""

    @pytest.mark.asyncio
    async def test_sorted_by_confidence_failures_ignored(self) -> None:
        tmdb, tvdb, broken = FakeScraper("tmdb"), FakeScraper("tvdb"), FakeScraper("broken")
        tmdb.search_video.return_value = [result("movie-1", 0.4), result("movie-2")]
        tvdb.search_video.return_value = [result("series-3", 0.9, "tvdb")]
        broken.search_video.side_effect = RuntimeError("down")
        registry = registry_with(tmdb, broken, tvdb)

        results = await registry.search_all("Inception")

        assert [r.external_id for r in results] == ["series-3", "movie-1", "movie-2"]


class TestPinned:
    """Fournisseurs epingles."""

    @pytest.mark.asyncio
    async def test_fetch_season(self) -> None:
        tmdb = FakeScraper("tmdb")
        tmdb.get_season_metadata.return_value = SeasonMetadata(external_id="season-3572", season_number=1)
        registry = registry_with(tmdb)

        match = await registry.fetch_season("tmdb", "tv-1396", 1)

        assert match.record.external_id == "season-3572"
        tmdb.search_series.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fetch_person(self) -> None:
        tvdb = FakeScraper("tvdb")
        tvdb.get_person_metadata.return_value = PersonMetadata(external_id="tvdb-290357", name="Bryan Cranston")

        match = await registry_with(FakeScraper("tmdb"), tvdb).fetch_person("tvdb", "290357")

        assert match.provider_id == "tvdb"
        assert match.record.name == "Bryan Cranston"
        tvdb.get_person_metadata.assert_awaited_once_with("290357")

    @pytest.mark.asyncio
    async def test_fetch_person_requires_capability(self) -> None:
        registry = registry_with(FakeScraper("tmdb", capabilities={ScraperCapability.VIDEO_METADATA}))

        with pytest.raises(UnknownScraperError, match="person-metadata"):
            await registry.fetch_person("tmdb", "17419")

    @pytest.mark.asyncio
    async def test_unknown_provider(self) -> None:
        with pytest.raises(UnknownScraperError):
            await registry_with().fetch_video("imdb", "tt1375666")

    @pytest.mark.asyncio
    async def test_unsupported_capability(self) -> None:
        registry = registry_with(FakeScraper("tmdb", capabilities={ScraperCapability.SEARCH_VIDEO}))

        with pytest.raises(UnknownScraperError, match="does not support"):
            await registry.fetch_series("tmdb", "tv-1396")

    @pytest.mark.asyncio
    async def test_pinned_errors_propagate(self) -> None:
        tmdb = FakeScraper("tmdb")
        tmdb.get_video_metadata.side_effect = TransientProviderError("HTTP 503")

        with pytest.raises(TransientProviderError):
            await registry_with(tmdb).fetch_video("tmdb", "movie-27205")

    @pytest.mark.asyncio
    async def test_close_closes_every_provider(self) -> None:
        tmdb, tvdb = FakeScraper("tmdb"), FakeScraper("tvdb")

        await registry_with(tmdb, tvdb).close()

        tmdb.close.assert_awaited_once()
        tvdb.close.assert_awaited_once()
