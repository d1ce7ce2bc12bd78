"""
Tests unitaires pour MetadataMerger.

Verifie l'ecriture des details, le renommage, le remplacement des credits,
le rapprochement des personnes et les modes images_only / skip_images.
"""

from datetime import date
from pathlib import Path

import pytest

from src.core.entities.details import (
    CreditType,
    Image,
    ImageOwner,
    ImageOwnerType,
    ImageType,
    VideoDetails,
)
from src.core.errors import TransientProviderError
from src.core.value_objects.metadata import (
    CreditInfo,
    SeasonMetadata,
    SeriesMetadata,
    VideoMetadata,
)
from src.services.scraper_registry import Match

PILOT = VideoMetadata(
    external_id="episode-62085",
    title="Pilot",
    description="Walter White, a struggling high school chemistry teacher...",
    release_date=date(2008, 1, 20),
    runtime=58,
    genres=("Drama",),
    thumbnail_url="https://img/still.jpg",
    show_name="Breaking Bad",
    season=1,
    episode=1,
    episode_title="Pilot",
    credits=(
        CreditInfo(name="Bryan Cranston", role="Walter White", order=0, tmdb_id=17419, photo_url="https://img/bc.jpg"),
        CreditInfo(name="Vince Gilligan", type="writer", tmdb_id=66633),
        CreditInfo(name="Vince Gilligan", type="director", tmdb_id=66633),
    ),
)

BREAKING_BAD = SeriesMetadata(
    external_id="tv-1396",
    title="Breaking Bad",
    first_air_date=date(2008, 1, 20),
    last_air_date=date(2013, 9, 29),
    status="Ended",
    rating=8.9,
    genres=("Drama", "Crime"),
    poster_url="https://img/poster.jpg",
    backdrop_url="https://img/backdrop.jpg",
    credits=(
        CreditInfo(name="Bryan Cranston", role="Walter White", tmdb_id=17419, photo_url="https://img/bc.jpg"),
        CreditInfo(name="Aaron Paul", role="Jesse Pinkman", tmdb_id=84497, photo_url="https://img/ap.jpg"),
    ),
)


class TestApplyVideo:
    """Tests pour apply_video."""

    @pytest.mark.asyncio
    async def test_writes_details_and_renames(self, merger, episode, details_repo, media_repo) -> None:
        result = await merger.apply_video(episode, Match("tmdb", PILOT))

        details = details_repo.get_video_details(episode.id)
        assert details.scraper_id == "tmdb"
        assert details.external_id == "episode-62085"
        assert (details.show_name, details.season, details.episode) == ("Breaking Bad", 1, 1)
        assert details.runtime == 58
        assert details.genres == ("Drama",)
        assert media_repo.get_by_id(episode.id).name == "Pilot"
        assert result.renamed_to == "Pilot"
        assert result.details_updated is True

    @pytest.mark.asyncio
    async def test_credits_and_persons(self, merger, episode, details_repo, credit_repo, person_repo) -> None:
        result = await merger.apply_video(episode, Match("tmdb", PILOT))

        details = details_repo.get_video_details(episode.id)
        credits = credit_repo.list_video_credits(details.id)
        assert [(c.name, c.credit_type) for c in credits] == [
            ("Bryan Cranston", CreditType.ACTOR),
            ("Vince Gilligan", CreditType.WRITER),
            ("Vince Gilligan", CreditType.DIRECTOR),
        ]
        assert credits[1].person_id == credits[2].person_id
        assert result.persons_created == 2
        assert person_repo.find_by_tmdb_id(66633) is not None

    @pytest.mark.asyncio
    async def test_rescrape_replaces_credits(self, merger, episode, details_repo, credit_repo) -> None:
        await merger.apply_video(episode, Match("tmdb", PILOT))
        updated = VideoMetadata(
            external_id="episode-62085",
            title="Pilot",
            credits=(CreditInfo(name="Bryan Cranston", tmdb_id=17419),),
        )

        result = await merger.apply_video(episode, Match("tmdb", updated))

        details = details_repo.get_video_details(episode.id)
        assert [c.name for c in credit_repo.list_video_credits(details.id)] == ["Bryan Cranston"]
        assert result.persons_created == 0

    @pytest.mark.asyncio
    async def test_images_and_person_photo(self, merger, episode, image_repo, person_repo) -> None:
        result = await merger.apply_video(episode, Match("tmdb", PILOT))

        assert result.images_saved == 2
        assert image_repo.get_primary(ImageOwner(ImageOwnerType.MEDIA, episode.id), ImageType.THUMBNAIL)
        cranston = person_repo.find_by_tmdb_id(17419)
        assert image_repo.get_primary(ImageOwner(ImageOwnerType.PERSON, cranston.id), ImageType.PHOTO)

    @pytest.mark.asyncio
    async def test_person_photo_downloaded_once(self, merger, episode, mock_image_fetcher) -> None:
        await merger.apply_video(episode, Match("tmdb", PILOT))
        mock_image_fetcher.fetch.reset_mock()

        await merger.apply_video(episode, Match("tmdb", PILOT), skip_images=True)

        mock_image_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_images_only_leaves_details_untouched(
        self, merger, episode, details_repo, media_repo, image_repo
    ) -> None:
        result = await merger.apply_video(episode, Match("tmdb", PILOT), images_only=True)

        assert details_repo.get_video_details(episode.id) is None
        assert media_repo.get_by_id(episode.id).name == "Breaking.Bad.S01E01"
        assert result.details_updated is False
        assert image_repo.count(ImageOwner(ImageOwnerType.MEDIA, episode.id)) == 1

    @pytest.mark.asyncio
    async def test_images_only_refreshes_existing_poster_and_keeps_details(
        self, merger, episode, details_repo, image_repo, mock_image_fetcher
    ) -> None:
        details_repo.upsert_video_details(
            VideoDetails(
                media_id=episode.id,
                scraper_id="tmdb",
                external_id="episode-62085",
                description="Texte saisi a la main",
                rating="TV-MA",
            )
        )
        owner = ImageOwner(ImageOwnerType.MEDIA, episode.id)
        image_repo.save_image(
            Image(
                owner=owner,
                image_type=ImageType.POSTER,
                path=Path("media/1/Poster.jpg"),
                source_url="https://img/old-poster.jpg",
                is_primary=True,
            )
        )
        record = VideoMetadata(
            external_id="episode-62085",
            title="Pilot",
            description="Nouvelle description",
            rating="PG",
            poster_url="https://img/poster.jpg",
            backdrop_url="https://img/backdrop.jpg",
            thumbnail_url="https://img/still.jpg",
            logo_url="https://img/logo.png",
        )

        result = await merger.apply_video(episode, Match("tmdb", record), images_only=True)

        details = details_repo.get_video_details(episode.id)
        assert details.description == "Texte saisi a la main"
        assert details.rating == "TV-MA"
        fetched = {call.args[0] for call in mock_image_fetcher.fetch.await_args_list}
        assert fetched == {
            "https://img/poster.jpg",
            "https://img/backdrop.jpg",
            "https://img/still.jpg",
            "https://img/logo.png",
        }
        assert result.images_saved == 4
        posters = [
            image
            for image in image_repo.list_for_owner(owner)
            if image.image_type == ImageType.POSTER and image.is_primary
        ]
        assert len(posters) == 1
        assert posters[0].source_url == "https://img/poster.jpg"

    @pytest.mark.asyncio
    async def test_image_failure_does_not_fail_merge(
        self, merger, episode, mock_image_fetcher, details_repo
    ) -> None:
        mock_image_fetcher.fetch.side_effect = TransientProviderError("Timeout")

        result = await merger.apply_video(episode, Match("tmdb", PILOT))

        assert result.images_saved == 0
        assert set(result.images_failed) == {"https://img/still.jpg", "https://img/bc.jpg"}
        assert details_repo.get_video_details(episode.id) is not None


class TestApplyCollections:
    """Tests pour apply_show, apply_season et apply_collection_images."""

    @pytest.mark.asyncio
    async def test_show_details_and_credits(self, merger, show, details_repo, credit_repo) -> None:
        result = await merger.apply_show(show, Match("tmdb", BREAKING_BAD))

        details = details_repo.get_show_details(show.id)
        assert details.external_id == "tv-1396"
        assert details.status == "Ended"
        assert details.end_date == date(2013, 9, 29)
        assert details.genres == "Drama, Crime"
        assert [c.role for c in credit_repo.list_show_credits(details.id)] == ["Walter White", "Jesse Pinkman"]
        assert result.images_saved == 4

    @pytest.mark.asyncio
    async def test_show_images_only_refreshes_cast_photos(
        self, merger, show, details_repo, image_repo, person_repo
    ) -> None:
        result = await merger.apply_show(show, Match("tmdb", BREAKING_BAD), images_only=True)

        assert details_repo.get_show_details(show.id) is None
        assert result.credits == 0
        paul = person_repo.find_by_tmdb_id(84497)
        assert image_repo.get_primary(ImageOwner(ImageOwnerType.PERSON, paul.id), ImageType.PHOTO)

    @pytest.mark.asyncio
    async def test_skip_images_keeps_existing_poster(self, merger, show, mock_image_fetcher) -> None:
        await merger.apply_show(show, Match("tmdb", BREAKING_BAD))
        mock_image_fetcher.fetch.reset_mock()

        result = await merger.apply_show(show, Match("tmdb", BREAKING_BAD), skip_images=True)

        assert result.images_saved == 0
        mock_image_fetcher.fetch.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_season(self, merger, season, details_repo) -> None:
        record = SeasonMetadata(
            external_id="season-3572",
            season_number=1,
            air_date=date(2008, 1, 20),
            poster_url="https://img/s1.jpg",
        )

        result = await merger.apply_season(season, Match("tmdb", record))

        details = details_repo.get_season_details(season.id)
        assert details.season_number == 1
        assert details.release_date == date(2008, 1, 20)
        assert result.images_saved == 1

    @pytest.mark.asyncio
    async def test_film_collection_images(self, merger, show, image_repo) -> None:
        record = VideoMetadata(
            external_id="movie-27205",
            title="Inception",
            poster_url="https://img/p.jpg",
            backdrop_url="https://img/b.jpg",
        )

        result = await merger.apply_collection_images(show, Match("tmdb", record))

        assert result.images_saved == 2
        assert image_repo.count(ImageOwner(ImageOwnerType.COLLECTION, show.id)) == 2
