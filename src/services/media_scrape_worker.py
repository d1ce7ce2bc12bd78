"""
Handler de la file metadata-scrape.

Choisit l'enregistrement d'un media (fournisseur epingle, episode, video
ou piste audio), puis le fusionne dans le catalogue.
"""

from typing import Any, Optional

from loguru import logger

from src.core.entities.catalog import Media, MediaKind
from src.core.errors import TargetGoneError
from src.core.ports.parser import IMediaNameParser
from src.core.ports.repositories import IMediaRepository
from src.core.value_objects.requests import MediaScrapeRequest
from src.services.job_queue import JobContext
from src.services.metadata_merge import MetadataMerger, ScrapeOutcome
from src.services.scraper_registry import Match, ScraperRegistry

NO_MATCH_MESSAGE = "No metadata found from any scraper"


class MediaScrapeWorker:
    """Enrichit un media a partir d'une MediaScrapeRequest."""

    def __init__(
        self,
        media_repo: IMediaRepository,
        registry: ScraperRegistry,
        merger: MetadataMerger,
        parser: IMediaNameParser,
    ) -> None:
        self._media_repo = media_repo
        self._registry = registry
        self._merger = merger
        self._parser = parser

    async def __call__(self, ctx: JobContext) -> dict[str, Any]:
        request = MediaScrapeRequest.from_payload(ctx.payload)
        outcome = await self.scrape(request)
        return outcome.to_dict()

    async def _select(self, media: Media, request: MediaScrapeRequest) -> Optional[Match]:
        name = request.media_name or media.name
        requested = request.scraper_id

        if request.is_pinned:
            if request.media_kind == MediaKind.AUDIO:
                return await self._registry.fetch_audio(request.scraper_id, request.external_id)
            if request.is_episode:
                return await self._registry.fetch_episode(
                    request.scraper_id, request.external_id, request.season, request.episode
                )
            return await self._registry.fetch_video(request.scraper_id, request.external_id)

        if request.media_kind == MediaKind.AUDIO:
            return await self._registry.find_audio(name, requested)

        if request.is_episode:
            show_name = request.show_name or self._parser.clean_show_name(name)
            return await self._registry.find_episode(
                show_name, request.season, request.episode, requested
            )

        return await self._registry.find_video(name, request.year, None, requested)

    async def scrape(self, request: MediaScrapeRequest) -> ScrapeOutcome:
        """
        Enrichit un media.

        Returns:
            ScrapeOutcome, success=False si aucun fournisseur n'a de correspondance

        Raises:
            TargetGoneError: Le media n'existe plus
        """
        media = self._media_repo.get_by_id(request.media_id)
        if media is None:
            raise TargetGoneError(f"Media {request.media_id} no longer exists")

        match = await self._select(media, request)
        if match is None:
            logger.info("Aucune metadonnee trouvee", media_id=media.id, name=media.name)
            return ScrapeOutcome(success=False, message=NO_MATCH_MESSAGE)

        if media.kind == MediaKind.AUDIO:
            merge = await self._merger.apply_audio(
                media, match, request.skip_images, request.images_only
            )
        else:
            merge = await self._merger.apply_video(
                media, match, request.skip_images, request.images_only
            )

        return ScrapeOutcome(
            success=True,
            message="Metadata applied",
            scraper_id=match.provider_id,
            external_id=match.record.external_id,
            merge=merge,
        )
