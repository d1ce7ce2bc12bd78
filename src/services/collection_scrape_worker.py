"""
Handler de la file collection-scrape.

Un traitement par type de collection :
- Show : fiche serie (epinglee ou recherchee), details, images, casting ;
- Season : fiche saison a partir de l'identite de la serie parente ;
- Film : recherche du film, images de la collection, puis un job force
  par media video de la collection, epingle sur le film trouve ;
- Artist / Album / Generic : aucun fournisseur, resultat "non supporte".
"""

from typing import Any, Optional

from loguru import logger

from src.adapters.parsing.media_name_parser import extract_year, strip_trailing_year
from src.core.entities.catalog import Collection, CollectionType, MediaKind
from src.core.errors import MissingDependencyError, TargetGoneError
from src.core.ports.repositories import (
    ICollectionRepository,
    IDetailsRepository,
    IMediaRepository,
)
from src.core.value_objects.requests import CollectionScrapeRequest, MediaScrapeRequest
from src.services.job_dispatcher import ScrapeDispatcher
from src.services.job_queue import JobContext
from src.services.media_scrape_worker import NO_MATCH_MESSAGE
from src.services.metadata_merge import MetadataMerger, ScrapeOutcome
from src.services.scraper_registry import ScraperRegistry

MISSING_PARENT_MESSAGE = "Missing parent show info"


class CollectionScrapeWorker:
    """Enrichit une collection a partir d'une CollectionScrapeRequest."""

    def __init__(
        self,
        collection_repo: ICollectionRepository,
        media_repo: IMediaRepository,
        details_repo: IDetailsRepository,
        registry: ScraperRegistry,
        merger: MetadataMerger,
        dispatcher: ScrapeDispatcher,
    ) -> None:
        self._collection_repo = collection_repo
        self._media_repo = media_repo
        self._details_repo = details_repo
        self._registry = registry
        self._merger = merger
        self._dispatcher = dispatcher

    async def __call__(self, ctx: JobContext) -> dict[str, Any]:
        request = CollectionScrapeRequest.from_payload(ctx.payload)
        outcome = await self.scrape(request)
        return outcome.to_dict()

    async def scrape(self, request: CollectionScrapeRequest) -> ScrapeOutcome:
        """
        Enrichit une collection selon son type.

        Raises:
            TargetGoneError: La collection n'existe plus
            MissingDependencyError: Saison sans serie parente resolue
        """
        collection = self._collection_repo.get_by_id(request.collection_id)
        if collection is None:
            raise TargetGoneError(f"Collection {request.collection_id} no longer exists")

        collection_type = request.collection_type
        if collection_type == CollectionType.SHOW:
            return await self._scrape_show(collection, request)
        if collection_type == CollectionType.SEASON:
            return await self._scrape_season(collection, request)
        if collection_type == CollectionType.FILM:
            return await self._scrape_film(collection, request)

        logger.info(
            "Type de collection non supporte",
            collection_id=collection.id,
            collection_type=collection_type.value,
        )
        return ScrapeOutcome(
            success=False,
            message=f"{collection_type.value} scraping is not supported",
        )

    async def _scrape_show(
        self, collection: Collection, request: CollectionScrapeRequest
    ) -> ScrapeOutcome:
        if request.is_pinned:
            match = await self._registry.fetch_series(request.scraper_id, request.external_id)
        else:
            name = request.collection_name or collection.name
            match = await self._registry.find_series(name, request.scraper_id)
        if match is None:
            return ScrapeOutcome(success=False, message=NO_MATCH_MESSAGE)

        merge = await self._merger.apply_show(
            collection, match, request.skip_images, request.images_only
        )
        return ScrapeOutcome(
            success=True,
            message="Show metadata applied",
            scraper_id=match.provider_id,
            external_id=match.record.external_id,
            merge=merge,
        )

    def _parent_identity(
        self, collection: Collection, request: CollectionScrapeRequest
    ) -> Optional[tuple[str, str]]:
        """(scraper_id, external_id) de la serie parente, None si non resolue."""
        if request.parent_scraper_id and request.parent_external_id:
            return request.parent_scraper_id, request.parent_external_id

        parent_id = request.parent_show_id or collection.parent_id
        if parent_id is None:
            return None
        show = self._details_repo.get_show_details(parent_id)
        if show is None or not show.scraper_id or not show.external_id:
            return None
        return show.scraper_id, show.external_id

    async def _scrape_season(
        self, collection: Collection, request: CollectionScrapeRequest
    ) -> ScrapeOutcome:
        parent = self._parent_identity(collection, request)
        if parent is None or request.season_number is None:
            logger.warning(
                "Saison sans serie parente resolue",
                collection_id=collection.id,
                parent_id=request.parent_show_id or collection.parent_id,
                season_number=request.season_number,
            )
            raise MissingDependencyError(MISSING_PARENT_MESSAGE)

        scraper_id, series_external_id = parent
        match = await self._registry.fetch_season(
            scraper_id, series_external_id, request.season_number
        )
        if match is None:
            return ScrapeOutcome(success=False, message=NO_MATCH_MESSAGE)

        merge = await self._merger.apply_season(
            collection, match, request.skip_images, request.images_only
        )
        return ScrapeOutcome(
            success=True,
            message="Season metadata applied",
            scraper_id=match.provider_id,
            external_id=match.record.external_id,
            merge=merge,
        )

    async def _scrape_film(
        self, collection: Collection, request: CollectionScrapeRequest
    ) -> ScrapeOutcome:
        name = request.collection_name or collection.name
        year = request.year or extract_year(name)
        if request.is_pinned:
            match = await self._registry.fetch_video(request.scraper_id, request.external_id)
        else:
            match = await self._registry.find_video(
                strip_trailing_year(name), year, "movie", request.scraper_id
            )
        if match is None:
            return ScrapeOutcome(success=False, message=NO_MATCH_MESSAGE)

        merge = await self._merger.apply_collection_images(
            collection, match, request.skip_images
        )

        queued = 0
        for media in self._media_repo.list_by_collection(collection.id):
            if media.kind != MediaKind.VIDEO:
                continue
            self._dispatcher.queue_media_scrape(
                MediaScrapeRequest(
                    media_id=media.id,
                    media_name=match.record.title,
                    media_kind=MediaKind.VIDEO,
                    year=year,
                    scraper_id=match.provider_id,
                    external_id=match.record.external_id,
                    skip_images=request.skip_images,
                    images_only=request.images_only,
                )
            )
            queued += 1

        logger.info(
            "Film trouve, medias planifies",
            collection_id=collection.id,
            external_id=match.record.external_id,
            media_jobs=queued,
        )
        return ScrapeOutcome(
            success=True,
            message="Film metadata applied",
            scraper_id=match.provider_id,
            external_id=match.record.external_id,
            merge=merge,
            extra={"media_jobs": queued},
        )
