"""
Fusion des metadonnees dans le catalogue.

Applique un enregistrement de fournisseur a sa cible (media ou collection) :
- images_only : seules les images (et les photos du casting d'une serie)
  sont rafraichies, les champs structures ne sont pas touches ;
- sinon la ligne de detail est upsertee champ par champ et la cible est
  renommee avec le titre le plus propre ;
- skip_images : un type d'image n'est telecharge que si la cible n'en a aucun ;
- les credits sont remplaces en bloc, chaque personne etant rapprochee
  par identifiants externes ; sa photo n'est telechargee que si elle n'a
  pas encore de photo primaire.
"""

from dataclasses import dataclass, field
from typing import Any, Optional, Sequence

from loguru import logger

from src.core.entities.catalog import Collection, Media
from src.core.entities.details import (
    AudioDetails,
    Credit,
    CreditType,
    ImageOwner,
    ImageOwnerType,
    ImageType,
    SeasonDetails,
    ShowDetails,
    VideoDetails,
)
from src.core.ports.repositories import (
    ICreditRepository,
    IDetailsRepository,
    IImageRepository,
    IMediaRepository,
)
from src.core.value_objects.metadata import (
    AudioMetadata,
    CreditInfo,
    SeasonMetadata,
    SeriesMetadata,
    VideoMetadata,
)
from src.services.image_ingestion import ImageIngestion, ImageRequest
from src.services.person_resolver import PersonResolver
from src.services.scraper_registry import Match

GENRE_SEPARATOR = ", "


@dataclass
class MergeResult:
    """
    Bilan d'une fusion.

    Attributes:
        details_updated: La ligne de detail a ete ecrite
        renamed_to: Nouveau nom de la cible, None si inchange
        credits: Nombre de credits ecrits
        persons_created: Nouvelles personnes
        images_saved: Images enregistrees
        images_failed: URLs dont le telechargement a echoue
    """

    details_updated: bool = False
    renamed_to: Optional[str] = None
    credits: int = 0
    persons_created: int = 0
    images_saved: int = 0
    images_failed: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "details_updated": self.details_updated,
            "renamed_to": self.renamed_to,
            "credits": self.credits,
            "persons_created": self.persons_created,
            "images_saved": self.images_saved,
            "images_failed": list(self.images_failed),
        }


@dataclass
class ScrapeOutcome:
    """
    Resultat d'un job d'enrichissement, stocke comme resultat du job.

    success=False sans exception signifie "rien trouve" ou "non supporte" :
    le job est termine, pas en echec.
    """

    success: bool
    message: str
    scraper_id: Optional[str] = None
    external_id: Optional[str] = None
    merge: Optional[MergeResult] = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "success": self.success,
            "message": self.message,
            "scraper_id": self.scraper_id,
            "external_id": self.external_id,
        }
        if self.merge is not None:
            data["merge"] = self.merge.to_dict()
        data.update(self.extra)
        return data


class MetadataMerger:
    """
    Ecrit les enregistrements des fournisseurs dans le catalogue.

    Example:
        merger = MetadataMerger(media_repo, details_repo, credit_repo, image_repo, resolver, ingestion)
        result = await merger.apply_video(media, match, skip_images=False, images_only=False)
    """

    def __init__(
        self,
        media_repo: IMediaRepository,
        details_repo: IDetailsRepository,
        credit_repo: ICreditRepository,
        image_repo: IImageRepository,
        person_resolver: PersonResolver,
        ingestion: ImageIngestion,
    ) -> None:
        self._media_repo = media_repo
        self._details_repo = details_repo
        self._credit_repo = credit_repo
        self._image_repo = image_repo
        self._person_resolver = person_resolver
        self._ingestion = ingestion

    # Images

    def _image_requests(
        self,
        owner: ImageOwner,
        scraper_id: str,
        urls: dict[ImageType, Optional[str]],
        skip_images: bool,
    ) -> list[ImageRequest]:
        requests = []
        for image_type, url in urls.items():
            if not url:
                continue
            if not self._ingestion.wanted(owner, image_type, skip_images):
                logger.debug(
                    "Image deja presente, ignoree",
                    owner_id=owner.owner_id,
                    image_type=image_type.value,
                )
                continue
            requests.append(ImageRequest(owner, image_type, url, scraper_id))
        return requests

    async def _download(self, requests: Sequence[ImageRequest], result: MergeResult) -> None:
        ingestion = await self._ingestion.ingest_all(requests)
        result.images_saved += len(ingestion.saved)
        result.images_failed.extend(ingestion.failed)

    # Credits

    def _resolve_credits(
        self,
        infos: Sequence[CreditInfo],
        scraper_id: str,
        result: MergeResult,
    ) -> tuple[list[Credit], list[ImageRequest]]:
        """
        Rapproche les personnes et prepare les credits et photos manquantes.

        Returns:
            (credits a inserer, photos a telecharger)
        """
        credits: list[Credit] = []
        photos: list[ImageRequest] = []
        seen_persons: set[int] = set()

        for info in infos:
            person, created = self._person_resolver.resolve(info)
            if created:
                result.persons_created += 1
            credits.append(
                Credit(
                    name=info.name,
                    role=info.role,
                    credit_type=CreditType.from_provider(info.type),
                    order=info.order,
                    person_id=person.id,
                )
            )

            if not info.photo_url or person.id in seen_persons:
                continue
            seen_persons.add(person.id)
            owner = ImageOwner(ImageOwnerType.PERSON, person.id)
            if self._image_repo.get_primary(owner, ImageType.PHOTO) is None:
                photos.append(ImageRequest(owner, ImageType.PHOTO, info.photo_url, scraper_id))

        return credits, photos

    def _rename_media(self, media: Media, name: Optional[str], result: MergeResult) -> None:
        if name and name != media.name:
            self._media_repo.rename(media.id, name)
            media.name = name
            result.renamed_to = name

    # Video

    async def apply_video(
        self,
        media: Media,
        match: Match[VideoMetadata],
        skip_images: bool = False,
        images_only: bool = False,
    ) -> MergeResult:
        """
        Applique la fiche d'un film ou d'un episode a un media.

        Le media est renomme avec le titre de l'episode, a defaut le titre.
        """
        record = match.record
        result = MergeResult()
        owner = ImageOwner(ImageOwnerType.MEDIA, media.id)
        requests = self._image_requests(
            owner,
            match.provider_id,
            {
                ImageType.POSTER: record.poster_url,
                ImageType.BACKDROP: record.backdrop_url,
                ImageType.THUMBNAIL: record.thumbnail_url,
                ImageType.LOGO: record.logo_url,
            },
            skip_images,
        )

        if not images_only:
            details = self._details_repo.upsert_video_details(
                VideoDetails(
                    media_id=media.id,
                    scraper_id=match.provider_id,
                    external_id=record.external_id,
                    original_title=record.original_title,
                    show_name=record.show_name,
                    season=record.season,
                    episode=record.episode,
                    description=record.description,
                    release_date=record.release_date,
                    rating=record.rating,
                    runtime=record.runtime,
                    genres=tuple(record.genres),
                )
            )
            result.details_updated = True

            credits, photos = self._resolve_credits(record.credits, match.provider_id, result)
            result.credits = len(self._credit_repo.replace_video_credits(details.id, credits))
            requests.extend(photos)

            self._rename_media(media, record.episode_title or record.title, result)

        await self._download(requests, result)
        logger.info(
            "Fiche video appliquee",
            media_id=media.id,
            scraper=match.provider_id,
            external_id=record.external_id,
            images=result.images_saved,
        )
        return result

    # Audio

    async def apply_audio(
        self,
        media: Media,
        match: Match[AudioMetadata],
        skip_images: bool = False,
        images_only: bool = False,
    ) -> MergeResult:
        """Applique la fiche d'une piste audio et renomme le media avec son titre."""
        record = match.record
        result = MergeResult()
        owner = ImageOwner(ImageOwnerType.MEDIA, media.id)
        requests = self._image_requests(
            owner,
            match.provider_id,
            {ImageType.ALBUM_ART: record.album_art_url},
            skip_images,
        )

        if not images_only:
            self._details_repo.upsert_audio_details(
                AudioDetails(
                    media_id=media.id,
                    artist=record.artist,
                    album_artist=record.album_artist,
                    album=record.album,
                    track=record.track,
                    disc=record.disc,
                    year=record.year,
                    genre=record.genre,
                )
            )
            result.details_updated = True
            self._rename_media(media, record.title, result)

        await self._download(requests, result)
        return result

    # Collections

    async def apply_show(
        self,
        collection: Collection,
        match: Match[SeriesMetadata],
        skip_images: bool = False,
        images_only: bool = False,
    ) -> MergeResult:
        """
        Applique la fiche d'une serie a une collection Show.

        En mode images_only, les photos du casting sont tout de meme
        rafraichies, sans reecrire les credits.
        """
        record = match.record
        result = MergeResult()
        owner = ImageOwner(ImageOwnerType.COLLECTION, collection.id)
        requests = self._image_requests(
            owner,
            match.provider_id,
            {
                ImageType.POSTER: record.poster_url,
                ImageType.BACKDROP: record.backdrop_url,
                ImageType.THUMBNAIL: record.thumbnail_url,
                ImageType.LOGO: record.logo_url,
            },
            skip_images,
        )

        credits, photos = self._resolve_credits(record.credits, match.provider_id, result)
        requests.extend(photos)

        if not images_only:
            details = self._details_repo.upsert_show_details(
                ShowDetails(
                    collection_id=collection.id,
                    scraper_id=match.provider_id,
                    external_id=record.external_id,
                    description=record.description,
                    release_date=record.first_air_date,
                    end_date=record.last_air_date,
                    status=record.status,
                    rating=record.rating,
                    genres=GENRE_SEPARATOR.join(record.genres) or None,
                )
            )
            result.details_updated = True
            result.credits = len(self._credit_repo.replace_show_credits(details.id, credits))

        await self._download(requests, result)
        logger.info(
            "Fiche serie appliquee",
            collection_id=collection.id,
            scraper=match.provider_id,
            external_id=record.external_id,
        )
        return result

    async def apply_season(
        self,
        collection: Collection,
        match: Match[SeasonMetadata],
        skip_images: bool = False,
        images_only: bool = False,
    ) -> MergeResult:
        """Applique la fiche d'une saison a une collection Season."""
        record = match.record
        result = MergeResult()
        owner = ImageOwner(ImageOwnerType.COLLECTION, collection.id)
        requests = self._image_requests(
            owner,
            match.provider_id,
            {ImageType.POSTER: record.poster_url},
            skip_images,
        )

        if not images_only:
            self._details_repo.upsert_season_details(
                SeasonDetails(
                    collection_id=collection.id,
                    scraper_id=match.provider_id,
                    external_id=record.external_id,
                    season_number=record.season_number,
                    description=record.description,
                    release_date=record.air_date,
                )
            )
            result.details_updated = True

        await self._download(requests, result)
        return result

    async def apply_collection_images(
        self,
        collection: Collection,
        match: Match[VideoMetadata],
        skip_images: bool = False,
    ) -> MergeResult:
        """Telecharge les images d'un film sur sa collection Film."""
        record = match.record
        result = MergeResult()
        owner = ImageOwner(ImageOwnerType.COLLECTION, collection.id)
        requests = self._image_requests(
            owner,
            match.provider_id,
            {
                ImageType.POSTER: record.poster_url,
                ImageType.BACKDROP: record.backdrop_url,
                ImageType.LOGO: record.logo_url,
            },
            skip_images,
        )
        await self._download(requests, result)
        return result
