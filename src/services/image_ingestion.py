"""
Telechargement et stockage des images.

Les images d'une meme etape de fusion sont telechargees en parallele
(asyncio.gather) ; un echec est consigne sans annuler les autres ni
faire echouer le job.

Stockage : {images_dir}/{media|collections|people}/{owner_id}/{type}.{fmt}
"""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Sequence

from loguru import logger

from src.core.entities.details import Image, ImageOwner, ImageType
from src.core.ports.file_system import IFileSystem
from src.core.ports.images import IImageFetcher
from src.core.ports.repositories import IImageRepository


@dataclass(frozen=True)
class ImageRequest:
    """Image a telecharger pour un proprietaire."""

    owner: ImageOwner
    image_type: ImageType
    url: str
    scraper_id: Optional[str] = None


@dataclass
class IngestionResult:
    """Images enregistrees et URLs en echec."""

    saved: list[Image] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)


def storage_path(images_dir: Path, owner: ImageOwner, image_type: ImageType, fmt: str) -> Path:
    """Chemin de stockage d'une image."""
    return (
        images_dir
        / owner.owner_type.value
        / str(owner.owner_id)
        / f"{image_type.value}.{fmt}"
    )


class ImageIngestion:
    """
    Telecharge les images et les enregistre comme images primaires.

    Attributes:
        images_dir: Racine du stockage local
    """

    def __init__(
        self,
        fetcher: IImageFetcher,
        file_system: IFileSystem,
        image_repo: IImageRepository,
        images_dir: Path,
    ) -> None:
        self._fetcher = fetcher
        self._file_system = file_system
        self._image_repo = image_repo
        self.images_dir = images_dir

    def wanted(self, owner: ImageOwner, image_type: ImageType, skip_images: bool) -> bool:
        """
        Indique si un type d'image doit etre telecharge.

        Avec skip_images, seuls les types absents du proprietaire le sont.
        """
        if not skip_images:
            return True
        return self._image_repo.count(owner, image_type) == 0

    async def ingest(self, request: ImageRequest) -> Image:
        """
        Telecharge une image, l'ecrit sur disque et l'enregistre comme primaire.

        Raises:
            TransientProviderError, PermanentProviderError: Echec du telechargement
        """
        fetched = await self._fetcher.fetch(request.url)
        path = storage_path(self.images_dir, request.owner, request.image_type, fetched.format)
        size = self._file_system.write_bytes(path, fetched.content)
        image = self._image_repo.save_image(
            Image(
                owner=request.owner,
                image_type=request.image_type,
                path=path,
                width=fetched.width,
                height=fetched.height,
                format=fetched.format,
                file_size=size,
                source_url=request.url,
                scraper_id=request.scraper_id,
                is_primary=True,
            )
        )
        logger.debug(
            "Image enregistree",
            owner=request.owner.owner_type.value,
            owner_id=request.owner.owner_id,
            image_type=request.image_type.value,
            path=str(path),
        )
        return image

    async def ingest_all(self, requests: Sequence[ImageRequest]) -> IngestionResult:
        """
        Telecharge toutes les images en parallele et attend la fin de chacune.

        Returns:
            IngestionResult (images enregistrees, URLs en echec)
        """
        result = IngestionResult()
        if not requests:
            return result

        outcomes = await asyncio.gather(
            *(self.ingest(request) for request in requests),
            return_exceptions=True,
        )
        for request, outcome in zip(requests, outcomes):
            if isinstance(outcome, BaseException):
                logger.warning(
                    "Echec du telechargement d'image",
                    url=request.url,
                    image_type=request.image_type.value,
                    error=str(outcome),
                )
                result.failed.append(request.url)
            else:
                result.saved.append(outcome)
        return result
