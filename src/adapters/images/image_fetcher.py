"""
Telechargement des images distantes (affiches, fonds, logos, photos).

Le format est deduit du Content-Type, a defaut de l'extension de l'URL ;
les dimensions sont lues avec Pillow quand l'image est decodable.
"""

import io
from pathlib import PurePosixPath
from typing import Optional
from urllib.parse import urlparse

import httpx
from loguru import logger
from PIL import Image as PILImage
from PIL import UnidentifiedImageError

from src.adapters.api.retry import request_with_retry
from src.core.ports.images import FetchedImage, IImageFetcher

CONTENT_TYPE_FORMATS: dict[str, str] = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/svg+xml": "svg",
}

DEFAULT_FORMAT = "jpg"


def detect_format(content_type: Optional[str], url: str) -> str:
    """
    Deduit l'extension de stockage d'une image.

    Args:
        content_type: Header Content-Type de la reponse
        url: URL de l'image (repli sur son extension)

    Returns:
        Extension sans point ("jpg" par defaut)
    """
    if content_type:
        mime = content_type.split(";")[0].strip().lower()
        if mime in CONTENT_TYPE_FORMATS:
            return CONTENT_TYPE_FORMATS[mime]

    suffix = PurePosixPath(urlparse(url).path).suffix.lower().lstrip(".")
    if suffix == "jpeg":
        return "jpg"
    if suffix in CONTENT_TYPE_FORMATS.values():
        return suffix
    return DEFAULT_FORMAT


def read_dimensions(content: bytes) -> tuple[Optional[int], Optional[int]]:
    """Lit largeur et hauteur avec Pillow, (None, None) si non decodable."""
    try:
        with PILImage.open(io.BytesIO(content)) as image:
            return image.width, image.height
    except (UnidentifiedImageError, OSError):
        return None, None


class HttpImageFetcher(IImageFetcher):
    """
    Telechargeur d'images via httpx.

    Les erreurs transitoires sont relancees par request_with_retry ;
    un echec definitif remonte a l'ingestion qui l'isole.
    """

    def __init__(self, timeout: float = 30.0) -> None:
        self._timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self._timeout, follow_redirects=True)
        return self._client

    async def fetch(self, url: str) -> FetchedImage:
        response = await request_with_retry(self._get_client(), "GET", url, max_attempts=3)
        content = response.content
        image_format = detect_format(response.headers.get("Content-Type"), url)
        width, height = read_dimensions(content)
        logger.debug("Image telechargee", url=url, size=len(content), format=image_format)
        return FetchedImage(content=content, format=image_format, width=width, height=height)

    async def close(self) -> None:
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
