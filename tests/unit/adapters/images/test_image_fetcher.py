"""
Tests unitaires pour HttpImageFetcher et ses helpers.

Les reponses HTTP sont mockees avec respx ; une vraie image PNG est
generee avec Pillow pour la lecture des dimensions.
"""

import io

import httpx
import pytest
import respx
from PIL import Image as PILImage

from src.adapters.images.image_fetcher import (
    HttpImageFetcher,
    detect_format,
    read_dimensions,
)
from src.core.errors import PermanentProviderError

POSTER_URL = "https://image.tmdb.org/t/p/original/poster.png"


def _png(width: int, height: int) -> bytes:
    buffer = io.BytesIO()
    PILImage.new("RGB", (width, height), color=(200, 30, 30)).save(buffer, format="PNG")
    return buffer.getvalue()


class TestDetectFormat:
    """Tests pour detect_format."""

    def test_content_type_wins(self) -> None:
        assert detect_format("image/png", "https://x/a.jpg") == "png"

    def test_content_type_with_parameters(self) -> None:
        assert detect_format("image/webp; charset=binary", "https://x/a") == "webp"

    def test_falls_back_to_url_extension(self) -> None:
        assert detect_format("application/octet-stream", "https://x/a.JPEG") == "jpg"
        assert detect_format(None, "https://x/logo.svg?v=2") == "svg"

    def test_default_is_jpg(self) -> None:
        assert detect_format(None, "https://x/image") == "jpg"


class TestReadDimensions:
    """Tests pour read_dimensions."""

    def test_reads_png_size(self) -> None:
        assert read_dimensions(_png(40, 60)) == (40, 60)

    def test_undecodable_content(self) -> None:
        assert read_dimensions(b"not an image") == (None, None)


class TestHttpImageFetcher:
    """Tests pour HttpImageFetcher.fetch."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_returns_content_format_and_size(self) -> None:
        content = _png(20, 30)
        respx.get(POSTER_URL).mock(
            return_value=httpx.Response(
                200, content=content, headers={"Content-Type": "image/png"}
            )
        )
        fetcher = HttpImageFetcher()
        try:
            image = await fetcher.fetch(POSTER_URL)
        finally:
            await fetcher.close()

        assert image.content == content
        assert image.format == "png"
        assert (image.width, image.height) == (20, 30)

    @pytest.mark.asyncio
    @respx.mock
    async def test_fetch_404_raises_permanent_error(self) -> None:
        respx.get(POSTER_URL).mock(return_value=httpx.Response(404))
        fetcher = HttpImageFetcher()
        try:
            with pytest.raises(PermanentProviderError):
                await fetcher.fetch(POSTER_URL)
        finally:
            await fetcher.close()
