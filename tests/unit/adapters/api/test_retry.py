"""
Tests unitaires pour le mecanisme de retry avec backoff exponentiel.

Ces tests verifient:
- La classification des reponses (429, 5xx, autres 4xx)
- with_retry relance les erreurs transitoires uniquement
- request_with_retry convertit timeouts et erreurs reseau en erreurs transitoires
"""

import httpx
import pytest
import respx

from src.adapters.api.retry import classify_response, request_with_retry, with_retry
from src.core.errors import (
    PermanentProviderError,
    RateLimitError,
    TransientProviderError,
)


def _response(status: int, headers: dict | None = None) -> httpx.Response:
    return httpx.Response(
        status,
        headers=headers,
        request=httpx.Request("GET", "https://api.example.com/items"),
    )


class TestRateLimitError:
    """Tests pour l'exception RateLimitError."""

    def test_rate_limit_error_stores_retry_after(self) -> None:
        error = RateLimitError(retry_after=60)
        assert error.retry_after == 60
        assert error.status_code == 429
        assert "60" in str(error)

    def test_rate_limit_error_is_transient(self) -> None:
        assert isinstance(RateLimitError(), TransientProviderError)


class TestClassifyResponse:
    """Tests pour classify_response."""

    def test_429_raises_rate_limit_with_retry_after(self) -> None:
        with pytest.raises(RateLimitError) as exc_info:
            classify_response(_response(429, {"Retry-After": "12"}))
        assert exc_info.value.retry_after == 12

    def test_429_without_numeric_header(self) -> None:
        with pytest.raises(RateLimitError) as exc_info:
            classify_response(_response(429, {"Retry-After": "soon"}))
        assert exc_info.value.retry_after is None

    def test_5xx_is_transient(self) -> None:
        with pytest.raises(TransientProviderError) as exc_info:
            classify_response(_response(503))
        assert exc_info.value.status_code == 503

    def test_404_is_permanent(self) -> None:
        with pytest.raises(PermanentProviderError) as exc_info:
            classify_response(_response(404))
        assert exc_info.value.status_code == 404

    def test_success_does_not_raise(self) -> None:
        classify_response(_response(200))


class TestWithRetryDecorator:
    """Tests pour le decorateur with_retry."""

    @pytest.mark.asyncio
    async def test_retries_transient_errors_until_success(self) -> None:
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def flaky() -> str:
            nonlocal call_count
            call_count += 1
            if call_count < 2:
                raise TransientProviderError("boom")
            return "ok"

        assert await flaky() == "ok"
        assert call_count == 2

    @pytest.mark.asyncio
    async def test_permanent_error_is_not_retried(self) -> None:
        call_count = 0

        @with_retry(max_attempts=3, max_wait=1)
        async def bad_request() -> None:
            nonlocal call_count
            call_count += 1
            raise PermanentProviderError("bad", status_code=400)

        with pytest.raises(PermanentProviderError):
            await bad_request()
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_reraises_after_max_attempts(self) -> None:
        call_count = 0

        @with_retry(max_attempts=2, max_wait=1)
        async def always_down() -> None:
            nonlocal call_count
            call_count += 1
            raise TransientProviderError("down")

        with pytest.raises(TransientProviderError):
            await always_down()
        assert call_count == 2


class TestRequestWithRetry:
    """Tests pour request_with_retry."""

    @pytest.mark.asyncio
    @respx.mock
    async def test_returns_successful_response(self) -> None:
        respx.get("https://api.example.com/items").mock(
            return_value=httpx.Response(200, json={"ok": True})
        )
        async with httpx.AsyncClient() as client:
            response = await request_with_retry(client, "GET", "https://api.example.com/items")
        assert response.json() == {"ok": True}

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_429_then_succeeds(self) -> None:
        route = respx.get("https://api.example.com/items").mock(
            side_effect=[
                httpx.Response(429, headers={"Retry-After": "1"}),
                httpx.Response(200, json={"ok": True}),
            ]
        )
        async with httpx.AsyncClient() as client:
            response = await request_with_retry(
                client, "GET", "https://api.example.com/items", max_attempts=3, max_wait=1
            )
        assert response.status_code == 200
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_404_propagates_without_retry(self) -> None:
        route = respx.get("https://api.example.com/missing").mock(
            return_value=httpx.Response(404)
        )
        async with httpx.AsyncClient() as client:
            with pytest.raises(PermanentProviderError):
                await request_with_retry(client, "GET", "https://api.example.com/missing")
        assert route.call_count == 1

    @pytest.mark.asyncio
    @respx.mock
    async def test_timeout_becomes_transient_error(self) -> None:
        respx.get("https://api.example.com/slow").mock(
            side_effect=httpx.ReadTimeout("timed out")
        )
        async with httpx.AsyncClient() as client:
            with pytest.raises(TransientProviderError, match="Timeout"):
                await request_with_retry(
                    client, "GET", "https://api.example.com/slow", max_attempts=1
                )
