"""
Mecanisme de retry avec backoff exponentiel pour les fournisseurs HTTP.

Classe chaque echec de requete :
- 429 : RateLimitError (transitoire, header Retry-After conserve)
- 5xx, timeout, erreur de connexion : TransientProviderError
- autres 4xx : PermanentProviderError, propagee immediatement

Les erreurs transitoires sont relancees dans l'appel avec un delai
croissant plafonne et du jitter aleatoire, independamment du retry de la file.

Usage:
    # Avec le decorateur
    @with_retry(max_attempts=5, max_wait=60)
    async def my_api_call():
        ...

    # Avec la fonction helper
    response = await request_with_retry(client, "GET", url)
"""

from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)

from src.core.errors import (
    PermanentProviderError,
    RateLimitError,
    TransientProviderError,
)


def _log_retry(retry_state: RetryCallState) -> None:
    """Trace chaque nouvelle tentative."""
    exception = retry_state.outcome.exception() if retry_state.outcome else None
    logger.debug(
        "Nouvelle tentative apres erreur transitoire",
        attempt=retry_state.attempt_number,
        error=str(exception),
    )


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur pour relancer sur TransientProviderError avec backoff exponentiel.

    Utilise wait_random_exponential pour ajouter du jitter et eviter
    le "thundering herd" quand plusieurs workers relancent en meme temps.

    Args:
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        max_wait: Delai maximum entre les tentatives en secondes (defaut: 60)

    Returns:
        Decorateur a appliquer sur une fonction async
    """
    return retry(
        retry=retry_if_exception_type(TransientProviderError),
        wait=wait_random_exponential(multiplier=1, min=1, max=max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


def classify_response(response: httpx.Response) -> None:
    """
    Leve l'erreur du domaine correspondant a une reponse en echec.

    Args:
        response: Reponse HTTP recue

    Raises:
        RateLimitError: 429
        TransientProviderError: 5xx
        PermanentProviderError: autres 4xx
    """
    status = response.status_code
    if status == 429:
        retry_after_header = response.headers.get("Retry-After")
        retry_after: Optional[int] = None
        if retry_after_header and retry_after_header.isdigit():
            retry_after = int(retry_after_header)
        raise RateLimitError(retry_after)
    if status >= 500:
        raise TransientProviderError(
            f"Server error {status} for {response.request.url}", status_code=status
        )
    if status >= 400:
        raise PermanentProviderError(
            f"Client error {status} for {response.request.url}", status_code=status
        )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    max_wait: int = 60,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec retry automatique sur les erreurs transitoires.

    Args:
        client: Client httpx async a utiliser
        method: Methode HTTP (GET, POST, etc.)
        url: URL a appeler
        max_attempts: Nombre maximum de tentatives (defaut: 5)
        max_wait: Delai maximum entre tentatives en secondes
        **kwargs: Arguments supplementaires passes a client.request()

    Returns:
        httpx.Response en cas de succes

    Raises:
        TransientProviderError: Toujours en echec apres epuisement des tentatives
        PermanentProviderError: 4xx hors 429, sans retry
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _do_request() -> httpx.Response:
        try:
            response = await client.request(method, url, **kwargs)
        except httpx.TimeoutException as e:
            raise TransientProviderError(f"Timeout calling {url}") from e
        except httpx.TransportError as e:
            raise TransientProviderError(f"Connection error calling {url}: {e}") from e
        if response.is_error:
            classify_response(response)
        return response

    return await _do_request()
