"""
Infrastructure HTTP partagee par les fournisseurs de metadonnees.

- APICache : Cache persistant avec TTL differencies (recherche 24h, details 7j)
- with_retry / request_with_retry : Backoff exponentiel sur les erreurs transitoires
"""

from src.adapters.api.cache import APICache
from src.adapters.api.retry import classify_response, request_with_retry, with_retry

__all__ = [
    "APICache",
    "classify_response",
    "request_with_retry",
    "with_retry",
]
