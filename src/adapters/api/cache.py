"""
Cache persistant des reponses des fournisseurs avec TTL differencies.

Le cache utilise diskcache pour la persistence sur disque : les reponses
JSON brutes des fournisseurs survivent aux redemarrages des workers.

TTL par defaut:
- Recherches (SEARCH_TTL): 24 heures - les resultats de recherche changent souvent
- Details (DETAILS_TTL): 7 jours - les fiches changent rarement
"""

import asyncio
from functools import partial
from typing import Any, Awaitable, Callable, Optional

from diskcache import Cache


class APICache:
    """
    Cache asynchrone avec TTL pour les reponses des fournisseurs.

    Les operations diskcache sont synchrones : elles passent par
    run_in_executor pour ne pas bloquer la boucle des workers.

    Example:
        cache = APICache(cache_dir=".cache/api")
        data = await cache.get_or_fetch(
            "tmdb:movie:27205", APICache.DETAILS_TTL, lambda: fetch_movie(27205)
        )
    """

    SEARCH_TTL = 24 * 60 * 60  # 24 heures
    DETAILS_TTL = 7 * 24 * 60 * 60  # 7 jours

    def __init__(self, cache_dir: str = ".cache/api") -> None:
        """
        Initialise le cache avec un repertoire de stockage.

        Args:
            cache_dir: Chemin vers le repertoire du cache (cree si inexistant)
        """
        self._cache = Cache(cache_dir)

    async def get(self, key: str) -> Optional[Any]:
        """Recupere une valeur, None si absente ou expiree."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._cache.get, key)

    async def set(self, key: str, value: Any, ttl: int) -> None:
        """Stocke une valeur avec un TTL en secondes."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(
            None, partial(self._cache.set, key, value, expire=ttl)
        )

    async def get_or_fetch(
        self,
        key: str,
        ttl: int,
        fetch: Callable[[], Awaitable[Optional[Any]]],
    ) -> Optional[Any]:
        """
        Retourne la valeur en cache, sinon l'obtient via fetch et la stocke.

        Les valeurs None ne sont pas mises en cache (cible inconnue ou
        temporairement indisponible).

        Args:
            key: Cle unique (ex: "tmdb:search:movie:inception:2010")
            ttl: Duree de vie en secondes
            fetch: Coroutine appelee en cas d'absence

        Returns:
            La valeur en cache ou fraichement obtenue
        """
        cached = await self.get(key)
        if cached is not None:
            return cached
        value = await fetch()
        if value is not None:
            await self.set(key, value, ttl)
        return value

    async def clear(self) -> None:
        """Supprime toutes les entrees du cache."""
        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, self._cache.clear)

    def close(self) -> None:
        """Ferme la connexion au cache (a appeler a la fin)."""
        self._cache.close()
