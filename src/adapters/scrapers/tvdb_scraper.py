"""
Fournisseur TheTVDB API v4 pour les series TV.

Implemente ScraperProvider pour rechercher et recuperer les fiches
series, saisons, episodes et personnes depuis TVDB. Gere l'authentification
JWT, le caching et le rate limiting automatiquement.

Les identifiants de series sont de la forme "series-81189" (objectID de la
recherche TVDB) ; la forme numerique seule est aussi acceptee.

Reference API: https://thetvdb.github.io/v4-api/
"""

from datetime import datetime, timedelta
from typing import Any, Optional

import httpx
from loguru import logger

from src.adapters.api.cache import APICache
from src.adapters.api.retry import request_with_retry
from src.adapters.scrapers.tmdb_scraper import parse_date
from src.core.entities.catalog import MediaKind
from src.core.errors import PermanentProviderError
from src.core.ports.scrapers import ScraperCapability, ScraperProvider
from src.core.value_objects.metadata import (
    CreditInfo,
    PersonMetadata,
    SearchResult,
    SeasonMetadata,
    SeriesMetadata,
    VideoMetadata,
)

# Types d'artwork TVDB
ARTWORK_POSTER = 2
ARTWORK_BACKDROP = 3
ARTWORK_LOGO = 6
ARTWORK_SEASON_POSTER = 7

# Types de personnages TVDB -> type de credit
CHARACTER_TYPES: dict[int, str] = {
    1: "director",
    2: "writer",
    3: "actor",
    4: "producer",
}


def _numeric_id(external_id: str, prefix: str) -> str:
    """Retire le prefixe d'un identifiant ("series-81189" -> "81189")."""
    if external_id.startswith(f"{prefix}-"):
        return external_id[len(prefix) + 1:]
    return external_id


def _first_artwork(artworks: list[dict[str, Any]], artwork_type: int) -> Optional[str]:
    for artwork in artworks:
        if artwork.get("type") == artwork_type and artwork.get("image"):
            return artwork["image"]
    return None


class TVDBScraper(ScraperProvider):
    """
    Fournisseur TVDB pour les series TV.

    Utilise l'API TVDB v4 avec authentification JWT. Le token est obtenu
    automatiquement a la premiere requete et rafraichi avant expiration.

    Attributes:
        BASE_URL: URL de base de l'API TVDB v4
        TOKEN_LIFETIME: Duree de validite retenue pour le token

    Example:
        cache = APICache(cache_dir=".cache/api")
        scraper = TVDBScraper(api_key="your-api-key", cache=cache)
        results = await scraper.search_series("Breaking Bad")
        series = await scraper.get_series_metadata(results[0].external_id)
        await scraper.close()
    """

    BASE_URL = "https://api4.thetvdb.com/v4"
    # Le token est valide 30 jours, on le rafraichit apres 29
    TOKEN_LIFETIME = timedelta(days=29)

    def __init__(self, api_key: Optional[str], cache: APICache, language: str = "eng") -> None:
        """
        Initialise le fournisseur TVDB.

        Args:
            api_key: Cle API TVDB (None = non configure)
            cache: Instance de APICache pour le caching des reponses
            language: Code langue ISO 639-2 des fiches (ex: "eng", "fra")
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._token: Optional[str] = None
        self._token_expiry: Optional[datetime] = None
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def id(self) -> str:
        return "tvdb"

    @property
    def name(self) -> str:
        return "TheTVDB"

    @property
    def supported_kinds(self) -> frozenset[MediaKind]:
        return frozenset({MediaKind.VIDEO})

    @property
    def capabilities(self) -> frozenset[ScraperCapability]:
        return frozenset(
            {
                ScraperCapability.SEARCH_VIDEO,
                ScraperCapability.SEARCH_SERIES,
                ScraperCapability.VIDEO_METADATA,
                ScraperCapability.SERIES_METADATA,
                ScraperCapability.SEASON_METADATA,
                ScraperCapability.EPISODE_METADATA,
                ScraperCapability.PERSON_METADATA,
            }
        )

    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _get_client(self) -> httpx.AsyncClient:
        """
        Retourne le client HTTP, cree s'il n'existe pas.

        Utilise un client unique pour beneficier du connection pooling.
        """
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.BASE_URL,
                timeout=httpx.Timeout(30.0, connect=10.0),
            )
        return self._client

    async def _ensure_token(self) -> str:
        """
        S'assure qu'un token JWT valide est disponible.

        Obtient un nouveau token si aucun n'existe ou s'il est expire.

        Returns:
            Token JWT valide
        """
        if self._token and self._token_expiry and datetime.now() < self._token_expiry:
            return self._token

        if not self._api_key:
            raise PermanentProviderError("TVDB API key not configured")

        response = await request_with_retry(
            self._get_client(), "POST", "/login", json={"apikey": self._api_key}
        )
        self._token = response.json()["data"]["token"]
        self._token_expiry = datetime.now() + self.TOKEN_LIFETIME
        logger.debug("Token TVDB obtenu")
        return self._token

    async def _get_json(
        self,
        endpoint: str,
        cache_key: str,
        ttl: int,
        params: Optional[dict[str, str]] = None,
    ) -> Optional[Any]:
        """
        GET authentifie et cache-first d'un endpoint TVDB.

        Returns:
            Le champ "data" de la reponse, ou None si TVDB repond 404
        """

        async def fetch() -> Optional[Any]:
            token = await self._ensure_token()
            try:
                response = await request_with_retry(
                    self._get_client(),
                    "GET",
                    endpoint,
                    params=params,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "Accept-Language": self._language,
                    },
                )
            except PermanentProviderError as e:
                if e.status_code == 404:
                    logger.debug("Fiche TVDB introuvable", endpoint=endpoint)
                    return None
                raise
            return response.json().get("data")

        return await self._cache.get_or_fetch(cache_key, ttl, fetch)

    async def search_video(
        self,
        query: str,
        year: Optional[int] = None,
        video_type: Optional[str] = None,
    ) -> list[SearchResult]:
        """
        Recherche des series TV par titre.

        TVDB ne couvre que les series : video_type est ignore.

        Returns:
            Liste de SearchResult avec external_id "series-N"
        """
        params = {"query": query, "type": "series"}
        if year:
            params["year"] = str(year)

        data = await self._get_json(
            "/search",
            f"tvdb:search:{query.lower()}:{year}",
            APICache.SEARCH_TTL,
            params,
        )

        results: list[SearchResult] = []
        for item in data or []:
            raw_year = item.get("year")
            results.append(
                SearchResult(
                    external_id=item.get("objectID") or f"series-{item.get('tvdb_id')}",
                    title=item.get("name", ""),
                    year=int(raw_year) if raw_year and str(raw_year).isdigit() else None,
                    video_type="tv_series",
                    poster_url=item.get("image_url"),
                    overview=item.get("overview"),
                    scraper_id=self.id,
                )
            )
        return results

    async def search_series(self, query: str) -> list[SearchResult]:
        return await self.search_video(query, video_type="tv_series")

    async def _get_series_extended(self, series_id: str) -> Optional[dict[str, Any]]:
        return await self._get_json(
            f"/series/{series_id}/extended",
            f"tvdb:series:{series_id}:{self._language}",
            APICache.DETAILS_TTL,
            {"meta": "translations"},
        )

    async def get_video_metadata(self, external_id: str) -> Optional[VideoMetadata]:
        """Fiche d'une serie presentee comme une video."""
        series_id = _numeric_id(external_id, "series")
        series = await self._get_series_extended(series_id)
        if series is None:
            return None

        artworks = series.get("artworks") or []
        rating = next(
            (r.get("name") for r in series.get("contentRatings") or [] if r.get("country") == "usa"),
            None,
        )
        return VideoMetadata(
            external_id=f"series-{series_id}",
            title=series.get("name", ""),
            original_title=series.get("originalName"),
            description=series.get("overview") or None,
            release_date=parse_date(series.get("firstAired")),
            rating=rating,
            genres=tuple(g["name"] for g in series.get("genres") or [] if g.get("name")),
            poster_url=_first_artwork(artworks, ARTWORK_POSTER) or series.get("image"),
            backdrop_url=_first_artwork(artworks, ARTWORK_BACKDROP),
            logo_url=_first_artwork(artworks, ARTWORK_LOGO),
            show_name=series.get("name"),
            credits=self.map_characters(series.get("characters") or []),
        )

    async def get_series_metadata(self, external_id: str) -> Optional[SeriesMetadata]:
        """Fiche complete d'une serie."""
        series_id = _numeric_id(external_id, "series")
        series = await self._get_series_extended(series_id)
        if series is None:
            return None

        artworks = series.get("artworks") or []
        status = series.get("status") or {}
        score = series.get("score")
        official_seasons = [
            s for s in series.get("seasons") or []
            if (s.get("type") or {}).get("type") == "official" and s.get("number")
        ]
        return SeriesMetadata(
            external_id=f"series-{series_id}",
            title=series.get("name", ""),
            original_title=series.get("originalName"),
            description=series.get("overview") or None,
            first_air_date=parse_date(series.get("firstAired")),
            last_air_date=parse_date(series.get("lastAired")),
            status=status.get("name") if isinstance(status, dict) else status,
            rating=float(score) if isinstance(score, (int, float)) else None,
            genres=tuple(g["name"] for g in series.get("genres") or [] if g.get("name")),
            poster_url=_first_artwork(artworks, ARTWORK_POSTER) or series.get("image"),
            backdrop_url=_first_artwork(artworks, ARTWORK_BACKDROP),
            logo_url=_first_artwork(artworks, ARTWORK_LOGO),
            season_count=len(official_seasons) or None,
            credits=self.map_characters(series.get("characters") or []),
        )

    async def get_season_metadata(
        self, series_external_id: str, season_number: int
    ) -> Optional[SeasonMetadata]:
        """
        Fiche d'une saison.

        La saison officielle est retrouvee dans la fiche etendue de la
        serie, puis detaillee via /seasons/{id}/extended.
        """
        series_id = _numeric_id(series_external_id, "series")
        series = await self._get_series_extended(series_id)
        if series is None:
            return None

        season_ref = next(
            (
                s for s in series.get("seasons") or []
                if s.get("number") == season_number
                and (s.get("type") or {}).get("type", "official") == "official"
            ),
            None,
        )
        if season_ref is None:
            return None

        season = await self._get_json(
            f"/seasons/{season_ref['id']}/extended",
            f"tvdb:season:{season_ref['id']}:{self._language}",
            APICache.DETAILS_TTL,
        )
        if season is None:
            return None

        episodes = season.get("episodes") or []
        aired = sorted(e["aired"] for e in episodes if e.get("aired"))
        poster = _first_artwork(season.get("artwork") or [], ARTWORK_SEASON_POSTER) or season.get("image")
        return SeasonMetadata(
            external_id=f"season-{season['id']}",
            season_number=season.get("number", season_number),
            name=season.get("name"),
            description=season.get("overview") or None,
            air_date=parse_date(aired[0]) if aired else None,
            poster_url=poster,
            episode_count=len(episodes) or None,
        )

    async def get_episode_metadata(
        self, series_external_id: str, season: int, episode: int
    ) -> Optional[VideoMetadata]:
        """
        Fiche d'un episode.

        Les credits viennent de la fiche etendue de l'episode ; si elle est
        introuvable, l'episode est renvoye sans credits.
        """
        series_id = _numeric_id(series_external_id, "series")
        data = await self._get_json(
            f"/series/{series_id}/episodes/default",
            f"tvdb:episodes:{series_id}:{season}:{self._language}",
            APICache.DETAILS_TTL,
            {"season": str(season)},
        )
        if data is None:
            return None

        episode_data = next(
            (
                e for e in data.get("episodes") or []
                if e.get("seasonNumber") == season and e.get("number") == episode
            ),
            None,
        )
        if episode_data is None:
            return None

        extended = await self._get_json(
            f"/episodes/{episode_data['id']}/extended",
            f"tvdb:episode:{episode_data['id']}:{self._language}",
            APICache.DETAILS_TTL,
        )
        characters = (extended or {}).get("characters") or []

        series = data.get("series") or {}
        return VideoMetadata(
            external_id=f"episode-{episode_data['id']}",
            title=episode_data.get("name") or "",
            description=episode_data.get("overview") or None,
            release_date=parse_date(episode_data.get("aired")),
            runtime=episode_data.get("runtime"),
            thumbnail_url=episode_data.get("image"),
            show_name=series.get("name"),
            season=episode_data.get("seasonNumber"),
            episode=episode_data.get("number"),
            episode_title=episode_data.get("name"),
            credits=self.map_characters(characters),
        )

    async def get_person_metadata(self, external_id: str) -> Optional[PersonMetadata]:
        """Fiche d'une personne ("tvdb-N" ou "N")."""
        person_id = _numeric_id(external_id, "tvdb")
        person = await self._get_json(
            f"/people/{person_id}/extended",
            f"tvdb:person:{person_id}",
            APICache.DETAILS_TTL,
        )
        if person is None:
            return None

        biography = next(
            (
                b.get("biography") for b in person.get("biographies") or []
                if b.get("language") == self._language
            ),
            None,
        )
        return PersonMetadata(
            external_id=f"tvdb-{person['id']}",
            name=person.get("name", ""),
            biography=biography or None,
            birth_date=parse_date(person.get("birth")),
            death_date=parse_date(person.get("death")),
            birth_place=person.get("birthPlace") or None,
            photo_url=person.get("image") or None,
            tvdb_id=person["id"],
        )

    def map_characters(self, characters: list[dict[str, Any]]) -> tuple[CreditInfo, ...]:
        """Convertit les personnages TVDB en credits, tries par ordre d'affichage."""
        credits = [
            CreditInfo(
                name=character.get("personName") or character.get("name", ""),
                type=CHARACTER_TYPES.get(character.get("type"), "actor"),
                role=character.get("name"),
                order=character.get("sort"),
                photo_url=character.get("personImgURL") or character.get("image"),
                tvdb_id=character.get("peopleId"),
            )
            for character in characters
        ]
        credits.sort(key=lambda c: c.order if c.order is not None else 999)
        return tuple(credits)

    async def close(self) -> None:
        """Ferme le client HTTP."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
