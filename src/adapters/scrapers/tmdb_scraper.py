"""
Fournisseur TMDB pour les films, series, saisons et episodes.

Implemente ScraperProvider pour TMDB (The Movie Database) v3.
Utilise le cache persistant et le mecanisme de retry pour gerer
le rate limiting.

Les identifiants externes sont prefixes par le type de fiche :
"movie-27205", "tv-1399", "episode-63056", "season-3624".

Usage:
    cache = APICache()
    scraper = TMDBScraper(api_key="your_key", cache=cache)
    results = await scraper.search_video("Inception", year=2010, video_type="movie")
    metadata = await scraper.get_video_metadata(results[0].external_id)
    await scraper.close()
"""

from datetime import date
from typing import Any, Optional

import httpx
from loguru import logger

from src.adapters.api.cache import APICache
from src.adapters.api.retry import request_with_retry
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

# Postes d'equipe technique conserves comme credits
CREW_JOBS: dict[str, str] = {
    "Director": "director",
    "Writer": "writer",
    "Screenplay": "writer",
    "Producer": "producer",
    "Executive Producer": "producer",
    "Original Music Composer": "composer",
    "Director of Photography": "cinematographer",
    "Editor": "editor",
}

MAX_CAST = 20


def parse_date(value: Optional[str]) -> Optional[date]:
    """Convertit une date ISO (YYYY-MM-DD) en date, None si vide ou invalide."""
    if not value:
        return None
    try:
        return date.fromisoformat(value[:10])
    except ValueError:
        return None


def _year(value: Optional[str]) -> Optional[int]:
    if value and len(value) >= 4 and value[:4].isdigit():
        return int(value[:4])
    return None


def split_external_id(external_id: str) -> tuple[str, str]:
    """
    Separe un identifiant externe TMDB en (type, id).

    "movie-27205" -> ("movie", "27205"), "1399" -> ("", "1399")
    """
    if "-" in external_id:
        kind, _, raw_id = external_id.partition("-")
        return kind, raw_id
    return "", external_id


class TMDBScraper(ScraperProvider):
    """
    Fournisseur TMDB.

    Implemente ScraperProvider avec:
    - Recherche de films, series ou les deux (/search/multi)
    - Fiches film, serie, saison et episode avec credits
    - Fiches personnes (/person/{id})
    - Cache persistant (24h recherches, 7j details)
    - Retry automatique sur 429, 5xx et erreurs reseau

    Attributes:
        TMDB_BASE_URL: URL de base de l'API TMDB v3
        TMDB_IMAGE_BASE_URL: URL de base pour les images
    """

    TMDB_BASE_URL = "https://api.themoviedb.org/3"
    TMDB_IMAGE_BASE_URL = "https://image.tmdb.org/t/p"

    def __init__(
        self,
        api_key: Optional[str],
        cache: APICache,
        language: str = "en-US",
        image_size: str = "w500",
    ) -> None:
        """
        Initialise le fournisseur TMDB.

        Args:
            api_key: Cle API v3 ou Read Access Token v4 (None = non configure)
            cache: Instance APICache pour le caching des reponses
            language: Langue des fiches (ex: "fr-FR")
            image_size: Taille des affiches (w500 par defaut)
        """
        self._api_key = api_key
        self._cache = cache
        self._language = language
        self._image_size = image_size
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def id(self) -> str:
        return "tmdb"

    @property
    def name(self) -> str:
        return "The Movie Database"

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
        Retourne le client HTTP, le cree si necessaire (lazy init).

        Supporte les deux modes d'authentification TMDB:
        - API Key v3 (32 caracteres hex) : passe en parametre api_key
        - Read Access Token v4 (long JWT) : passe en header Bearer
        """
        if not self._api_key:
            raise PermanentProviderError("TMDB API key not configured")

        if self._client is None or self._client.is_closed:
            headers = {"Accept": "application/json"}
            params = {}
            if len(self._api_key) > 40:
                headers["Authorization"] = f"Bearer {self._api_key}"
            else:
                params["api_key"] = self._api_key

            self._client = httpx.AsyncClient(
                base_url=self.TMDB_BASE_URL,
                headers=headers,
                params=params,
                timeout=30.0,
            )
        return self._client

    def _image_url(self, path: Optional[str], size: Optional[str] = None) -> Optional[str]:
        if not path:
            return None
        return f"{self.TMDB_IMAGE_BASE_URL}/{size or self._image_size}{path}"

    async def _get_json(
        self,
        endpoint: str,
        cache_key: str,
        ttl: int,
        params: Optional[dict[str, str]] = None,
    ) -> Optional[dict[str, Any]]:
        """
        GET cache-first d'un endpoint TMDB.

        Returns:
            Le corps JSON, ou None si TMDB repond 404
        """

        async def fetch() -> Optional[dict[str, Any]]:
            client = self._get_client()
            query = {"language": self._language}
            query.update(params or {})
            try:
                response = await request_with_retry(client, "GET", endpoint, params=query)
            except PermanentProviderError as e:
                if e.status_code == 404:
                    logger.debug("Fiche TMDB introuvable", endpoint=endpoint)
                    return None
                raise
            return response.json()

        return await self._cache.get_or_fetch(cache_key, ttl, fetch)

    async def search_video(
        self,
        query: str,
        year: Optional[int] = None,
        video_type: Optional[str] = None,
    ) -> list[SearchResult]:
        """
        Recherche des films, des series ou les deux.

        Args:
            query: Titre a rechercher
            year: Annee de sortie optionnelle
            video_type: "movie", "tv_series"/"tv_episode", ou None pour /search/multi

        Returns:
            Liste de SearchResult (vide si aucun resultat)
        """
        if video_type == "movie":
            endpoint = "/search/movie"
        elif video_type in ("tv_series", "tv_episode"):
            endpoint = "/search/tv"
        else:
            endpoint = "/search/multi"

        params = {"query": query, "include_adult": "false"}
        if year:
            params["year"] = str(year)

        data = await self._get_json(
            endpoint,
            f"tmdb:search:{endpoint}:{query.lower()}:{year}",
            APICache.SEARCH_TTL,
            params,
        )

        results: list[SearchResult] = []
        for item in (data or {}).get("results", []):
            if item.get("media_type") == "person":
                continue
            is_movie = item.get("media_type") == "movie" or "title" in item
            vote_average = item.get("vote_average")
            results.append(
                SearchResult(
                    external_id=f"{'movie' if is_movie else 'tv'}-{item['id']}",
                    title=item.get("title", "") if is_movie else item.get("name", ""),
                    year=_year(item.get("release_date") if is_movie else item.get("first_air_date")),
                    video_type="movie" if is_movie else "tv_series",
                    poster_url=self._image_url(item.get("poster_path")),
                    overview=item.get("overview"),
                    confidence=vote_average / 10 if vote_average else None,
                    scraper_id=self.id,
                )
            )
        return results

    async def search_series(self, query: str) -> list[SearchResult]:
        return await self.search_video(query, video_type="tv_series")

    async def get_video_metadata(self, external_id: str) -> Optional[VideoMetadata]:
        """
        Recupere la fiche complete d'un film ("movie-N") ou d'une serie ("tv-N").

        Returns:
            VideoMetadata, ou None si l'identifiant est inconnu
        """
        kind, raw_id = split_external_id(external_id)
        if kind == "movie":
            return await self._get_movie_metadata(raw_id)
        if kind == "tv":
            return await self._get_tv_as_video(raw_id)
        return None

    async def _get_movie_metadata(self, movie_id: str) -> Optional[VideoMetadata]:
        data = await self._get_json(
            f"/movie/{movie_id}",
            f"tmdb:movie:{movie_id}:{self._language}",
            APICache.DETAILS_TTL,
            {"append_to_response": "credits,release_dates"},
        )
        if data is None:
            return None

        # Classification US
        rating = None
        for country in data.get("release_dates", {}).get("results", []):
            if country.get("iso_3166_1") == "US":
                rating = next(
                    (rd["certification"] for rd in country.get("release_dates", []) if rd.get("certification")),
                    None,
                )
                break

        credits_data = data.get("credits", {})
        title = data.get("title") or data.get("original_title", "")
        original_title = data.get("original_title")
        return VideoMetadata(
            external_id=f"movie-{data['id']}",
            title=title,
            original_title=original_title if original_title != title else None,
            description=data.get("overview") or None,
            release_date=parse_date(data.get("release_date")),
            rating=rating,
            runtime=data.get("runtime"),
            genres=tuple(g["name"] for g in data.get("genres", []) if g.get("name")),
            poster_url=self._image_url(data.get("poster_path")),
            backdrop_url=self._image_url(data.get("backdrop_path"), "original"),
            credits=self.map_credits(credits_data.get("cast", []), credits_data.get("crew", [])),
        )

    async def _get_tv(self, tv_id: str) -> Optional[dict[str, Any]]:
        return await self._get_json(
            f"/tv/{tv_id}",
            f"tmdb:tv:{tv_id}:{self._language}",
            APICache.DETAILS_TTL,
            {"append_to_response": "credits,content_ratings"},
        )

    async def _get_tv_as_video(self, tv_id: str) -> Optional[VideoMetadata]:
        data = await self._get_tv(tv_id)
        if data is None:
            return None

        rating = next(
            (r.get("rating") for r in data.get("content_ratings", {}).get("results", []) if r.get("iso_3166_1") == "US"),
            None,
        )
        runtimes = data.get("episode_run_time") or []
        credits_data = data.get("credits", {})
        title = data.get("name") or data.get("original_name", "")
        original_title = data.get("original_name")
        return VideoMetadata(
            external_id=f"tv-{data['id']}",
            title=title,
            original_title=original_title if original_title != title else None,
            description=data.get("overview") or None,
            release_date=parse_date(data.get("first_air_date")),
            rating=rating,
            runtime=runtimes[0] if runtimes else None,
            genres=tuple(g["name"] for g in data.get("genres", []) if g.get("name")),
            poster_url=self._image_url(data.get("poster_path")),
            backdrop_url=self._image_url(data.get("backdrop_path"), "original"),
            show_name=title,
            credits=self.map_credits(credits_data.get("cast", []), credits_data.get("crew", [])),
        )

    async def get_series_metadata(self, external_id: str) -> Optional[SeriesMetadata]:
        """Recupere la fiche complete d'une serie ("tv-N" ou "N")."""
        _, tv_id = split_external_id(external_id)
        data = await self._get_tv(tv_id)
        if data is None:
            return None

        credits_data = data.get("credits", {})
        title = data.get("name") or data.get("original_name", "")
        original_title = data.get("original_name")
        return SeriesMetadata(
            external_id=f"tv-{data['id']}",
            title=title,
            original_title=original_title if original_title != title else None,
            description=data.get("overview") or None,
            first_air_date=parse_date(data.get("first_air_date")),
            last_air_date=parse_date(data.get("last_air_date")),
            status=data.get("status"),
            rating=data.get("vote_average"),
            genres=tuple(g["name"] for g in data.get("genres", []) if g.get("name")),
            poster_url=self._image_url(data.get("poster_path")),
            backdrop_url=self._image_url(data.get("backdrop_path"), "original"),
            season_count=data.get("number_of_seasons"),
            credits=self.map_credits(credits_data.get("cast", []), credits_data.get("crew", [])),
        )

    async def get_season_metadata(
        self, series_external_id: str, season_number: int
    ) -> Optional[SeasonMetadata]:
        """Recupere la fiche d'une saison."""
        _, tv_id = split_external_id(series_external_id)
        data = await self._get_json(
            f"/tv/{tv_id}/season/{season_number}",
            f"tmdb:season:{tv_id}:{season_number}:{self._language}",
            APICache.DETAILS_TTL,
        )
        if data is None:
            return None

        number = data.get("season_number", season_number)
        name = data.get("name")
        return SeasonMetadata(
            external_id=f"season-{data['id']}",
            season_number=number,
            name=name if name and name != f"Season {number}" else None,
            description=data.get("overview") or None,
            air_date=parse_date(data.get("air_date")),
            poster_url=self._image_url(data.get("poster_path")),
            episode_count=data.get("episode_count", len(data.get("episodes", [])) or None),
        )

    async def get_episode_metadata(
        self, series_external_id: str, season: int, episode: int
    ) -> Optional[VideoMetadata]:
        """
        Recupere la fiche d'un episode.

        Le nom de la serie vient de la fiche serie ; les guest stars
        sont ajoutees a la distribution reguliere.
        """
        _, tv_id = split_external_id(series_external_id)
        series = await self._get_tv(tv_id)
        if series is None:
            return None

        data = await self._get_json(
            f"/tv/{tv_id}/season/{season}/episode/{episode}",
            f"tmdb:episode:{tv_id}:{season}:{episode}:{self._language}",
            APICache.DETAILS_TTL,
            {"append_to_response": "credits"},
        )
        if data is None:
            return None

        credits_data = data.get("credits", {})
        cast = list(credits_data.get("cast", [])) + list(credits_data.get("guest_stars", []))
        return VideoMetadata(
            external_id=f"episode-{data['id']}",
            title=data.get("name", ""),
            description=data.get("overview") or None,
            release_date=parse_date(data.get("air_date")),
            runtime=data.get("runtime"),
            thumbnail_url=self._image_url(data.get("still_path"), "original"),
            show_name=series.get("name"),
            season=data.get("season_number", season),
            episode=data.get("episode_number", episode),
            episode_title=data.get("name"),
            credits=self.map_credits(cast, credits_data.get("crew", [])),
        )

    async def get_person_metadata(self, external_id: str) -> Optional[PersonMetadata]:
        """Recupere la fiche d'une personne (id TMDB numerique)."""
        _, person_id = split_external_id(external_id)
        data = await self._get_json(
            f"/person/{person_id}",
            f"tmdb:person:{person_id}:{self._language}",
            APICache.DETAILS_TTL,
        )
        if data is None:
            return None

        return PersonMetadata(
            external_id=str(data["id"]),
            name=data.get("name", ""),
            biography=data.get("biography") or None,
            birth_date=parse_date(data.get("birthday")),
            death_date=parse_date(data.get("deathday")),
            birth_place=data.get("place_of_birth"),
            photo_url=self._image_url(data.get("profile_path"), "w185"),
            tmdb_id=data["id"],
            imdb_id=data.get("imdb_id") or None,
        )

    def map_credits(
        self, cast: list[dict[str, Any]], crew: list[dict[str, Any]]
    ) -> tuple[CreditInfo, ...]:
        """
        Convertit distribution et equipe TMDB en credits.

        Les 20 premiers acteurs, puis les postes de CREW_JOBS
        dedupliques par (nom, type).
        """
        credits: list[CreditInfo] = []
        for person in cast[:MAX_CAST]:
            credits.append(
                CreditInfo(
                    name=person.get("name", ""),
                    type="actor",
                    role=person.get("character"),
                    order=person.get("order"),
                    photo_url=self._image_url(person.get("profile_path"), "w185"),
                    tmdb_id=person.get("id"),
                )
            )

        seen = {(c.name, c.type) for c in credits}
        for person in crew:
            credit_type = CREW_JOBS.get(person.get("job", ""))
            if credit_type is None:
                continue
            name = person.get("name", "")
            if (name, credit_type) in seen:
                continue
            seen.add((name, credit_type))
            credits.append(
                CreditInfo(
                    name=name,
                    type=credit_type,
                    role=person.get("job"),
                    photo_url=self._image_url(person.get("profile_path"), "w185"),
                    tmdb_id=person.get("id"),
                )
            )
        return tuple(credits)

    async def close(self) -> None:
        """
        Ferme le client HTTP.

        Doit etre appele a la fin de l'utilisation pour liberer
        les ressources reseau.
        """
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
