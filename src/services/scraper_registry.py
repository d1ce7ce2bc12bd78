"""
Registre des fournisseurs de metadonnees et selection avec repli.

Les fournisseurs sont interroges dans l'ordre d'enregistrement. Pour chaque
candidat : recherche avec les indices, premier resultat, puis fiche complete.
Le premier enregistrement non nul l'emporte ; une erreur ou un resultat vide
est consigne et le candidat suivant est essaye.

Un fournisseur epingle (scraper_id + external_id) est appele directement,
sans recherche ; ses erreurs remontent pour que la file applique son retry.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Optional, TypeVar

from loguru import logger

from src.core.entities.catalog import MediaKind
from src.core.ports.scrapers import ScraperCapability, ScraperProvider
from src.core.value_objects.metadata import (
    AudioMetadata,
    PersonMetadata,
    SearchResult,
    SeasonMetadata,
    SeriesMetadata,
    VideoMetadata,
)

T = TypeVar("T")


@dataclass(frozen=True)
class Match(Generic[T]):
    """Enregistrement retenu et fournisseur qui l'a produit."""

    provider_id: str
    record: T


class UnknownScraperError(LookupError):
    """Aucun fournisseur enregistre sous cet identifiant."""


class ScraperRegistry:
    """
    Ensemble ferme des fournisseurs disponibles.

    Example:
        registry = ScraperRegistry()
        registry.register(TMDBScraper(api_key, cache))
        registry.register(TVDBScraper(api_key, cache))
        match = await registry.find_video("Inception", year=2010)
    """

    def __init__(self) -> None:
        self._providers: dict[str, ScraperProvider] = {}

    def register(self, provider: ScraperProvider) -> None:
        """Ajoute un fournisseur (remplace celui de meme identifiant)."""
        self._providers[provider.id] = provider

    def get(self, provider_id: str) -> Optional[ScraperProvider]:
        return self._providers.get(provider_id)

    def all(self) -> list[ScraperProvider]:
        return list(self._providers.values())

    def configured(self) -> list[ScraperProvider]:
        """Fournisseurs dont les identifiants sont presents."""
        return [p for p in self._providers.values() if p.is_configured()]

    def candidates(
        self,
        kind: MediaKind,
        capability: ScraperCapability,
        requested_id: Optional[str] = None,
    ) -> list[ScraperProvider]:
        """
        Fournisseurs eligibles pour une operation.

        Args:
            kind: Type de media cible
            capability: Operation requise
            requested_id: Restreint la liste a ce fournisseur

        Returns:
            Fournisseurs configures supportant kind et capability, dans
            l'ordre d'enregistrement
        """
        return [
            provider
            for provider in self.configured()
            if kind in provider.supported_kinds
            and provider.supports(capability)
            and (requested_id is None or provider.id == requested_id)
        ]

    def _pinned(self, provider_id: str, capability: ScraperCapability) -> ScraperProvider:
        provider = self._providers.get(provider_id)
        if provider is None:
            raise UnknownScraperError(f"Unknown scraper: {provider_id}")
        if not provider.supports(capability):
            raise UnknownScraperError(
                f"Scraper {provider_id} does not support {capability.value}"
            )
        return provider

    async def search_all(
        self,
        query: str,
        kind: MediaKind = MediaKind.VIDEO,
        year: Optional[int] = None,
        video_type: Optional[str] = None,
    ) -> list[SearchResult]:
        """
        Agrege les resultats de recherche de tous les fournisseurs configures.

        Returns:
            Resultats tries par confiance decroissante (sans confiance en dernier)
        """
        capability = (
            ScraperCapability.SEARCH_AUDIO
            if kind == MediaKind.AUDIO
            else ScraperCapability.SEARCH_VIDEO
        )
        results: list[SearchResult] = []
        for provider in self.candidates(kind, capability):
            try:
                if kind == MediaKind.AUDIO:
                    found = await provider.search_audio(query)
                else:
                    found = await provider.search_video(query, year, video_type)
            except Exception as e:
                logger.warning(
                    "Recherche en echec", scraper=provider.id, query=query, error=str(e)
                )
                continue
            results.extend(found)

        return sorted(
            results,
            key=lambda r: (r.confidence is None, -(r.confidence or 0.0)),
        )

    async def _first_match(
        self,
        operation: str,
        providers: list[ScraperProvider],
        attempt: Callable[[ScraperProvider], Awaitable[Optional[Any]]],
    ) -> Optional[Match]:
        """Essaie chaque fournisseur jusqu'au premier enregistrement non nul."""
        for provider in providers:
            try:
                record = await attempt(provider)
            except Exception as e:
                logger.warning(
                    f"{operation}: echec du fournisseur, passage au suivant",
                    scraper=provider.id,
                    error=str(e),
                )
                continue
            if record is None:
                logger.debug(f"{operation}: aucun resultat", scraper=provider.id)
                continue
            return Match(provider.id, record)

        logger.info(f"{operation}: aucun fournisseur n'a trouve de correspondance")
        return None

    async def find_video(
        self,
        title: str,
        year: Optional[int] = None,
        video_type: Optional[str] = None,
        requested_id: Optional[str] = None,
    ) -> Optional[Match[VideoMetadata]]:
        """Recherche une video puis recupere la fiche du meilleur resultat."""

        async def attempt(provider: ScraperProvider) -> Optional[VideoMetadata]:
            results = await provider.search_video(title, year, video_type)
            if not results:
                return None
            return await provider.get_video_metadata(results[0].external_id)

        providers = [
            p
            for p in self.candidates(MediaKind.VIDEO, ScraperCapability.SEARCH_VIDEO, requested_id)
            if p.supports(ScraperCapability.VIDEO_METADATA)
        ]
        return await self._first_match(f"video '{title}'", providers, attempt)

    async def find_series(
        self, name: str, requested_id: Optional[str] = None
    ) -> Optional[Match[SeriesMetadata]]:
        """Recherche une serie puis recupere sa fiche."""

        async def attempt(provider: ScraperProvider) -> Optional[SeriesMetadata]:
            results = await provider.search_series(name)
            if not results:
                return None
            return await provider.get_series_metadata(results[0].external_id)

        providers = [
            p
            for p in self.candidates(MediaKind.VIDEO, ScraperCapability.SEARCH_SERIES, requested_id)
            if p.supports(ScraperCapability.SERIES_METADATA)
        ]
        return await self._first_match(f"serie '{name}'", providers, attempt)

    async def find_episode(
        self,
        show_name: str,
        season: int,
        episode: int,
        requested_id: Optional[str] = None,
    ) -> Optional[Match[VideoMetadata]]:
        """Recherche la serie puis recupere l'episode S{season}E{episode}."""

        async def attempt(provider: ScraperProvider) -> Optional[VideoMetadata]:
            results = await provider.search_series(show_name)
            if not results:
                return None
            return await provider.get_episode_metadata(results[0].external_id, season, episode)

        providers = [
            p
            for p in self.candidates(MediaKind.VIDEO, ScraperCapability.SEARCH_SERIES, requested_id)
            if p.supports(ScraperCapability.EPISODE_METADATA)
        ]
        return await self._first_match(
            f"episode '{show_name}' S{season:02d}E{episode:02d}", providers, attempt
        )

    async def find_audio(
        self, query: str, requested_id: Optional[str] = None
    ) -> Optional[Match[AudioMetadata]]:
        """Recherche une piste audio puis recupere sa fiche."""

        async def attempt(provider: ScraperProvider) -> Optional[AudioMetadata]:
            results = await provider.search_audio(query)
            if not results:
                return None
            return await provider.get_audio_metadata(results[0].external_id)

        providers = [
            p
            for p in self.candidates(MediaKind.AUDIO, ScraperCapability.SEARCH_AUDIO, requested_id)
            if p.supports(ScraperCapability.AUDIO_METADATA)
        ]
        return await self._first_match(f"audio '{query}'", providers, attempt)

    async def fetch_video(self, provider_id: str, external_id: str) -> Optional[Match[VideoMetadata]]:
        """Fiche video d'un fournisseur epingle, sans recherche."""
        provider = self._pinned(provider_id, ScraperCapability.VIDEO_METADATA)
        record = await provider.get_video_metadata(external_id)
        return Match(provider.id, record) if record is not None else None

    async def fetch_series(self, provider_id: str, external_id: str) -> Optional[Match[SeriesMetadata]]:
        """Fiche serie d'un fournisseur epingle."""
        provider = self._pinned(provider_id, ScraperCapability.SERIES_METADATA)
        record = await provider.get_series_metadata(external_id)
        return Match(provider.id, record) if record is not None else None

    async def fetch_season(
        self, provider_id: str, series_external_id: str, season_number: int
    ) -> Optional[Match[SeasonMetadata]]:
        """Fiche saison a partir de l'identite de la serie parente."""
        provider = self._pinned(provider_id, ScraperCapability.SEASON_METADATA)
        record = await provider.get_season_metadata(series_external_id, season_number)
        return Match(provider.id, record) if record is not None else None

    async def fetch_episode(
        self, provider_id: str, series_external_id: str, season: int, episode: int
    ) -> Optional[Match[VideoMetadata]]:
        """Fiche episode a partir de l'identite de la serie."""
        provider = self._pinned(provider_id, ScraperCapability.EPISODE_METADATA)
        record = await provider.get_episode_metadata(series_external_id, season, episode)
        return Match(provider.id, record) if record is not None else None

    async def fetch_audio(self, provider_id: str, external_id: str) -> Optional[Match[AudioMetadata]]:
        provider = self._pinned(provider_id, ScraperCapability.AUDIO_METADATA)
        record = await provider.get_audio_metadata(external_id)
        return Match(provider.id, record) if record is not None else None

    async def fetch_person(self, provider_id: str, external_id: str) -> Optional[Match[PersonMetadata]]:
        """Fiche personne d'un fournisseur epingle (id de la personne chez lui)."""
        provider = self._pinned(provider_id, ScraperCapability.PERSON_METADATA)
        record = await provider.get_person_metadata(external_id)
        return Match(provider.id, record) if record is not None else None

    async def close(self) -> None:
        """Ferme les clients HTTP de tous les fournisseurs."""
        for provider in self._providers.values():
            await provider.close()
