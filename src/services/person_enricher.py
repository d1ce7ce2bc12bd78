"""
Rafraichissement de la fiche d'une personne.

La fiche est demandee par identifiant externe, d'abord a TMDB (tmdb_id)
puis a TVDB (tvdb_id). Le premier fournisseur qui repond l'emporte ; ses
erreurs sont consignees et le suivant est essaye. La photo n'est
telechargee que si la personne n'en a pas encore.
"""

from dataclasses import dataclass
from typing import Optional

from loguru import logger

from src.core.entities.details import ImageOwner, ImageOwnerType, ImageType, Person
from src.core.errors import TargetGoneError
from src.core.ports.repositories import IImageRepository, IPersonRepository
from src.core.value_objects.metadata import PersonMetadata
from src.services.image_ingestion import ImageIngestion, ImageRequest
from src.services.scraper_registry import Match, ScraperRegistry

PERSON_FIELDS = ("biography", "birth_date", "death_date", "birth_place")
PERSON_IDS = ("imdb_id", "tmdb_id", "tvdb_id")


@dataclass
class PersonRefreshResult:
    """Personne apres rafraichissement et fournisseur utilise (None si aucun)."""

    person: Person
    scraper_id: Optional[str] = None
    photo_saved: bool = False


class PersonEnricher:
    """Complete biographie, dates et lieu de naissance d'une personne."""

    def __init__(
        self,
        person_repo: IPersonRepository,
        image_repo: IImageRepository,
        registry: ScraperRegistry,
        ingestion: ImageIngestion,
    ) -> None:
        self._person_repo = person_repo
        self._image_repo = image_repo
        self._registry = registry
        self._ingestion = ingestion

    def _lookups(self, person: Person) -> list[tuple[str, str]]:
        lookups = []
        if person.tmdb_id is not None:
            lookups.append(("tmdb", str(person.tmdb_id)))
        if person.tvdb_id is not None:
            lookups.append(("tvdb", str(person.tvdb_id)))
        return lookups

    async def _fetch(self, person: Person) -> Optional[Match[PersonMetadata]]:
        for provider_id, external_id in self._lookups(person):
            provider = self._registry.get(provider_id)
            if provider is None or not provider.is_configured():
                continue
            try:
                match = await self._registry.fetch_person(provider_id, external_id)
            except Exception as e:
                logger.warning(
                    "Fiche personne en echec, passage au suivant",
                    scraper=provider_id,
                    person_id=person.id,
                    error=str(e),
                )
                continue
            if match is not None:
                return match
        return None

    @staticmethod
    def apply(person: Person, record: PersonMetadata) -> Person:
        """Recopie les champs renseignes de la fiche ; les ids manquants sont completes."""
        for attr in PERSON_FIELDS:
            value = getattr(record, attr)
            if value is not None:
                setattr(person, attr, value)
        for attr in PERSON_IDS:
            value = getattr(record, attr)
            if value is not None and getattr(person, attr) is None:
                setattr(person, attr, value)
        if not person.name and record.name:
            person.name = record.name
        return person

    async def refresh(self, person_id: int, force: bool = False) -> PersonRefreshResult:
        """
        Rafraichit une personne depuis ses identifiants externes.

        Args:
            person_id: Personne cible
            force: Interroge les fournisseurs meme si une biographie existe

        Returns:
            PersonRefreshResult (scraper_id None si rien n'a ete ecrit)

        Raises:
            TargetGoneError: La personne n'existe plus
        """
        person = self._person_repo.get_by_id(person_id)
        if person is None:
            raise TargetGoneError(f"Person {person_id} not found")
        if person.biography and not force:
            logger.debug("Biographie deja presente", person_id=person_id)
            return PersonRefreshResult(person)

        match = await self._fetch(person)
        if match is None:
            logger.info("Aucune fiche trouvee pour la personne", person_id=person_id, name=person.name)
            return PersonRefreshResult(person)

        person = self._person_repo.save(self.apply(person, match.record))
        result = PersonRefreshResult(person, scraper_id=match.provider_id)

        owner = ImageOwner(ImageOwnerType.PERSON, person.id)
        photo_url = match.record.photo_url
        if photo_url and self._image_repo.get_primary(owner, ImageType.PHOTO) is None:
            ingestion = await self._ingestion.ingest_all(
                [ImageRequest(owner, ImageType.PHOTO, photo_url, match.provider_id)]
            )
            result.photo_saved = bool(ingestion.saved)

        logger.info(
            "Personne rafraichie",
            person_id=person.id,
            name=person.name,
            scraper=match.provider_id,
            photo=result.photo_saved,
        )
        return result
