"""
Rapprochement des personnes citees dans les credits.

Une personne est retrouvee par imdb_id, puis tmdb_id, puis tvdb_id, puis
nom exact ; a defaut elle est creee. Les identifiants externes manquants
sur une personne existante sont completes.
"""

from typing import Optional

from src.core.entities.details import Person
from src.core.ports.repositories import IPersonRepository
from src.core.value_objects.metadata import CreditInfo


class PersonResolver:
    """Find-or-create des personnes a partir des credits d'un fournisseur."""

    def __init__(self, person_repo: IPersonRepository) -> None:
        self._person_repo = person_repo

    def _find(self, credit: CreditInfo) -> Optional[Person]:
        if credit.imdb_id:
            person = self._person_repo.find_by_imdb_id(credit.imdb_id)
            if person:
                return person
        if credit.tmdb_id is not None:
            person = self._person_repo.find_by_tmdb_id(credit.tmdb_id)
            if person:
                return person
        if credit.tvdb_id is not None:
            person = self._person_repo.find_by_tvdb_id(credit.tvdb_id)
            if person:
                return person
        return self._person_repo.find_by_name(credit.name)

    def resolve(self, credit: CreditInfo) -> tuple[Person, bool]:
        """
        Retrouve ou cree la personne d'un credit.

        Returns:
            (personne persistee, True si creee)
        """
        person = self._find(credit)
        if person is None:
            person = self._person_repo.save(
                Person(
                    name=credit.name,
                    imdb_id=credit.imdb_id,
                    tmdb_id=credit.tmdb_id,
                    tvdb_id=credit.tvdb_id,
                )
            )
            return person, True

        changed = False
        for attr in ("imdb_id", "tmdb_id", "tvdb_id"):
            value = getattr(credit, attr)
            if value is not None and getattr(person, attr) is None:
                setattr(person, attr, value)
                changed = True
        if changed:
            person = self._person_repo.save(person)
        return person, False
