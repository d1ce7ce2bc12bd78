"""
Implementation SQLModel des repositories Person et Credit.
"""

from typing import Optional, Sequence

from sqlalchemy import delete
from sqlmodel import Session, select

from src.core.entities.details import Credit, CreditType, Person
from src.core.ports.repositories import ICreditRepository, IPersonRepository
from src.infrastructure.persistence.models import CreditModel, PersonModel


class SQLModelPersonRepository(IPersonRepository):
    """Repository SQLModel pour les personnes."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: PersonModel) -> Person:
        return Person(
            id=model.id,
            name=model.name,
            biography=model.biography,
            birth_date=model.birth_date,
            death_date=model.death_date,
            birth_place=model.birth_place,
            tmdb_id=model.tmdb_id,
            tvdb_id=model.tvdb_id,
            imdb_id=model.imdb_id,
        )

    def _first(self, statement) -> Optional[Person]:
        model = self._session.exec(statement.order_by(PersonModel.id)).first()
        return self._to_entity(model) if model else None

    def get_by_id(self, person_id: int) -> Optional[Person]:
        model = self._session.get(PersonModel, person_id)
        return self._to_entity(model) if model else None

    def find_by_imdb_id(self, imdb_id: str) -> Optional[Person]:
        return self._first(select(PersonModel).where(PersonModel.imdb_id == imdb_id))

    def find_by_tmdb_id(self, tmdb_id: int) -> Optional[Person]:
        return self._first(select(PersonModel).where(PersonModel.tmdb_id == tmdb_id))

    def find_by_tvdb_id(self, tvdb_id: int) -> Optional[Person]:
        return self._first(select(PersonModel).where(PersonModel.tvdb_id == tvdb_id))

    def find_by_name(self, name: str) -> Optional[Person]:
        return self._first(select(PersonModel).where(PersonModel.name == name))

    def save(self, person: Person) -> Person:
        """Sauvegarde une personne (insertion ou mise a jour)."""
        model = self._session.get(PersonModel, person.id) if person.id else None
        if model is None:
            model = PersonModel(name=person.name)
        model.name = person.name
        model.biography = person.biography
        model.birth_date = person.birth_date
        model.death_date = person.death_date
        model.birth_place = person.birth_place
        model.tmdb_id = person.tmdb_id
        model.tvdb_id = person.tvdb_id
        model.imdb_id = person.imdb_id
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)


class SQLModelCreditRepository(ICreditRepository):
    """
    Repository SQLModel pour les credits.

    Les credits d'un proprietaire sont toujours remplaces en bloc :
    suppression puis insertion dans la meme transaction.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: CreditModel) -> Credit:
        return Credit(
            id=model.id,
            name=model.name,
            role=model.role,
            credit_type=CreditType(model.credit_type),
            order=model.order,
            person_id=model.person_id,
            video_details_id=model.video_details_id,
            show_details_id=model.show_details_id,
        )

    def _replace(self, owner_column, owner_id: int, credits: Sequence[Credit], owner_field: str) -> list[Credit]:
        self._session.exec(delete(CreditModel).where(owner_column == owner_id))
        models = []
        for credit in credits:
            model = CreditModel(
                name=credit.name,
                role=credit.role,
                credit_type=credit.credit_type.value,
                order=credit.order,
                person_id=credit.person_id,
            )
            setattr(model, owner_field, owner_id)
            self._session.add(model)
            models.append(model)
        self._session.commit()
        for model in models:
            self._session.refresh(model)
        return [self._to_entity(model) for model in models]

    def replace_video_credits(self, video_details_id: int, credits: Sequence[Credit]) -> list[Credit]:
        return self._replace(CreditModel.video_details_id, video_details_id, credits, "video_details_id")

    def replace_show_credits(self, show_details_id: int, credits: Sequence[Credit]) -> list[Credit]:
        return self._replace(CreditModel.show_details_id, show_details_id, credits, "show_details_id")

    def list_video_credits(self, video_details_id: int) -> list[Credit]:
        statement = (
            select(CreditModel)
            .where(CreditModel.video_details_id == video_details_id)
            .order_by(CreditModel.id)
        )
        return [self._to_entity(model) for model in self._session.exec(statement).all()]

    def list_show_credits(self, show_details_id: int) -> list[Credit]:
        statement = (
            select(CreditModel)
            .where(CreditModel.show_details_id == show_details_id)
            .order_by(CreditModel.id)
        )
        return [self._to_entity(model) for model in self._session.exec(statement).all()]
