"""
Implementation SQLModel du repository Collection.

Implemente ICollectionRepository : une seule collection par
(library_id, name, parent_id), creee a la demande par le scanner.
"""

from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from src.core.entities.catalog import Collection, CollectionType
from src.core.ports.repositories import ICollectionRepository
from src.infrastructure.persistence.models import CollectionModel


class SQLModelCollectionRepository(ICollectionRepository):
    """
    Repository SQLModel pour les collections.

    Implemente ICollectionRepository avec conversion bidirectionnelle
    entre l'entite Collection (domaine) et CollectionModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: CollectionModel) -> Collection:
        return Collection(
            id=model.id,
            library_id=model.library_id,
            name=model.name,
            collection_type=CollectionType(model.collection_type),
            parent_id=model.parent_id,
        )

    def get_by_id(self, collection_id: int) -> Optional[Collection]:
        """Recupere une collection par son ID interne."""
        model = self._session.get(CollectionModel, collection_id)
        return self._to_entity(model) if model else None

    def find_or_create(
        self,
        library_id: int,
        name: str,
        parent_id: Optional[int],
        collection_type: CollectionType,
    ) -> tuple[Collection, bool]:
        """
        Trouve une collection par (bibliotheque, nom, parent) ou la cree.

        Le type est mis a jour s'il a change (ex: profondeur reinterpretee).

        Retourne :
            (collection, True si creee)
        """
        statement = select(CollectionModel).where(
            CollectionModel.library_id == library_id,
            CollectionModel.name == name,
        )
        if parent_id is None:
            statement = statement.where(CollectionModel.parent_id.is_(None))
        else:
            statement = statement.where(CollectionModel.parent_id == parent_id)

        existing = self._session.exec(statement).first()
        if existing:
            if existing.collection_type != collection_type.value:
                existing.collection_type = collection_type.value
                existing.updated_at = datetime.now()
                self._session.add(existing)
                self._session.commit()
                self._session.refresh(existing)
            return self._to_entity(existing), False

        model = CollectionModel(
            library_id=library_id,
            name=name,
            parent_id=parent_id,
            collection_type=collection_type.value,
        )
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model), True

    def list_by_library(self, library_id: int) -> list[Collection]:
        statement = (
            select(CollectionModel)
            .where(CollectionModel.library_id == library_id)
            .order_by(CollectionModel.id)
        )
        return [self._to_entity(model) for model in self._session.exec(statement).all()]
