"""
Implementation SQLModel du repository Library.
"""

from pathlib import Path
from typing import Optional

from sqlmodel import Session, select

from src.core.entities.catalog import Library, LibraryType
from src.core.ports.repositories import ILibraryRepository
from src.infrastructure.persistence.models import LibraryModel


class SQLModelLibraryRepository(ILibraryRepository):
    """Repository SQLModel pour les bibliotheques."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: LibraryModel) -> Library:
        return Library(
            id=model.id,
            name=model.name,
            path=Path(model.path),
            library_type=LibraryType(model.library_type),
            created_at=model.created_at,
        )

    def get_by_id(self, library_id: int) -> Optional[Library]:
        model = self._session.get(LibraryModel, library_id)
        return self._to_entity(model) if model else None

    def list_all(self) -> list[Library]:
        models = self._session.exec(select(LibraryModel).order_by(LibraryModel.id)).all()
        return [self._to_entity(model) for model in models]

    def save(self, library: Library) -> Library:
        """Sauvegarde une bibliotheque (insertion ou mise a jour)."""
        existing = self._session.get(LibraryModel, library.id) if library.id else None
        if existing:
            existing.name = library.name
            existing.path = str(library.path)
            existing.library_type = library.library_type.value
            model = existing
        else:
            model = LibraryModel(
                name=library.name,
                path=str(library.path),
                library_type=library.library_type.value,
            )
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)
