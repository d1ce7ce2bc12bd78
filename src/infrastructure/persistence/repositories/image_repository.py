"""
Implementation SQLModel du repository Image.

Invariant : au plus une image primaire par (proprietaire, type).
"""

from pathlib import Path
from typing import Optional

from sqlalchemy import func
from sqlmodel import Session, select

from src.core.entities.details import Image, ImageOwner, ImageOwnerType, ImageType
from src.core.ports.repositories import IImageRepository
from src.infrastructure.persistence.models import ImageModel


class SQLModelImageRepository(IImageRepository):
    """Repository SQLModel pour les images."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def _to_entity(self, model: ImageModel) -> Image:
        return Image(
            id=model.id,
            owner=ImageOwner(ImageOwnerType(model.owner_type), model.owner_id),
            image_type=ImageType(model.image_type),
            path=Path(model.path),
            width=model.width,
            height=model.height,
            format=model.format,
            file_size=model.file_size,
            source_url=model.source_url,
            scraper_id=model.scraper_id,
            is_primary=model.is_primary,
        )

    def _owner_query(self, statement, owner: ImageOwner):
        return statement.where(
            ImageModel.owner_type == owner.owner_type.value,
            ImageModel.owner_id == owner.owner_id,
        )

    def count(self, owner: ImageOwner, image_type: Optional[ImageType] = None) -> int:
        statement = self._owner_query(select(func.count()).select_from(ImageModel), owner)
        if image_type is not None:
            statement = statement.where(ImageModel.image_type == image_type.value)
        return self._session.exec(statement).one()

    def get_primary(self, owner: ImageOwner, image_type: ImageType) -> Optional[Image]:
        statement = self._owner_query(select(ImageModel), owner).where(
            ImageModel.image_type == image_type.value,
            ImageModel.is_primary == True,  # noqa: E712
        )
        model = self._session.exec(statement).first()
        return self._to_entity(model) if model else None

    def save_image(self, image: Image) -> Image:
        """
        Enregistre une image.

        Une image primaire retire le drapeau des autres images du meme
        (proprietaire, type) et remplace la ligne existante de ce type.
        """
        if image.owner is None:
            raise ValueError("Image owner is required")

        same_type = self._owner_query(select(ImageModel), image.owner).where(
            ImageModel.image_type == image.image_type.value
        )
        existing = self._session.exec(same_type.order_by(ImageModel.id)).all()

        model: Optional[ImageModel] = None
        if image.is_primary:
            for other in existing:
                if other.is_primary:
                    other.is_primary = False
                    self._session.add(other)
            if existing:
                model = existing[0]

        if model is None:
            model = ImageModel(
                owner_type=image.owner.owner_type.value,
                owner_id=image.owner.owner_id,
                image_type=image.image_type.value,
                path=str(image.path),
            )

        model.path = str(image.path)
        model.width = image.width
        model.height = image.height
        model.format = image.format
        model.file_size = image.file_size
        model.source_url = image.source_url
        model.scraper_id = image.scraper_id
        model.is_primary = image.is_primary
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model)

    def list_for_owner(self, owner: ImageOwner) -> list[Image]:
        statement = self._owner_query(select(ImageModel), owner).order_by(ImageModel.id)
        return [self._to_entity(model) for model in self._session.exec(statement).all()]
