"""
Implementation SQLModel du repository Media.

Implemente IMediaRepository pour la persistance des fichiers media et de
leurs flux. Un media est unique par chemin : l'upsert remplace ses flux.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sqlalchemy import delete, func
from sqlmodel import Session, select

from src.core.entities.catalog import Media, MediaKind, MediaStream, StreamType
from src.core.ports.repositories import IMediaRepository
from src.infrastructure.persistence.models import MediaModel, MediaStreamModel


class SQLModelMediaRepository(IMediaRepository):
    """
    Repository SQLModel pour les medias.

    Implemente IMediaRepository avec conversion bidirectionnelle
    entre l'entite Media (domaine) et MediaModel (persistance).
    """

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _to_entity(self, model: MediaModel, with_streams: bool = False) -> Media:
        """
        Convertit un modele DB en entite domaine.

        Args :
            model : Le modele MediaModel depuis la DB
            with_streams : Charger aussi les flux

        Retourne :
            L'entite Media correspondante
        """
        streams: list[MediaStream] = []
        if with_streams and model.id is not None:
            statement = (
                select(MediaStreamModel)
                .where(MediaStreamModel.media_id == model.id)
                .order_by(MediaStreamModel.stream_index)
            )
            streams = [self._stream_to_entity(s) for s in self._session.exec(statement).all()]

        return Media(
            id=model.id,
            path=Path(model.path),
            name=model.name,
            kind=MediaKind(model.kind),
            duration=model.duration,
            library_id=model.library_id,
            collection_id=model.collection_id,
            thumbnails=Path(model.thumbnails) if model.thumbnails else None,
            streams=streams,
        )

    def _stream_to_entity(self, model: MediaStreamModel) -> MediaStream:
        return MediaStream(
            index=model.stream_index,
            stream_type=StreamType(model.stream_type),
            codec=model.codec,
            codec_long=model.codec_long,
            language=model.language,
            title=model.title,
            is_default=model.is_default,
            is_forced=model.is_forced,
            channels=model.channels,
            channel_layout=model.channel_layout,
            sample_rate=model.sample_rate,
            bit_rate=model.bit_rate,
            width=model.width,
            height=model.height,
            frame_rate=model.frame_rate,
        )

    def _stream_to_model(self, media_id: int, stream: MediaStream) -> MediaStreamModel:
        return MediaStreamModel(
            media_id=media_id,
            stream_index=stream.index,
            stream_type=stream.stream_type.value,
            codec=stream.codec,
            codec_long=stream.codec_long,
            language=stream.language,
            title=stream.title,
            is_default=stream.is_default,
            is_forced=stream.is_forced,
            channels=stream.channels,
            channel_layout=stream.channel_layout,
            sample_rate=stream.sample_rate,
            bit_rate=stream.bit_rate,
            width=stream.width,
            height=stream.height,
            frame_rate=stream.frame_rate,
        )

    def get_by_id(self, media_id: int) -> Optional[Media]:
        """Recupere un media par son ID interne."""
        model = self._session.get(MediaModel, media_id)
        return self._to_entity(model) if model else None

    def get_by_path(self, path: Path) -> Optional[Media]:
        """Recupere un media par son chemin, avec ses flux."""
        statement = select(MediaModel).where(MediaModel.path == str(path))
        model = self._session.exec(statement).first()
        return self._to_entity(model, with_streams=True) if model else None

    def upsert(self, media: Media) -> Media:
        """
        Insere ou met a jour un media par chemin.

        Les flux existants sont supprimes puis remplaces par media.streams.
        """
        statement = select(MediaModel).where(MediaModel.path == str(media.path))
        model = self._session.exec(statement).first()
        if model:
            model.name = media.name
            model.kind = media.kind.value
            model.duration = media.duration
            model.library_id = media.library_id
            model.collection_id = media.collection_id
            model.thumbnails = str(media.thumbnails) if media.thumbnails else None
            model.updated_at = datetime.now()
        else:
            model = MediaModel(
                path=str(media.path),
                name=media.name,
                kind=media.kind.value,
                duration=media.duration,
                library_id=media.library_id,
                collection_id=media.collection_id,
                thumbnails=str(media.thumbnails) if media.thumbnails else None,
            )
        self._session.add(model)
        self._session.flush()

        self._session.exec(delete(MediaStreamModel).where(MediaStreamModel.media_id == model.id))
        for stream in media.streams:
            self._session.add(self._stream_to_model(model.id, stream))

        self._session.commit()
        self._session.refresh(model)
        return self._to_entity(model, with_streams=True)

    def rename(self, media_id: int, name: str) -> None:
        model = self._session.get(MediaModel, media_id)
        if model is None:
            return
        model.name = name
        model.updated_at = datetime.now()
        self._session.add(model)
        self._session.commit()

    def list_by_collection(self, collection_id: int) -> list[Media]:
        statement = (
            select(MediaModel)
            .where(MediaModel.collection_id == collection_id)
            .order_by(MediaModel.path)
        )
        return [self._to_entity(model) for model in self._session.exec(statement).all()]

    def count_by_library(self, library_id: int) -> int:
        statement = select(func.count()).select_from(MediaModel).where(
            MediaModel.library_id == library_id
        )
        return self._session.exec(statement).one()
