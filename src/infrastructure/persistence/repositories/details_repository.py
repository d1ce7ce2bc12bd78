"""
Implementation SQLModel du repository des lignes de detail.

Une ligne de detail par cible : VideoDetails/AudioDetails par media,
ShowDetails/SeasonDetails par collection. Toutes les ecritures sont des
upserts sur la cle de la cible.
"""

import json
from datetime import datetime
from typing import Optional

from sqlmodel import Session, select

from src.core.entities.details import AudioDetails, SeasonDetails, ShowDetails, VideoDetails
from src.core.ports.repositories import IDetailsRepository
from src.infrastructure.persistence.models import (
    AudioDetailsModel,
    SeasonDetailsModel,
    ShowDetailsModel,
    VideoDetailsModel,
)


class SQLModelDetailsRepository(IDetailsRepository):
    """Repository SQLModel des details video, audio, serie et saison."""

    def __init__(self, session: Session) -> None:
        """
        Initialise le repository avec une session SQLModel.

        Args :
            session : Session SQLModel active pour les operations DB
        """
        self._session = session

    def _save(self, model):
        model.updated_at = datetime.now()
        self._session.add(model)
        self._session.commit()
        self._session.refresh(model)
        return model

    # Video

    def _video_to_entity(self, model: VideoDetailsModel) -> VideoDetails:
        genres = json.loads(model.genres_json) if model.genres_json else []
        return VideoDetails(
            id=model.id,
            media_id=model.media_id,
            scraper_id=model.scraper_id,
            external_id=model.external_id,
            original_title=model.original_title,
            show_name=model.show_name,
            season=model.season,
            episode=model.episode,
            description=model.description,
            release_date=model.release_date,
            rating=model.rating,
            runtime=model.runtime,
            genres=tuple(genres),
        )

    def get_video_details(self, media_id: int) -> Optional[VideoDetails]:
        statement = select(VideoDetailsModel).where(VideoDetailsModel.media_id == media_id)
        model = self._session.exec(statement).first()
        return self._video_to_entity(model) if model else None

    def upsert_video_details(self, details: VideoDetails) -> VideoDetails:
        statement = select(VideoDetailsModel).where(VideoDetailsModel.media_id == details.media_id)
        model = self._session.exec(statement).first() or VideoDetailsModel(media_id=details.media_id)
        model.scraper_id = details.scraper_id
        model.external_id = details.external_id
        model.original_title = details.original_title
        model.show_name = details.show_name
        model.season = details.season
        model.episode = details.episode
        model.description = details.description
        model.release_date = details.release_date
        model.rating = details.rating
        model.runtime = details.runtime
        model.genres_json = json.dumps(list(details.genres)) if details.genres else None
        return self._video_to_entity(self._save(model))

    # Audio

    def _audio_to_entity(self, model: AudioDetailsModel) -> AudioDetails:
        return AudioDetails(
            id=model.id,
            media_id=model.media_id,
            artist=model.artist,
            album_artist=model.album_artist,
            album=model.album,
            track=model.track,
            disc=model.disc,
            year=model.year,
            genre=model.genre,
        )

    def get_audio_details(self, media_id: int) -> Optional[AudioDetails]:
        statement = select(AudioDetailsModel).where(AudioDetailsModel.media_id == media_id)
        model = self._session.exec(statement).first()
        return self._audio_to_entity(model) if model else None

    def upsert_audio_details(self, details: AudioDetails) -> AudioDetails:
        statement = select(AudioDetailsModel).where(AudioDetailsModel.media_id == details.media_id)
        model = self._session.exec(statement).first() or AudioDetailsModel(media_id=details.media_id)
        model.artist = details.artist
        model.album_artist = details.album_artist
        model.album = details.album
        model.track = details.track
        model.disc = details.disc
        model.year = details.year
        model.genre = details.genre
        return self._audio_to_entity(self._save(model))

    # Show

    def _show_to_entity(self, model: ShowDetailsModel) -> ShowDetails:
        return ShowDetails(
            id=model.id,
            collection_id=model.collection_id,
            scraper_id=model.scraper_id,
            external_id=model.external_id,
            description=model.description,
            release_date=model.release_date,
            end_date=model.end_date,
            status=model.status,
            rating=model.rating,
            genres=model.genres,
        )

    def get_show_details(self, collection_id: int) -> Optional[ShowDetails]:
        statement = select(ShowDetailsModel).where(ShowDetailsModel.collection_id == collection_id)
        model = self._session.exec(statement).first()
        return self._show_to_entity(model) if model else None

    def upsert_show_details(self, details: ShowDetails) -> ShowDetails:
        statement = select(ShowDetailsModel).where(
            ShowDetailsModel.collection_id == details.collection_id
        )
        model = self._session.exec(statement).first() or ShowDetailsModel(
            collection_id=details.collection_id
        )
        model.scraper_id = details.scraper_id
        model.external_id = details.external_id
        model.description = details.description
        model.release_date = details.release_date
        model.end_date = details.end_date
        model.status = details.status
        model.rating = details.rating
        model.genres = details.genres
        return self._show_to_entity(self._save(model))

    # Season

    def _season_to_entity(self, model: SeasonDetailsModel) -> SeasonDetails:
        return SeasonDetails(
            id=model.id,
            collection_id=model.collection_id,
            scraper_id=model.scraper_id,
            external_id=model.external_id,
            season_number=model.season_number,
            description=model.description,
            release_date=model.release_date,
        )

    def get_season_details(self, collection_id: int) -> Optional[SeasonDetails]:
        statement = select(SeasonDetailsModel).where(
            SeasonDetailsModel.collection_id == collection_id
        )
        model = self._session.exec(statement).first()
        return self._season_to_entity(model) if model else None

    def upsert_season_details(self, details: SeasonDetails) -> SeasonDetails:
        statement = select(SeasonDetailsModel).where(
            SeasonDetailsModel.collection_id == details.collection_id
        )
        model = self._session.exec(statement).first() or SeasonDetailsModel(
            collection_id=details.collection_id
        )
        model.scraper_id = details.scraper_id
        model.external_id = details.external_id
        model.season_number = details.season_number
        model.description = details.description
        model.release_date = details.release_date
        return self._season_to_entity(self._save(model))
