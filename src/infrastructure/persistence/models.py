"""
Modeles SQLModel pour la base de donnees mediacat.

Ces modeles representent les tables de la base de donnees SQLite.
Ils sont distincts des entites de domaine (dataclass dans core/entities/)
selon l'architecture hexagonale.

Tables:
- libraries: Bibliotheques (racines de scan)
- collections: Arbre des collections par bibliotheque
- media / media_streams: Fichiers scannes et leurs flux
- video_details / audio_details: Details enrichis par media
- show_details / season_details: Details enrichis par collection
- persons / credits: Personnes dedupliquees et attributions
- images: Images telechargees (media, collections, personnes)
- jobs: Files d'attente persistantes

Les champs JSON (*_json) permettent de stocker des listes (genres) ou des
dictionnaires (payload des jobs) de maniere serialisee dans SQLite.
"""

from datetime import date, datetime
from typing import Optional

from sqlalchemy import UniqueConstraint, text
from sqlmodel import Field, Index, SQLModel


class LibraryModel(SQLModel, table=True):
    """Bibliotheque : racine de scan et type (Television, Film, Music)."""

    __tablename__ = "libraries"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    path: str = Field(unique=True)
    library_type: str
    created_at: datetime | None = Field(default_factory=datetime.now)


class CollectionModel(SQLModel, table=True):
    """
    Noeud de l'arbre des collections.

    Unique par (library_id, name, parent_id). SQLite considerant les NULL
    comme distincts, un index partiel couvre les collections racines.
    """

    __tablename__ = "collections"
    __table_args__ = (
        UniqueConstraint("library_id", "name", "parent_id", name="uq_collections_library_name_parent"),
        Index(
            "uq_collections_library_name_root",
            "library_id",
            "name",
            unique=True,
            sqlite_where=text("parent_id IS NULL"),
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    library_id: int = Field(foreign_key="libraries.id", index=True)
    name: str
    collection_type: str = "Generic"
    parent_id: int | None = Field(default=None, foreign_key="collections.id", index=True)
    created_at: datetime | None = Field(default_factory=datetime.now)
    updated_at: datetime | None = Field(default_factory=datetime.now)


class MediaModel(SQLModel, table=True):
    """Fichier media, unique par chemin."""

    __tablename__ = "media"

    id: int | None = Field(default=None, primary_key=True)
    path: str = Field(unique=True)
    name: str
    kind: str = "Video"
    duration: int = 0
    library_id: int | None = Field(default=None, foreign_key="libraries.id", index=True)
    collection_id: int | None = Field(default=None, foreign_key="collections.id", index=True)
    thumbnails: str | None = None  # Dossier trickplay
    created_at: datetime | None = Field(default_factory=datetime.now)
    updated_at: datetime | None = Field(default_factory=datetime.now)


class MediaStreamModel(SQLModel, table=True):
    """Flux video, audio ou sous-titres d'un media."""

    __tablename__ = "media_streams"

    id: int | None = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="media.id", index=True)
    stream_index: int
    stream_type: str
    codec: str | None = None
    codec_long: str | None = None
    language: str | None = None
    title: str | None = None
    is_default: bool = False
    is_forced: bool = False
    channels: int | None = None
    channel_layout: str | None = None
    sample_rate: int | None = None
    bit_rate: int | None = None
    width: int | None = None
    height: int | None = None
    frame_rate: float | None = None


class VideoDetailsModel(SQLModel, table=True):
    """Details d'un media video (un par media)."""

    __tablename__ = "video_details"

    id: int | None = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="media.id", unique=True)
    scraper_id: str | None = None
    external_id: str | None = None
    original_title: str | None = None
    show_name: str | None = None
    season: int | None = None
    episode: int | None = None
    description: str | None = None
    release_date: date | None = None
    rating: str | None = None  # Classification (ex: "PG-13")
    runtime: int | None = None  # Minutes
    genres_json: str | None = None  # JSON: ["Drama", "Crime"]
    updated_at: datetime | None = Field(default_factory=datetime.now)


class AudioDetailsModel(SQLModel, table=True):
    """Details d'un media audio (un par media)."""

    __tablename__ = "audio_details"

    id: int | None = Field(default=None, primary_key=True)
    media_id: int = Field(foreign_key="media.id", unique=True)
    artist: str | None = None
    album_artist: str | None = None
    album: str | None = None
    track: int | None = None
    disc: int | None = None
    year: int | None = None
    genre: str | None = None
    updated_at: datetime | None = Field(default_factory=datetime.now)


class ShowDetailsModel(SQLModel, table=True):
    """Details d'une collection Show (un par collection)."""

    __tablename__ = "show_details"

    id: int | None = Field(default=None, primary_key=True)
    collection_id: int = Field(foreign_key="collections.id", unique=True)
    scraper_id: str | None = None
    external_id: str | None = None
    description: str | None = None
    release_date: date | None = None
    end_date: date | None = None
    status: str | None = None
    rating: float | None = None
    genres: str | None = None  # "Drama, Crime"
    updated_at: datetime | None = Field(default_factory=datetime.now)


class SeasonDetailsModel(SQLModel, table=True):
    """Details d'une collection Season (un par collection)."""

    __tablename__ = "season_details"

    id: int | None = Field(default=None, primary_key=True)
    collection_id: int = Field(foreign_key="collections.id", unique=True)
    scraper_id: str | None = None
    external_id: str | None = None
    season_number: int | None = None
    description: str | None = None
    release_date: date | None = None
    updated_at: datetime | None = Field(default_factory=datetime.now)


class PersonModel(SQLModel, table=True):
    """Personne dedupliquee par identifiants externes puis par nom."""

    __tablename__ = "persons"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(index=True)
    biography: str | None = None
    birth_date: date | None = None
    death_date: date | None = None
    birth_place: str | None = None
    tmdb_id: int | None = Field(default=None, index=True)
    tvdb_id: int | None = Field(default=None, index=True)
    imdb_id: str | None = Field(default=None, index=True)
    created_at: datetime | None = Field(default_factory=datetime.now)


class CreditModel(SQLModel, table=True):
    """Attribution d'un role sur des details video ou de serie."""

    __tablename__ = "credits"

    id: int | None = Field(default=None, primary_key=True)
    name: str
    role: str | None = None
    credit_type: str = "Actor"
    order: int | None = None
    person_id: int | None = Field(default=None, foreign_key="persons.id", index=True)
    video_details_id: int | None = Field(default=None, foreign_key="video_details.id", index=True)
    show_details_id: int | None = Field(default=None, foreign_key="show_details.id", index=True)


class ImageModel(SQLModel, table=True):
    """Image stockee localement, rattachee a un media, une collection ou une personne."""

    __tablename__ = "images"
    __table_args__ = (
        Index("ix_images_owner_type", "owner_type", "owner_id", "image_type"),
    )

    id: int | None = Field(default=None, primary_key=True)
    owner_type: str  # media, collections, people
    owner_id: int
    image_type: str
    path: str
    width: int | None = None
    height: int | None = None
    format: str | None = None
    file_size: int | None = None
    source_url: str | None = None
    scraper_id: str | None = None
    is_primary: bool = False
    created_at: datetime | None = Field(default_factory=datetime.now)


class JobModel(SQLModel, table=True):
    """
    Job persistant d'une file d'attente.

    La cle est unique par file : c'est elle qui fusionne les demandes
    concurrentes pour une meme cible.
    """

    __tablename__ = "jobs"
    __table_args__ = (
        UniqueConstraint("queue", "key", name="uq_jobs_queue_key"),
        Index("ix_jobs_queue_state_run_at", "queue", "state", "run_at"),
        # Un job remplace ne reprend jamais l'id de son predecesseur
        {"sqlite_autoincrement": True},
    )

    id: int | None = Field(default=None, primary_key=True)
    queue: str
    key: str
    payload_json: str = "{}"
    state: str = "waiting"
    attempts_made: int = 0
    max_attempts: int = 1
    run_at: datetime = Field(default_factory=datetime.now)
    progress: int = 0
    result_json: str | None = None
    error: str | None = None
    cancel_requested: bool = False
    created_at: datetime | None = Field(default_factory=datetime.now)
    updated_at: datetime | None = Field(default_factory=datetime.now)
    finished_at: Optional[datetime] = None
