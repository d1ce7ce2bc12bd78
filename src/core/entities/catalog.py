"""
Catalog entities.

Entities created by the library scanner: libraries, the collection tree
under each library, the media files and their probed streams.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional


class LibraryType(Enum):
    """Type of a library, drives the extension filter and collection depths."""

    TELEVISION = "Television"
    FILM = "Film"
    MUSIC = "Music"


class CollectionType(Enum):
    """Variant of a collection node."""

    SHOW = "Show"
    SEASON = "Season"
    FILM = "Film"
    ARTIST = "Artist"
    ALBUM = "Album"
    GENERIC = "Generic"


class MediaKind(Enum):
    """Kind of playable media."""

    VIDEO = "Video"
    AUDIO = "Audio"


class StreamType(Enum):
    """Type of a media stream kept from probing."""

    VIDEO = "video"
    AUDIO = "audio"
    SUBTITLE = "subtitle"


@dataclass
class Library:
    """
    Root scan target.

    Attributes:
        id: Internal database ID
        name: Display name
        path: Root directory scanned recursively
        library_type: Television, Film or Music
    """

    id: Optional[int] = None
    name: str = ""
    path: Path = Path(".")
    library_type: LibraryType = LibraryType.FILM
    created_at: Optional[datetime] = None

    @property
    def media_kind(self) -> MediaKind:
        """Music libraries hold audio, everything else holds video."""
        if self.library_type == LibraryType.MUSIC:
            return MediaKind.AUDIO
        return MediaKind.VIDEO


@dataclass
class Collection:
    """
    Hierarchical node under a library.

    Unique per (library_id, name, parent_id).

    Attributes:
        id: Internal database ID
        library_id: Owning library
        name: Directory name
        collection_type: Show, Season, Film, Artist, Album or Generic
        parent_id: Parent collection in the same library, None at the root
    """

    id: Optional[int] = None
    library_id: int = 0
    name: str = ""
    collection_type: CollectionType = CollectionType.GENERIC
    parent_id: Optional[int] = None


@dataclass
class MediaStream:
    """
    One audio, video or subtitle stream of a media file.

    Produced entirely by the prober.
    """

    index: int
    stream_type: StreamType
    codec: Optional[str] = None
    codec_long: Optional[str] = None
    language: Optional[str] = None
    title: Optional[str] = None
    is_default: bool = False
    is_forced: bool = False
    channels: Optional[int] = None
    channel_layout: Optional[str] = None
    sample_rate: Optional[int] = None
    bit_rate: Optional[int] = None
    width: Optional[int] = None
    height: Optional[int] = None
    frame_rate: Optional[float] = None


@dataclass
class Media:
    """
    File-backed playable entry, unique per path.

    Attributes:
        id: Internal database ID
        path: Absolute path of the file
        name: Display name (renamed by metadata merge)
        kind: Video or Audio
        duration: Duration in seconds (0 when probing failed)
        library_id: Owning library
        collection_id: Owning collection, None for files at the library root
        thumbnails: Path of the trickplay sidecar directory, if any
        streams: Probed streams
    """

    id: Optional[int] = None
    path: Path = Path(".")
    name: str = ""
    kind: MediaKind = MediaKind.VIDEO
    duration: int = 0
    library_id: Optional[int] = None
    collection_id: Optional[int] = None
    thumbnails: Optional[Path] = None
    streams: list[MediaStream] = field(default_factory=list)
