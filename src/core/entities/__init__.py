"""
Business entities representing core domain concepts.

Entities are mutable objects with identity that persist over time.

Exports:
- Library, Collection, Media, MediaStream: catalog built by the scanner
- VideoDetails, AudioDetails, ShowDetails, SeasonDetails: enriched detail rows
- Person, Credit, Image: people, role attributions and stored artwork
- Job: persisted unit of work of a queue
"""

from src.core.entities.catalog import (
    Collection,
    CollectionType,
    Library,
    LibraryType,
    Media,
    MediaKind,
    MediaStream,
    StreamType,
)
from src.core.entities.details import (
    AudioDetails,
    Credit,
    CreditType,
    Image,
    ImageOwner,
    ImageOwnerType,
    ImageType,
    Person,
    SeasonDetails,
    ShowDetails,
    VideoDetails,
)
from src.core.entities.job import Job, JobState

__all__ = [
    "Library",
    "LibraryType",
    "Collection",
    "CollectionType",
    "Media",
    "MediaKind",
    "MediaStream",
    "StreamType",
    "VideoDetails",
    "AudioDetails",
    "ShowDetails",
    "SeasonDetails",
    "Person",
    "Credit",
    "CreditType",
    "Image",
    "ImageOwner",
    "ImageOwnerType",
    "ImageType",
    "Job",
    "JobState",
]
