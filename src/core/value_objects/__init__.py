"""
Objets valeur immutables representant des concepts du domaine sans identite.

Les objets valeur sont definis par leurs attributs plutot que par une identite.
Ils sont immutables et peuvent etre librement partages et compares par valeur.

Exports :
- ProbeResult : Duree et flux extraits par l'outil de sondage
- EpisodeHint, MovieHint, MediaHints : Indices extraits des noms
- LibraryScanRequest, MediaScrapeRequest, CollectionScrapeRequest : Requetes des files
- SearchResult, CreditInfo, VideoMetadata, SeriesMetadata, SeasonMetadata,
  AudioMetadata, PersonMetadata : Enregistrements des fournisseurs
"""

from src.core.value_objects.metadata import (
    AudioMetadata,
    CreditInfo,
    PersonMetadata,
    SearchResult,
    SeasonMetadata,
    SeriesMetadata,
    VideoMetadata,
)
from src.core.value_objects.parsed_info import EpisodeHint, MediaHints, MovieHint
from src.core.value_objects.probe import ProbeResult
from src.core.value_objects.requests import (
    CollectionScrapeRequest,
    LibraryScanRequest,
    MediaScrapeRequest,
)

__all__ = [
    "ProbeResult",
    "EpisodeHint",
    "MovieHint",
    "MediaHints",
    "LibraryScanRequest",
    "MediaScrapeRequest",
    "CollectionScrapeRequest",
    "SearchResult",
    "CreditInfo",
    "VideoMetadata",
    "SeriesMetadata",
    "SeasonMetadata",
    "AudioMetadata",
    "PersonMetadata",
]
