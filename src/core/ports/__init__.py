"""
Ports (interfaces abstraites) définissant les contrats pour les adaptateurs.

Les ports sont les frontières de l'architecture hexagonale. Ils définissent
ce dont le domaine a besoin du monde extérieur sans spécifier
comment ces besoins sont satisfaits.

Ports repository : Contrats de persistance du catalogue et des files
- ILibraryRepository, ICollectionRepository, IMediaRepository
- IDetailsRepository, IPersonRepository, ICreditRepository, IImageRepository
- IJobRepository

Ports fournisseurs : Contrats pour les sources de métadonnées
- ScraperProvider, ScraperCapability

Ports techniques :
- IFileSystem : Parcours des bibliothèques, écriture des images
- IMediaProber : Sondage technique des fichiers
- IMediaNameParser : Indices extraits des noms
- IImageFetcher : Téléchargement des images
"""

from src.core.ports.file_system import DirectoryListing, IFileSystem
from src.core.ports.images import FetchedImage, IImageFetcher
from src.core.ports.parser import IMediaNameParser, IMediaProber
from src.core.ports.repositories import (
    ICollectionRepository,
    ICreditRepository,
    IDetailsRepository,
    IImageRepository,
    IJobRepository,
    ILibraryRepository,
    IMediaRepository,
    IPersonRepository,
)
from src.core.ports.scrapers import ScraperCapability, ScraperProvider

__all__ = [
    # Repositories
    "ILibraryRepository",
    "ICollectionRepository",
    "IMediaRepository",
    "IDetailsRepository",
    "IPersonRepository",
    "ICreditRepository",
    "IImageRepository",
    "IJobRepository",
    # Fournisseurs
    "ScraperProvider",
    "ScraperCapability",
    # Techniques
    "IFileSystem",
    "DirectoryListing",
    "IMediaProber",
    "IMediaNameParser",
    "IImageFetcher",
    "FetchedImage",
]
