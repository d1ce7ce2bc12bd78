"""
Interface port pour la récupération des images distantes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class FetchedImage:
    """
    Image téléchargée, pas encore stockée.

    Attributs :
        content : Octets de l'image
        format : Extension déduite (jpg, png, webp...)
        width, height : Dimensions si l'image a pu être décodée
    """

    content: bytes
    format: str
    width: Optional[int] = None
    height: Optional[int] = None


class IImageFetcher(ABC):
    """Télécharge une image distante et en déduit format et dimensions."""

    @abstractmethod
    async def fetch(self, url: str) -> FetchedImage:
        """
        Télécharge l'image.

        Raises :
            TransientProviderError, PermanentProviderError : Echec HTTP
        """
        ...

    async def close(self) -> None:
        """Libère les ressources réseau."""
        return None
