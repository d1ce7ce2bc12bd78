"""
Taxonomie des erreurs du domaine.

Chaque erreur correspond a une facon distincte de traiter l'echec :
- TransientProviderError : reessaye dans l'appel puis par la file
- PermanentProviderError : pas de retry dans l'appel (4xx hors 429)
- TargetGoneError : cible supprimee avant l'execution, no-op reussi
- MissingDependencyError : saison sans serie parente resolue
- FilesystemReadError : repertoire illisible, consigne dans le rapport de scan
- ProbeError : echec de l'outil de sondage, duree a 0
- ScanCancelledError : scan annule entre deux repertoires
"""

from typing import Optional


class MediaCatError(Exception):
    """Classe de base de toutes les erreurs de l'application."""


class ProviderError(MediaCatError):
    """Erreur levee par un fournisseur de metadonnees."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class TransientProviderError(ProviderError):
    """Timeout, erreur reseau, 5xx ou 429 : l'appel peut etre relance."""


class RateLimitError(TransientProviderError):
    """
    Le fournisseur a repondu 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (header Retry-After), ou None.
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s", status_code=429)


class PermanentProviderError(ProviderError):
    """Reponse 4xx (hors 429) : relancer la meme requete ne changera rien."""


class TargetGoneError(MediaCatError):
    """La cible d'un job (media ou collection) n'existe plus."""


class MissingDependencyError(MediaCatError):
    """Une dependance requise (serie parente d'une saison) n'est pas resolue."""


class FilesystemReadError(MediaCatError):
    """Un repertoire n'a pas pu etre lu pendant le scan."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read directory {path}: {reason}")


class ProbeError(MediaCatError):
    """L'outil de sondage a echoue ou produit une sortie illisible."""


class ScanCancelledError(MediaCatError):
    """Le scan a ete annule de maniere cooperative."""

    def __init__(self, library_id: int) -> None:
        self.library_id = library_id
        super().__init__(f"Scan cancelled for library {library_id}")
