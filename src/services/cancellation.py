"""
Annulation cooperative des scans.

Le scanner consulte son jeton a chaque frontiere de repertoire. Le jeton
combine un drapeau en memoire (annulation dans le meme processus) et une
verification externe (drapeau cancel_requested du job en base, pose par
la commande cancel-scan depuis un autre processus).
"""

from typing import Callable, Optional

from loguru import logger

from src.core.errors import ScanCancelledError


class CancellationToken:
    """Jeton d'annulation d'un scan en cours."""

    def __init__(self, check: Optional[Callable[[], bool]] = None) -> None:
        """
        Args:
            check: Verification externe optionnelle (ex: relecture du job)
        """
        self._cancelled = False
        self._check = check

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def is_cancelled(self) -> bool:
        if not self._cancelled and self._check is not None and self._check():
            self._cancelled = True
        return self._cancelled

    def raise_if_cancelled(self, library_id: int) -> None:
        """Leve ScanCancelledError si l'annulation a ete demandee."""
        if self.is_cancelled:
            raise ScanCancelledError(library_id)


class CancellationRegistry:
    """Jetons des scans actifs, par bibliotheque."""

    def __init__(self) -> None:
        self._tokens: dict[int, CancellationToken] = {}

    def register(self, library_id: int, token: CancellationToken) -> None:
        self._tokens[library_id] = token

    def unregister(self, library_id: int) -> None:
        self._tokens.pop(library_id, None)

    def cancel(self, library_id: int) -> bool:
        """
        Annule le scan actif d'une bibliotheque dans ce processus.

        Returns:
            True si un scan actif a ete trouve
        """
        token = self._tokens.get(library_id)
        if token is None:
            return False
        token.cancel()
        logger.info("Annulation du scan demandee", library_id=library_id)
        return True
