"""
Handler de la file scan.

Charge la bibliotheque, enregistre un jeton d'annulation relie au drapeau
du job, lance le scan puis planifie l'enrichissement de ce qu'il a touche.
"""

from typing import Any

from src.core.errors import TargetGoneError
from src.core.ports.repositories import ILibraryRepository
from src.core.value_objects.requests import LibraryScanRequest
from src.services.cancellation import CancellationRegistry, CancellationToken
from src.services.job_dispatcher import ScrapeDispatcher
from src.services.job_queue import JobContext
from src.services.scanner import LibraryScanner


class ScanJobHandler:
    """Execute un LibraryScanRequest."""

    def __init__(
        self,
        library_repo: ILibraryRepository,
        scanner: LibraryScanner,
        dispatcher: ScrapeDispatcher,
        cancellation: CancellationRegistry,
    ) -> None:
        self._library_repo = library_repo
        self._scanner = scanner
        self._dispatcher = dispatcher
        self._cancellation = cancellation

    async def __call__(self, ctx: JobContext) -> dict[str, Any]:
        request = LibraryScanRequest.from_payload(ctx.payload)
        library = self._library_repo.get_by_id(request.library_id)
        if library is None:
            raise TargetGoneError(f"Library {request.library_id} no longer exists")

        token = CancellationToken(check=ctx.is_cancel_requested)
        self._cancellation.register(library.id, token)
        try:
            report = await self._scanner.scan(
                library,
                full_scan=request.full_scan,
                token=token,
                on_progress=ctx.update_progress,
            )
        finally:
            self._cancellation.unregister(library.id)

        dispatched = self._dispatcher.enqueue_after_scan(library, report)
        return {**report.to_dict(), **dispatched}
