"""
Commandes CLI des files d'attente (scan, cancel-scan, jobs, prune, work).
"""

import asyncio
from typing import Annotated, Optional

import typer
from loguru import logger
from rich.table import Table

from src.adapters.cli.helpers import async_command, console, with_container
from src.core.entities.job import JobState
from src.services.job_queue import COLLECTION_QUEUE, METADATA_QUEUE, SCAN_QUEUE

QUEUE_NAMES = (SCAN_QUEUE, METADATA_QUEUE, COLLECTION_QUEUE)


def _queues(container) -> dict:
    return {
        SCAN_QUEUE: container.scan_queue(),
        METADATA_QUEUE: container.metadata_queue(),
        COLLECTION_QUEUE: container.collection_queue(),
    }


@async_command
@with_container()
async def scan(
    container,
    library_id: Annotated[int, typer.Argument(help="ID de la bibliotheque")],
    full: Annotated[
        bool,
        typer.Option("--full", help="Rescan force : re-planifie aussi les medias connus"),
    ] = False,
) -> None:
    """
    Planifie le scan d'une bibliotheque.

    Le scan est execute par `mediacat work`.
    """
    if container.library_repository().get_by_id(library_id) is None:
        console.print(f"[red]Erreur: Bibliotheque {library_id} introuvable[/red]")
        raise typer.Exit(1)

    job, created = container.dispatcher().queue_scan(library_id, full_scan=full)
    if created:
        console.print(f"[green]Scan planifie[/green] ({job.key}, job #{job.id})")
    else:
        console.print(
            f"[yellow]Un scan est deja {job.state.value}[/yellow] ({job.key}, job #{job.id})"
        )


@async_command
@with_container()
async def cancel_scan(
    container,
    library_id: Annotated[int, typer.Argument(help="ID de la bibliotheque")],
) -> None:
    """Annule le scan planifie ou en cours d'une bibliotheque."""
    state = container.dispatcher().cancel_scan(library_id)
    if state is None:
        console.print("[yellow]Aucun scan en cours ou planifie.[/yellow]")
    elif state == JobState.ACTIVE:
        console.print("[green]Annulation demandee[/green] (arret au prochain repertoire)")
    else:
        console.print("[green]Scan en attente supprime.[/green]")


@async_command
@with_container()
async def jobs(
    container,
    queue: Annotated[
        Optional[str],
        typer.Option("--queue", "-q", help="File a inspecter (scan, metadata-scrape, collection-scrape)"),
    ] = None,
    state: Annotated[
        Optional[JobState],
        typer.Option("--state", "-s", help="Filtrer par etat", case_sensitive=False),
    ] = None,
    limit: Annotated[int, typer.Option("--limit", "-n", help="Nombre de jobs affiches")] = 20,
) -> None:
    """Affiche l'etat des files et leurs derniers jobs."""
    queues = _queues(container)
    if queue is not None and queue not in queues:
        console.print(f"[red]Erreur: File inconnue: {queue}[/red]")
        raise typer.Exit(1)
    names = [queue] if queue else list(QUEUE_NAMES)

    summary = Table(title="Files d'attente")
    summary.add_column("File")
    for job_state in JobState:
        summary.add_column(job_state.value, justify="right")
    for name in names:
        counts = queues[name].counts()
        summary.add_row(name, *(str(counts.get(s, 0)) for s in JobState))
    console.print(summary)

    table = Table(title="Jobs")
    table.add_column("ID", justify="right")
    table.add_column("File")
    table.add_column("Cle")
    table.add_column("Etat")
    table.add_column("Tentatives", justify="right")
    table.add_column("Avancement", justify="right")
    table.add_column("Erreur")
    states = [state] if state else None
    for name in names:
        for job in queues[name].list(states, limit):
            table.add_row(
                str(job.id),
                job.queue,
                job.key,
                job.state.value,
                f"{job.attempts_made}/{job.max_attempts}",
                f"{job.progress}%",
                job.error or "",
            )
    console.print(table)


@async_command
@with_container()
async def prune(container) -> None:
    """Applique la retention des jobs termines et en echec."""
    removed = {name: queue.prune() for name, queue in _queues(container).items()}
    for name, count in removed.items():
        console.print(f"{name}: {count} job(s) supprime(s)")


@async_command
@with_container()
async def work(
    container,
    until_idle: Annotated[
        bool,
        typer.Option("--until-idle", help="S'arreter quand les trois files sont vides"),
    ] = False,
) -> None:
    """
    Lance les workers des trois files.

    Exemples:
      mediacat work                # Tourne jusqu'a Ctrl+C
      mediacat work --until-idle   # Vide les files puis s'arrete
    """
    config = container.config()
    queues = _queues(container)
    handlers = {
        SCAN_QUEUE: container.scan_handler(),
        METADATA_QUEUE: container.media_scrape_worker(),
        COLLECTION_QUEUE: container.collection_scrape_worker(),
    }
    logger.info("Demarrage des workers", until_idle=until_idle)

    total = 0
    while True:
        # Un scan peut alimenter les files d'enrichissement : on boucle
        # jusqu'a un tour sans aucun job execute.
        processed = await asyncio.gather(
            *(
                queues[name].run(
                    handlers[name],
                    until_idle=until_idle,
                    poll_interval=config.worker_poll_interval,
                )
                for name in QUEUE_NAMES
            )
        )
        total += sum(processed)
        if not until_idle or sum(processed) == 0:
            break

    console.print(f"[green]{total} job(s) execute(s)[/green]")
