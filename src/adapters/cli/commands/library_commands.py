"""
Commandes CLI de gestion des bibliotheques (library-add, library-list).
"""

from pathlib import Path
from typing import Annotated

import typer
from rich.table import Table

from src.adapters.cli.helpers import async_command, console, with_container
from src.core.entities.catalog import Library, LibraryType


@async_command
@with_container()
async def library_add(
    container,
    name: Annotated[str, typer.Argument(help="Nom affiche de la bibliotheque")],
    path: Annotated[Path, typer.Argument(help="Repertoire racine a scanner")],
    library_type: Annotated[
        LibraryType,
        typer.Option("--type", "-t", help="Type de bibliotheque", case_sensitive=False),
    ] = LibraryType.FILM,
) -> None:
    """
    Enregistre une bibliotheque.

    Exemples:
      mediacat library-add Series /media/tv --type Television
      mediacat library-add Films /media/films
    """
    root = path.expanduser().resolve()
    if not root.is_dir():
        console.print(f"[red]Erreur: Repertoire introuvable: {root}[/red]")
        raise typer.Exit(1)

    library = container.library_repository().save(
        Library(name=name, path=root, library_type=library_type)
    )
    console.print(
        f"[green]Bibliotheque creee[/green] #{library.id} {library.name} "
        f"({library.library_type.value}) -> {library.path}"
    )


@async_command
@with_container()
async def library_list(container) -> None:
    """Liste les bibliotheques et leur nombre de medias."""
    library_repo = container.library_repository()
    media_repo = container.media_repository()
    libraries = library_repo.list_all()
    if not libraries:
        console.print("[yellow]Aucune bibliotheque. Utilisez library-add.[/yellow]")
        return

    table = Table(title="Bibliotheques")
    table.add_column("ID", justify="right")
    table.add_column("Nom")
    table.add_column("Type")
    table.add_column("Chemin")
    table.add_column("Medias", justify="right")
    for library in libraries:
        table.add_row(
            str(library.id),
            library.name,
            library.library_type.value,
            str(library.path),
            str(media_repo.count_by_library(library.id)),
        )
    console.print(table)
