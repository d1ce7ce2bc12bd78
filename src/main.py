"""
Point d'entrée CLI de mediacat.

Configure le logging et monte les commandes CLI.
"""

from typing import Annotated

import typer

from .adapters.cli.commands import (
    cancel_scan,
    jobs,
    library_add,
    library_list,
    person_refresh,
    prune,
    scan,
    scrape,
    scrape_collection,
    search,
    work,
)
from .config import Settings
from .logging_config import configure_logging, verbosity_level

__version__ = "0.1.0"

app = typer.Typer(
    name="mediacat",
    help="Ingestion de bibliothèques média et enrichissement des métadonnées",
)


@app.callback()
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Augmenter la verbosite (-v, -vv)"
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option("--quiet", "-q", help="Mode silencieux (erreurs uniquement)"),
    ] = False,
) -> None:
    """mediacat - Catalogue de médias et enrichissement des métadonnées."""
    settings = Settings()
    configure_logging(
        log_level=verbosity_level(settings.log_level, verbose, quiet),
        log_file=settings.log_file,
        rotation_size=settings.log_rotation_size,
        retention_count=settings.log_retention_count,
    )


# Bibliothèques
app.command(name="library-add")(library_add)
app.command(name="library-list")(library_list)

# Files d'attente
app.command()(scan)
app.command(name="cancel-scan")(cancel_scan)
app.command()(jobs)
app.command()(prune)
app.command()(work)

# Enrichissement
app.command()(scrape)
app.command(name="scrape-collection")(scrape_collection)
app.command(name="person-refresh")(person_refresh)
app.command()(search)


@app.command()
def info() -> None:
    """Affiche la configuration actuelle."""
    config = Settings()
    typer.echo(f"Base de données : {config.database_url}")
    typer.echo(f"Images : {config.images_dir}")
    typer.echo(f"Cache API : {config.cache_dir}")
    typer.echo(f"Sondage : {config.prober}")
    typer.echo(f"API TMDB : {'activée' if config.tmdb_enabled else 'désactivée'}")
    typer.echo(f"API TVDB : {'activée' if config.tvdb_enabled else 'désactivée'}")
    typer.echo(f"Niveau de log : {config.log_level}")


@app.command()
def version() -> None:
    """Affiche les informations de version."""
    typer.echo(f"mediacat v{__version__}")


def main() -> None:
    """Point d'entrée de l'application."""
    app()


if __name__ == "__main__":
    main()
