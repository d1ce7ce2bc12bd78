"""
Commandes CLI d'enrichissement (scrape, scrape-collection, person-refresh, search).
"""

from typing import Annotated, Optional

import typer
from rich.table import Table

from src.adapters.cli.helpers import async_command, console, suppress_loguru, with_container
from src.adapters.parsing.media_name_parser import extract_year
from src.core.entities.catalog import MediaKind
from src.core.errors import TargetGoneError
from src.core.value_objects.requests import CollectionScrapeRequest, MediaScrapeRequest


@async_command
@with_container()
async def scrape(
    container,
    media_id: Annotated[int, typer.Argument(help="ID du media")],
    skip_images: Annotated[
        bool, typer.Option("--skip-images", help="Ne telecharger que les images absentes")
    ] = False,
    images_only: Annotated[
        bool, typer.Option("--images-only", help="Ne rafraichir que les images")
    ] = False,
    scraper: Annotated[
        Optional[str], typer.Option("--scraper", help="Fournisseur a utiliser (tmdb, tvdb)")
    ] = None,
    external_id: Annotated[
        Optional[str], typer.Option("--external-id", help="Identifiant chez le fournisseur")
    ] = None,
) -> None:
    """
    Planifie un enrichissement force d'un media.

    Avec --scraper et --external-id, la fiche est recuperee directement
    sans recherche.
    """
    media = container.media_repository().get_by_id(media_id)
    if media is None:
        console.print(f"[red]Erreur: Media {media_id} introuvable[/red]")
        raise typer.Exit(1)

    details = container.details_repository().get_video_details(media_id)
    hint = container.name_parser().parse_episode(media.path.stem)
    season = episode = show_name = None
    if details and details.season is not None:
        season, episode, show_name = details.season, details.episode, details.show_name
    elif hint:
        season, episode, show_name = hint.season, hint.episode, hint.show_name

    job = container.dispatcher().queue_media_scrape(
        MediaScrapeRequest(
            media_id=media.id,
            media_name=media.name,
            media_kind=media.kind,
            year=extract_year(media.name) if media.kind == MediaKind.VIDEO else None,
            season=season,
            episode=episode,
            show_name=show_name,
            scraper_id=scraper,
            external_id=external_id,
            skip_images=skip_images,
            images_only=images_only,
        )
    )
    console.print(f"[green]Enrichissement planifie[/green] ({job.key}, job #{job.id})")


@async_command
@with_container()
async def scrape_collection(
    container,
    collection_id: Annotated[int, typer.Argument(help="ID de la collection")],
    skip_images: Annotated[
        bool, typer.Option("--skip-images", help="Ne telecharger que les images absentes")
    ] = False,
    images_only: Annotated[
        bool, typer.Option("--images-only", help="Ne rafraichir que les images")
    ] = False,
    scraper: Annotated[
        Optional[str], typer.Option("--scraper", help="Fournisseur a utiliser (tmdb, tvdb)")
    ] = None,
    external_id: Annotated[
        Optional[str], typer.Option("--external-id", help="Identifiant chez le fournisseur")
    ] = None,
) -> None:
    """Planifie l'enrichissement d'une collection (serie, saison, film)."""
    collection = container.collection_repository().get_by_id(collection_id)
    if collection is None:
        console.print(f"[red]Erreur: Collection {collection_id} introuvable[/red]")
        raise typer.Exit(1)

    job = container.dispatcher().queue_collection_scrape(
        CollectionScrapeRequest(
            collection_id=collection.id,
            collection_name=collection.name,
            collection_type=collection.collection_type,
            library_id=collection.library_id,
            parent_show_id=collection.parent_id,
            season_number=container.name_parser().season_number(collection.name),
            year=extract_year(collection.name),
            scraper_id=scraper,
            external_id=external_id,
            skip_images=skip_images,
            images_only=images_only,
        )
    )
    console.print(f"[green]Enrichissement planifie[/green] ({job.key}, job #{job.id})")


@async_command
@with_container()
async def person_refresh(
    container,
    person_id: Annotated[int, typer.Argument(help="ID de la personne")],
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Rafraichir meme si la biographie existe")
    ] = False,
) -> None:
    """Rafraichit biographie, dates et photo d'une personne (TMDB puis TVDB)."""
    try:
        with suppress_loguru(), console.status("Recuperation de la fiche..."):
            result = await container.person_enricher().refresh(person_id, force=force)
    except TargetGoneError:
        console.print(f"[red]Erreur: Personne {person_id} introuvable[/red]")
        raise typer.Exit(1)

    person = result.person
    if result.scraper_id is None:
        console.print(f"[yellow]Aucune nouvelle fiche pour {person.name}.[/yellow]")
        return

    console.print(f"[green]{person.name}[/green] rafraichi depuis {result.scraper_id}")
    if person.birth_date:
        place = f" ({person.birth_place})" if person.birth_place else ""
        console.print(f"  Naissance : {person.birth_date.isoformat()}{place}")
    if result.photo_saved:
        console.print("  Photo enregistree")


@async_command
@with_container(requires_db=False)
async def search(
    container,
    query: Annotated[str, typer.Argument(help="Titre recherche")],
    year: Annotated[Optional[int], typer.Option("--year", "-y", help="Annee de sortie")] = None,
    video_type: Annotated[
        Optional[str], typer.Option("--type", help="movie ou tv_series (defaut: tous)")
    ] = None,
    audio: Annotated[bool, typer.Option("--audio", help="Rechercher des pistes audio")] = False,
) -> None:
    """Recherche un titre chez tous les fournisseurs configures."""
    registry = container.scraper_registry()
    if not registry.configured():
        console.print("[red]Aucun fournisseur configure (MEDIACAT_TMDB_API_KEY, MEDIACAT_TVDB_API_KEY)[/red]")
        raise typer.Exit(1)

    kind = MediaKind.AUDIO if audio else MediaKind.VIDEO
    with suppress_loguru(), console.status(f"Recherche de '{query}'..."):
        results = await registry.search_all(query, kind, year, video_type)

    if not results:
        console.print("[yellow]Aucun resultat.[/yellow]")
        return

    table = Table(title=f"Resultats pour '{query}'")
    table.add_column("Fournisseur")
    table.add_column("ID externe")
    table.add_column("Titre")
    table.add_column("Annee", justify="right")
    table.add_column("Type")
    table.add_column("Confiance", justify="right")
    for result in results:
        table.add_row(
            result.scraper_id or "",
            result.external_id,
            result.title,
            str(result.year or ""),
            result.video_type or "",
            f"{result.confidence:.0%}" if result.confidence is not None else "",
        )
    console.print(table)
