"""Sous-package CLI commands - re-exporte les commandes publiques."""

from src.adapters.cli.commands.library_commands import library_add, library_list
from src.adapters.cli.commands.queue_commands import cancel_scan, jobs, prune, scan, work
from src.adapters.cli.commands.scrape_commands import person_refresh, scrape, scrape_collection, search

__all__ = [
    # bibliotheques
    "library_add",
    "library_list",
    # files
    "scan",
    "cancel_scan",
    "jobs",
    "prune",
    "work",
    # enrichissement
    "scrape",
    "scrape_collection",
    "person_refresh",
    "search",
]
