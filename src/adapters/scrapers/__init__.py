"""
Fournisseurs de metadonnees.

- TMDBScraper : films, series, saisons, episodes, personnes (TMDB v3)
- TVDBScraper : series, saisons, episodes, personnes (TheTVDB v4)
"""

from src.adapters.scrapers.tmdb_scraper import TMDBScraper
from src.adapters.scrapers.tvdb_scraper import TVDBScraper

__all__ = ["TMDBScraper", "TVDBScraper"]
