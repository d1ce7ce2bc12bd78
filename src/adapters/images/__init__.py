"""Telechargement des images distantes."""

from src.adapters.images.image_fetcher import HttpImageFetcher

__all__ = ["HttpImageFetcher"]
