"""
Couche adaptateurs (infrastructure).

Les adaptateurs implémentent les ports définis dans core/ports/ et fournissent
des implémentations concrètes pour les systèmes externes.

Sous-packages :
- api/ : Cache et retry HTTP partagés
- scrapers/ : Fournisseurs de métadonnées (TMDB, TVDB)
- probing/ : Sondage des fichiers (pymediainfo, ffprobe)
- parsing/ : Parsing des noms de fichiers et de dossiers
- images/ : Téléchargement des images distantes

Chaque adaptateur dépend de core/ mais core/ ne dépend jamais des adaptateurs.
Cela permet de changer les implémentations sans affecter la logique métier.
"""

from src.adapters.file_system import FileSystemAdapter

__all__ = [
    "FileSystemAdapter",
]
