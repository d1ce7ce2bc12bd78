"""
Adaptateurs de parsing pour mediacat.

- MediaNameParser: Extrait les indices (episode, titre, annee, saison)
  des noms de fichiers et de dossiers
"""

from src.adapters.parsing.media_name_parser import MediaNameParser

__all__ = ["MediaNameParser"]
