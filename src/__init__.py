"""
mediacat - Ingestion de bibliothèques média et enrichissement des métadonnées.

Ce package scanne des bibliothèques (séries, films, musique), sonde les
fichiers, planifie leur enrichissement dans des files persistantes et
fusionne les fiches TMDB/TVDB dans le catalogue.

Architecture : Hexagonale (Ports et Adaptateurs)
- core/ : Couche domaine (entités, ports, objets valeur, erreurs)
- services/ : Couche application (scan, files, sélection, fusion)
- adapters/ : Fournisseurs, sondage, parsing, images, CLI
- infrastructure/ : Persistance SQLModel
"""
