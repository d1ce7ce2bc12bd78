"""
Couche domaine (core).

Contient les entités métier, ports (interfaces abstraites), objets valeur
et la taxonomie des erreurs. Cette couche n'a AUCUNE dépendance vers
l'infrastructure (adapters, frameworks, BDD).

Sous-packages :
- entities/ : Catalogue (Library, Collection, Media), détails enrichis, jobs
- ports/ : Contrats des repositories, fournisseurs, prober, images
- value_objects/ : Requêtes des files, indices de recherche, fiches des fournisseurs
"""
