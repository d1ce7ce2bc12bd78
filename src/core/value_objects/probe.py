"""
Objets valeur pour le resultat du sondage d'un fichier media.
"""

from dataclasses import dataclass

from src.core.entities.catalog import MediaStream


@dataclass(frozen=True)
class ProbeResult:
    """
    Faits techniques extraits d'un fichier par l'outil de sondage.

    Attributs :
        duration : Duree en secondes, arrondie (0 si inconnue)
        streams : Flux video, audio et sous-titres dans l'ordre du conteneur
    """

    duration: int = 0
    streams: tuple[MediaStream, ...] = ()

    @classmethod
    def empty(cls) -> "ProbeResult":
        """Resultat degrade utilise quand le sondage echoue."""
        return cls(duration=0, streams=())
