"""
Probers : extraction de la duree et des flux des fichiers media.
"""

from src.adapters.probing.ffprobe_prober import FFprobeProber
from src.adapters.probing.mediainfo_prober import MediaInfoProber

__all__ = ["FFprobeProber", "MediaInfoProber"]
