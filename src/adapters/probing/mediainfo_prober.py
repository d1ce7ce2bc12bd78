"""
Sondage des fichiers media avec pymediainfo.

Ce module fournit MediaInfoProber qui implemente IMediaProber en lisant
les pistes General, Video, Audio et Text de libmediainfo.
"""

import asyncio
from pathlib import Path
from typing import Any, Optional

from loguru import logger
from pymediainfo import MediaInfo as PyMediaInfo

from src.core.entities.catalog import MediaStream, StreamType
from src.core.errors import ProbeError
from src.core.ports.parser import IMediaProber
from src.core.value_objects.probe import ProbeResult

# Mapping des types de piste mediainfo vers les types de flux
TRACK_TYPES: dict[str, StreamType] = {
    "Video": StreamType.VIDEO,
    "Audio": StreamType.AUDIO,
    "Text": StreamType.SUBTITLE,
}


class MediaInfoProber(IMediaProber):
    """
    Prober utilisant pymediainfo.

    L'analyse est synchrone : elle est deportee dans l'executor par defaut
    pour ne pas bloquer la boucle des workers.
    """

    async def probe(self, path: Path) -> ProbeResult:
        """
        Sonde un fichier media.

        Args:
            path: Chemin complet vers le fichier

        Returns:
            ProbeResult avec duree (secondes) et flux

        Raises:
            ProbeError: Fichier absent ou analyse impossible
        """
        if not path.exists():
            raise ProbeError(f"File not found: {path}")

        loop = asyncio.get_running_loop()
        try:
            media_info = await loop.run_in_executor(None, PyMediaInfo.parse, str(path))
        except Exception as e:
            raise ProbeError(f"mediainfo failed on {path}: {e}") from e

        general = [t for t in media_info.tracks if t.track_type == "General"]
        duration = self._extract_duration(general[0] if general else None)

        streams: list[MediaStream] = []
        for track in media_info.tracks:
            stream_type = TRACK_TYPES.get(track.track_type)
            if stream_type is None:
                continue
            streams.append(self._to_stream(len(streams), stream_type, track))

        logger.debug("Fichier sonde", path=str(path), duration=duration, streams=len(streams))
        return ProbeResult(duration=duration, streams=tuple(streams))

    def _to_stream(self, index: int, stream_type: StreamType, track: Any) -> MediaStream:
        """Convertit une piste mediainfo en MediaStream."""
        stream_index = _to_int(getattr(track, "stream_identifier", None))
        return MediaStream(
            index=stream_index if stream_index is not None else index,
            stream_type=stream_type,
            codec=_lower(track.format),
            codec_long=getattr(track, "commercial_name", None) or track.format,
            language=getattr(track, "language", None),
            title=getattr(track, "title", None),
            is_default=_yes(getattr(track, "default", None)),
            is_forced=_yes(getattr(track, "forced", None)),
            channels=_to_int(getattr(track, "channel_s", None)),
            channel_layout=getattr(track, "channel_layout", None),
            sample_rate=_to_int(getattr(track, "sampling_rate", None)),
            bit_rate=_to_int(getattr(track, "bit_rate", None)),
            width=_to_int(getattr(track, "width", None)),
            height=_to_int(getattr(track, "height", None)),
            frame_rate=_to_frame_rate(getattr(track, "frame_rate", None)),
        )

    def _extract_duration(self, general: Any) -> int:
        """
        Duree en SECONDES depuis la piste generale.

        pymediainfo retourne la duree en millisecondes.
        """
        if general is None or general.duration is None:
            return 0
        try:
            return round(float(general.duration) / 1000)
        except (TypeError, ValueError):
            return 0


def _lower(value: Optional[str]) -> Optional[str]:
    return value.lower() if value else None


def _yes(value: Any) -> bool:
    return str(value).lower() in ("yes", "true", "1")


def _to_int(value: Any) -> Optional[int]:
    """Convertit une valeur mediainfo en entier ("6 / 2" -> 6)."""
    if value is None:
        return None
    try:
        return int(float(str(value).split("/")[0].strip()))
    except ValueError:
        return None


def _to_frame_rate(value: Any) -> Optional[float]:
    if value is None:
        return None
    try:
        return round(float(value), 3)
    except (TypeError, ValueError):
        return None
