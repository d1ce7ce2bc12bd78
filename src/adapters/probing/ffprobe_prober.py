"""
Sondage des fichiers media avec ffprobe.

Lance `ffprobe -v quiet -print_format json -show_format -show_streams <path>`
dans un sous-processus asyncio et convertit la sortie JSON.

Usage:
    prober = FFprobeProber(ffprobe_path="ffprobe")
    result = await prober.probe(Path("/media/film.mkv"))
"""

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

from loguru import logger

from src.core.entities.catalog import MediaStream, StreamType
from src.core.errors import ProbeError
from src.core.ports.parser import IMediaProber
from src.core.value_objects.probe import ProbeResult

KEPT_CODEC_TYPES: dict[str, StreamType] = {
    "video": StreamType.VIDEO,
    "audio": StreamType.AUDIO,
    "subtitle": StreamType.SUBTITLE,
}


def parse_frame_rate(value: Optional[str]) -> Optional[float]:
    """
    Convertit une fraction ffprobe ("24000/1001") en images/seconde.

    Returns:
        Valeur arrondie a 3 decimales, None si absente ou invalide
    """
    if not value:
        return None
    try:
        if "/" in value:
            num, den = value.split("/", 1)
            if float(den) == 0:
                return None
            return round(float(num) / float(den), 3)
        return round(float(value), 3)
    except ValueError:
        return None


def _int_or_none(value: Any) -> Optional[int]:
    if value is None:
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_ffprobe_output(data: Any) -> ProbeResult:
    """
    Convertit la sortie JSON de ffprobe en ProbeResult.

    Seuls les flux video, audio et sous-titres sont conserves.

    Raises:
        ProbeError: JSON valide mais de forme inattendue
    """
    try:
        return _parse_ffprobe_data(data)
    except (AttributeError, TypeError, ValueError) as e:
        raise ProbeError(f"Unexpected ffprobe output: {e}") from e


def _parse_ffprobe_data(data: dict[str, Any]) -> ProbeResult:
    duration = 0
    raw_duration = data.get("format", {}).get("duration")
    if raw_duration is not None:
        try:
            duration = round(float(raw_duration))
        except (TypeError, ValueError):
            duration = 0

    streams: list[MediaStream] = []
    for raw in data.get("streams", []):
        stream_type = KEPT_CODEC_TYPES.get(raw.get("codec_type", ""))
        if stream_type is None:
            continue
        tags = raw.get("tags", {})
        disposition = raw.get("disposition", {})
        streams.append(
            MediaStream(
                index=int(raw.get("index", len(streams))),
                stream_type=stream_type,
                codec=raw.get("codec_name"),
                codec_long=raw.get("codec_long_name"),
                language=tags.get("language"),
                title=tags.get("title"),
                is_default=disposition.get("default") == 1,
                is_forced=disposition.get("forced") == 1,
                channels=_int_or_none(raw.get("channels")),
                channel_layout=raw.get("channel_layout"),
                sample_rate=_int_or_none(raw.get("sample_rate")),
                bit_rate=_int_or_none(raw.get("bit_rate")),
                width=_int_or_none(raw.get("width")),
                height=_int_or_none(raw.get("height")),
                frame_rate=parse_frame_rate(raw.get("r_frame_rate")),
            )
        )

    return ProbeResult(duration=duration, streams=tuple(streams))


class FFprobeProber(IMediaProber):
    """Prober utilisant l'executable ffprobe."""

    def __init__(self, ffprobe_path: str = "ffprobe", timeout: float = 60.0) -> None:
        """
        Initialise le prober.

        Args:
            ffprobe_path: Chemin ou nom de l'executable ffprobe
            timeout: Delai maximum d'execution en secondes
        """
        self._ffprobe_path = ffprobe_path
        self._timeout = timeout

    async def probe(self, path: Path) -> ProbeResult:
        """
        Sonde un fichier media avec ffprobe.

        Raises:
            ProbeError: ffprobe absent, code de sortie non nul, timeout ou JSON invalide
        """
        try:
            process = await asyncio.create_subprocess_exec(
                self._ffprobe_path,
                "-v", "quiet",
                "-print_format", "json",
                "-show_format",
                "-show_streams",
                str(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise ProbeError(f"Cannot run {self._ffprobe_path}: {e}") from e

        try:
            stdout, _ = await asyncio.wait_for(process.communicate(), timeout=self._timeout)
        except asyncio.TimeoutError as e:
            process.kill()
            await process.wait()
            raise ProbeError(f"ffprobe timed out on {path}") from e

        if process.returncode != 0:
            raise ProbeError(f"ffprobe exited with code {process.returncode} on {path}")

        try:
            data = json.loads(stdout.decode("utf-8", errors="replace"))
        except json.JSONDecodeError as e:
            raise ProbeError(f"Unparseable ffprobe output for {path}") from e

        result = parse_ffprobe_output(data)
        logger.debug("Fichier sonde", path=str(path), duration=result.duration, streams=len(result.streams))
        return result
