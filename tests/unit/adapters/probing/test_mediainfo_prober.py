"""
Tests unitaires pour MediaInfoProber.

L'analyse pymediainfo est mockee : les pistes sont de simples objets a
attributs, comme celles de pymediainfo.
"""

from pathlib import Path
from types import SimpleNamespace
from unittest.mock import patch

import pytest

from src.adapters.probing.mediainfo_prober import MediaInfoProber
from src.core.entities.catalog import StreamType
from src.core.errors import ProbeError

PARSE_TARGET = "src.adapters.probing.mediainfo_prober.PyMediaInfo.parse"


def _media_info(*tracks: SimpleNamespace) -> SimpleNamespace:
    return SimpleNamespace(tracks=list(tracks))


GENERAL = SimpleNamespace(track_type="General", format="Matroska", duration="7205120")
VIDEO = SimpleNamespace(
    track_type="Video",
    format="AVC",
    commercial_name="AVC",
    width=1920,
    height=800,
    frame_rate="23.976",
    default="Yes",
)
AUDIO = SimpleNamespace(
    track_type="Audio",
    format="DTS",
    channel_s="6",
    sampling_rate="48000",
    language="en",
    default="No",
)
TEXT = SimpleNamespace(track_type="Text", format="UTF-8", language="fr", forced="Yes")
MENU = SimpleNamespace(track_type="Menu", format=None)


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    path = tmp_path / "film.mkv"
    path.write_bytes(b"")
    return path


class TestMediaInfoProber:
    """Tests pour MediaInfoProber.probe."""

    @pytest.mark.asyncio
    async def test_duration_in_seconds(self, media_file: Path) -> None:
        with patch(PARSE_TARGET, return_value=_media_info(GENERAL, VIDEO)):
            result = await MediaInfoProber().probe(media_file)

        assert result.duration == 7205

    @pytest.mark.asyncio
    async def test_streams_in_container_order(self, media_file: Path) -> None:
        with patch(PARSE_TARGET, return_value=_media_info(GENERAL, VIDEO, AUDIO, TEXT, MENU)):
            result = await MediaInfoProber().probe(media_file)

        assert [s.stream_type for s in result.streams] == [
            StreamType.VIDEO,
            StreamType.AUDIO,
            StreamType.SUBTITLE,
        ]
        assert [s.index for s in result.streams] == [0, 1, 2]

    @pytest.mark.asyncio
    async def test_stream_fields(self, media_file: Path) -> None:
        with patch(PARSE_TARGET, return_value=_media_info(GENERAL, VIDEO, AUDIO, TEXT)):
            result = await MediaInfoProber().probe(media_file)

        video, audio, text = result.streams
        assert video.codec == "avc"
        assert (video.width, video.height) == (1920, 800)
        assert video.frame_rate == 23.976
        assert video.is_default is True
        assert audio.channels == 6
        assert audio.sample_rate == 48000
        assert audio.language == "en"
        assert audio.is_default is False
        assert text.is_forced is True

    @pytest.mark.asyncio
    async def test_missing_general_track_gives_zero_duration(self, media_file: Path) -> None:
        with patch(PARSE_TARGET, return_value=_media_info(VIDEO)):
            result = await MediaInfoProber().probe(media_file)

        assert result.duration == 0

    @pytest.mark.asyncio
    async def test_missing_file_raises_probe_error(self, tmp_path: Path) -> None:
        with pytest.raises(ProbeError, match="File not found"):
            await MediaInfoProber().probe(tmp_path / "absent.mkv")

    @pytest.mark.asyncio
    async def test_parse_failure_raises_probe_error(self, media_file: Path) -> None:
        with patch(PARSE_TARGET, side_effect=RuntimeError("libmediainfo not found")):
            with pytest.raises(ProbeError, match="mediainfo failed"):
                await MediaInfoProber().probe(media_file)
