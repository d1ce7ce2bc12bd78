"""
Tests unitaires pour FileSystemAdapter.

Verifie le listing trie avec resolution des liens symboliques et
l'ecriture des images avec creation des repertoires parents.
"""

from pathlib import Path

import pytest

from src.adapters.file_system import (
    AUDIO_EXTENSIONS,
    VIDEO_EXTENSIONS,
    FileSystemAdapter,
    extensions_for,
)
from src.core.entities.catalog import LibraryType
from src.core.errors import FilesystemReadError


@pytest.fixture
def adapter() -> FileSystemAdapter:
    return FileSystemAdapter()


class TestListDirectory:
    """Tests pour list_directory."""

    def test_splits_files_and_directories_sorted(self, adapter: FileSystemAdapter, tmp_path: Path) -> None:
        (tmp_path / "b.mkv").write_bytes(b"")
        (tmp_path / "a.mkv").write_bytes(b"")
        (tmp_path / "Season 2").mkdir()
        (tmp_path / "Season 1").mkdir()

        listing = adapter.list_directory(tmp_path)

        assert [p.name for p in listing.files] == ["a.mkv", "b.mkv"]
        assert [p.name for p in listing.directories] == ["Season 1", "Season 2"]

    def test_follows_symlinks(self, adapter: FileSystemAdapter, tmp_path: Path) -> None:
        target_dir = tmp_path / "elsewhere"
        target_dir.mkdir()
        target_file = tmp_path / "real.mkv"
        target_file.write_bytes(b"")
        root = tmp_path / "library"
        root.mkdir()
        (root / "linked_dir").symlink_to(target_dir)
        (root / "linked.mkv").symlink_to(target_file)

        listing = adapter.list_directory(root)

        assert [p.name for p in listing.directories] == ["linked_dir"]
        assert [p.name for p in listing.files] == ["linked.mkv"]

    def test_ignores_broken_symlinks(self, adapter: FileSystemAdapter, tmp_path: Path) -> None:
        (tmp_path / "dangling.mkv").symlink_to(tmp_path / "missing.mkv")

        listing = adapter.list_directory(tmp_path)

        assert listing.files == ()
        assert listing.directories == ()

    def test_missing_directory_raises(self, adapter: FileSystemAdapter, tmp_path: Path) -> None:
        with pytest.raises(FilesystemReadError) as exc_info:
            adapter.list_directory(tmp_path / "absent")
        assert exc_info.value.path == str(tmp_path / "absent")


class TestWriteBytes:
    """Tests pour write_bytes."""

    def test_creates_parent_directories(self, adapter: FileSystemAdapter, tmp_path: Path) -> None:
        target = tmp_path / "images" / "media" / "42" / "Poster.jpg"

        size = adapter.write_bytes(target, b"12345")

        assert size == 5
        assert target.read_bytes() == b"12345"


class TestExtensions:
    """Tests pour extensions_for."""

    def test_music_libraries_scan_audio(self) -> None:
        assert extensions_for(LibraryType.MUSIC) == AUDIO_EXTENSIONS

    def test_video_libraries_scan_video(self) -> None:
        assert extensions_for(LibraryType.FILM) == VIDEO_EXTENSIONS
        assert extensions_for(LibraryType.TELEVISION) == VIDEO_EXTENSIONS
