"""Unit tests for FileStorage."""

import subprocess
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from exo.core.errors import EditorError, NotFoundError, StorageError
from exo.core.storage import FileStorage


@pytest.fixture
def storage() -> FileStorage:
    return FileStorage()


class TestReadWrite:
    """Tests for read/write/append."""

    def test_write_creates_parent_dirs(self, storage: FileStorage, tmp_path: Path):
        """Writing into missing directories creates them."""
        path = tmp_path / "a" / "b" / "note.md"
        storage.write(path, b"hello")

        assert path.read_bytes() == b"hello"
        assert storage.read(path) == b"hello"

    def test_write_overwrites(self, storage: FileStorage, tmp_path: Path):
        """Write replaces existing content."""
        path = tmp_path / "note.md"
        storage.write(path, b"first")
        storage.write(path, b"second")
        assert storage.read(path) == b"second"

    def test_write_applies_file_mode(self, tmp_path: Path):
        """Files are written with the configured permissions."""
        path = tmp_path / "note.md"
        FileStorage(file_mode=0o600).write(path, b"x")
        assert path.stat().st_mode & 0o777 == 0o600

    def test_read_missing_raises_not_found(self, storage: FileStorage, tmp_path: Path):
        """Reading a missing file raises NotFoundError."""
        with pytest.raises(NotFoundError):
            storage.read(tmp_path / "missing.md")

    def test_read_directory_raises_storage_error(self, storage: FileStorage, tmp_path: Path):
        """Other read failures raise StorageError."""
        with pytest.raises(StorageError):
            storage.read(tmp_path)

    def test_write_under_file_raises_storage_error(self, storage: FileStorage, tmp_path: Path):
        """A parent that is a file cannot become a directory."""
        blocker = tmp_path / "blocker"
        blocker.write_text("x")
        with pytest.raises(StorageError):
            storage.write(blocker / "note.md", b"x")

    def test_append_adds_line(self, storage: FileStorage, tmp_path: Path):
        """Append adds a newline-terminated line, creating the file."""
        path = tmp_path / "day" / "2025-02-08.md"
        storage.append(path, "- [[one]]")
        storage.append(path, "- [[two]]")
        assert path.read_text() == "- [[one]]\n- [[two]]\n"


class TestExistsDelete:
    """Tests for exists/delete."""

    def test_exists(self, storage: FileStorage, tmp_path: Path):
        """exists reflects the filesystem."""
        path = tmp_path / "note.md"
        assert storage.exists(path) is False
        path.write_text("x")
        assert storage.exists(path) is True

    def test_delete_is_idempotent(self, storage: FileStorage, tmp_path: Path):
        """Deleting twice, or a file that never existed, is fine."""
        path = tmp_path / "note.md"
        path.write_text("x")
        storage.delete(path)
        storage.delete(path)
        assert not path.exists()


class TestOpenExternal:
    """Tests for open_external()."""

    def test_runs_program_with_path(self, storage: FileStorage, tmp_path: Path, monkeypatch):
        """The editor command is split and the path appended."""
        run = MagicMock(return_value=subprocess.CompletedProcess([], 0))
        monkeypatch.setattr("exo.core.storage.subprocess.run", run)
        path = tmp_path / "note.md"

        storage.open_external(path, "code --wait")

        run.assert_called_once_with(["code", "--wait", str(path)], check=False)

    def test_nonzero_exit_raises(self, storage: FileStorage, tmp_path: Path, monkeypatch):
        """A failing editor raises EditorError."""
        run = MagicMock(return_value=subprocess.CompletedProcess([], 2))
        monkeypatch.setattr("exo.core.storage.subprocess.run", run)

        with pytest.raises(EditorError, match="exited with status 2"):
            storage.open_external(tmp_path / "note.md", "vim")

    def test_launch_failure_raises(self, storage: FileStorage, tmp_path: Path, monkeypatch):
        """A missing editor binary raises EditorError."""
        run = MagicMock(side_effect=FileNotFoundError("no such editor"))
        monkeypatch.setattr("exo.core.storage.subprocess.run", run)

        with pytest.raises(EditorError, match="failed to launch"):
            storage.open_external(tmp_path / "note.md", "nonexistent-editor")

    def test_empty_program_raises(self, storage: FileStorage, tmp_path: Path):
        """An empty editor is rejected before launching anything."""
        with pytest.raises(EditorError, match="cannot be empty"):
            storage.open_external(tmp_path / "note.md", " ")
