"""File storage backend for notes.

Notes never perform raw I/O themselves; they go through a StorageBackend.
FileStorage is the local-filesystem implementation used by the CLI.
"""

import logging
import shlex
import subprocess
from pathlib import Path
from typing import Protocol

from exo.core.errors import EditorError, NotFoundError, StorageError

logger = logging.getLogger(__name__)


class StorageBackend(Protocol):
    """Byte-level file primitives consumed by notes."""

    def exists(self, path: Path) -> bool:
        pass

    def read(self, path: Path) -> bytes:
        pass

    def write(self, path: Path, content: bytes) -> None:
        pass

    def delete(self, path: Path) -> None:
        pass

    def append(self, path: Path, text: str) -> None:
        pass

    def open_external(self, path: Path, program: str) -> None:
        pass


class FileStorage:
    """StorageBackend backed by the local filesystem."""

    def __init__(self, dir_mode: int = 0o755, file_mode: int = 0o644):
        """
        Initialize file storage.

        Args:
            dir_mode: Permissions for created directories
            file_mode: Permissions for written files
        """
        self.dir_mode = dir_mode
        self.file_mode = file_mode

    def exists(self, path: Path) -> bool:
        """Check whether a file exists. Never raises."""
        try:
            return Path(path).exists()
        except OSError:
            return False

    def ensure_dir(self, directory: Path) -> None:
        """Create a directory and its parents."""
        try:
            Path(directory).mkdir(mode=self.dir_mode, parents=True, exist_ok=True)
        except OSError as e:
            logger.error(f"Failed to create directory {directory}: {e}")
            raise StorageError(
                f"failed to create directory: {e}", operation="mkdir", path=directory
            ) from e

    def read(self, path: Path) -> bytes:
        """Read a whole file."""
        path = Path(path)
        logger.debug(f"Reading file {path}")
        try:
            return path.read_bytes()
        except FileNotFoundError as e:
            raise NotFoundError("file does not exist", operation="read", path=path) from e
        except OSError as e:
            logger.error(f"Failed to read file {path}: {e}")
            raise StorageError(f"failed to read file: {e}", operation="read", path=path) from e

    def write(self, path: Path, content: bytes) -> None:
        """Write a whole file, creating parent directories. Overwrites."""
        path = Path(path)
        logger.debug(f"Writing {len(content)} bytes to {path}")
        self.ensure_dir(path.parent)
        try:
            path.write_bytes(content)
            path.chmod(self.file_mode)
        except OSError as e:
            logger.error(f"Failed to write file {path}: {e}")
            raise StorageError(f"failed to write file: {e}", operation="write", path=path) from e

    def delete(self, path: Path) -> None:
        """Remove a file. Missing files are ignored."""
        path = Path(path)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.error(f"Failed to delete file {path}: {e}")
            raise StorageError(f"failed to delete file: {e}", operation="delete", path=path) from e

    def append(self, path: Path, text: str) -> None:
        """Append a line to a file, creating it if needed."""
        path = Path(path)
        self.ensure_dir(path.parent)
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError as e:
            logger.error(f"Failed to append to file {path}: {e}")
            raise StorageError(f"failed to append to file: {e}", operation="append", path=path) from e

    def open_external(self, path: Path, program: str) -> None:
        """
        Open a file in an external program and wait for it to exit.

        stdin/stdout/stderr are inherited so the user interacts directly
        with the program.

        Raises:
            EditorError: If the program cannot be launched or exits non-zero
        """
        if not program or not program.strip():
            raise EditorError("editor cannot be empty", operation="open", path=path)

        command = [*shlex.split(program), str(path)]
        logger.debug(f"Executing editor command: {command}")
        try:
            result = subprocess.run(command, check=False)
        except OSError as e:
            logger.error(f"Failed to launch editor {program!r}: {e}")
            raise EditorError(
                f"failed to launch editor {program!r}: {e}", operation="open", path=path
            ) from e

        if result.returncode != 0:
            raise EditorError(
                f"editor {program!r} exited with status {result.returncode}",
                operation="open",
                path=path,
            )
