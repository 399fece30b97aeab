"""Path helpers for note files.

Pure functions only: nothing here touches the filesystem.
"""

import os
import re
from pathlib import Path

NOTE_EXTENSION = ".md"

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9\-]")


def resolve_note_path(data_root: Path | str, subdir: Path | str, filename: str) -> Path:
    """
    Join a data root, sub-directory and filename into a note path.

    An absolute ``subdir`` replaces ``data_root``, matching ``os.path.join``.

    Args:
        data_root: Absolute data home directory
        subdir: Sub-directory, relative to data_root or absolute
        filename: Note file name

    Returns:
        Path to the note file
    """
    return Path(os.path.join(str(data_root), str(subdir), filename))


def sanitize_filename(name: str) -> str:
    """
    Turn a title into a safe file stem.

    Spaces become dashes, anything other than ASCII letters, digits and
    dashes is dropped, and the result is lower-cased.

    Args:
        name: Raw title

    Returns:
        Sanitized stem (may be empty)
    """
    name = name.replace(" ", "-")
    return _UNSAFE_FILENAME_CHARS.sub("", name).lower()


def note_filename(stem: str) -> str:
    """Append the note extension to a stem."""
    return f"{stem}{NOTE_EXTENSION}"
