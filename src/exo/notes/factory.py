"""Generic note factory.

A factory binds the shared dependencies so callers only supply a title and
options. The note type is a label; it does not change how notes are built.
"""

import logging
from pathlib import Path

from exo.core.errors import ExoError
from exo.core.types import NoteOptions, NoteServices, NoteType
from exo.notes.note import Note

logger = logging.getLogger(__name__)


class NoteFactory:
    """Creates base notes of one labelled type."""

    def __init__(self, note_type: NoteType | str, services: NoteServices):
        self._note_type = note_type
        self.services = services

    @property
    def note_type(self) -> NoteType | str:
        return self._note_type

    def create_note(
        self,
        title: str,
        *,
        subdir: str | Path | None = None,
        filename: str | None = None,
        template_name: str | None = None,
        content: str | None = None,
    ) -> Note:
        """
        Create a note with the bound dependencies. No I/O is performed.

        Raises:
            ValidationError: Empty title or option, or no path can be computed
        """
        try:
            options = NoteOptions(
                subdir=subdir,
                filename=filename,
                template_name=template_name,
                content=content,
            )
            return Note(title, self.services, options)
        except ExoError as e:
            logger.error(f"Failed to create {self._note_type} note {title!r}: {e}")
            raise

    def __repr__(self) -> str:
        return f"NoteFactory(note_type={str(self._note_type)!r})"
