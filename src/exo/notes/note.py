"""The base note entity.

A Note is an in-memory value bound to exactly one file. It becomes durable
only through an explicit save(); dropping the object never touches the file.
All I/O goes through the injected StorageBackend and all rendering through
the injected TemplateRenderer.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, NoReturn, Protocol
from uuid import uuid4

from exo.core.errors import (
    ExoError,
    NotFoundError,
    StorageError,
    TemplateError,
    ValidationError,
)
from exo.core.paths import resolve_note_path
from exo.core.types import NoteOptions, NoteServices

logger = logging.getLogger(__name__)


def _reraise(err: ExoError, operation: str, note: "Note") -> NoReturn:
    """Re-raise ``err`` as the same type, tagged with the note's context."""
    raise type(err)(
        err.message, operation=operation, path=note.path, title=note.title
    ) from err


class Note:
    """A single note file: identity, content, path and timestamps."""

    def __init__(
        self,
        title: str,
        services: NoteServices,
        options: NoteOptions | None = None,
    ):
        """
        Create a note in memory. No I/O is performed.

        Args:
            title: Non-empty title
            services: Injected config, renderer, storage and logger
            options: Sub-directory, filename, template name, initial content

        Raises:
            ValidationError: Empty title, or no subdir/filename to build a path
        """
        options = options or NoteOptions()
        self._log = services.logger or logger

        if not title or not title.strip():
            self._log.error("Failed to create note: empty title")
            raise ValidationError("title cannot be empty", operation="create")
        if options.subdir is None or options.filename is None:
            self._log.error(f"Failed to create note {title!r}: path cannot be computed")
            raise ValidationError(
                "subdirectory and filename are required to compute the note path",
                operation="create",
                title=title,
            )

        now = datetime.now()
        self._id = uuid4().hex
        self._title = title
        self._content = options.content or ""
        self._template_name = options.template_name or ""
        self._path = resolve_note_path(services.data_home, options.subdir, options.filename)
        self._created = now
        self._modified = now
        self._services = services

        self._log.debug(f"Created note {self._id} {title!r} at {self._path}")

    # --- Metadata ---

    @property
    def id(self) -> str:
        return self._id

    @property
    def title(self) -> str:
        return self._title

    @title.setter
    def title(self, value: str) -> None:
        self.rename(value)

    def rename(self, title: str) -> None:
        """Change the title. The file path is fixed at creation and does not move."""
        if not title or not title.strip():
            raise ValidationError(
                "title cannot be empty", operation="rename", path=self._path, title=self._title
            )
        self._title = title
        self._modified = datetime.now()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def template_name(self) -> str:
        return self._template_name

    def set_template_name(self, name: str) -> None:
        """Use another template for the next apply_template()."""
        if not name or not name.strip():
            raise ValidationError(
                "template name cannot be empty",
                operation="set_template_name",
                path=self._path,
                title=self._title,
            )
        self._template_name = name
        self._modified = datetime.now()

    @property
    def created(self) -> datetime:
        return self._created

    @property
    def modified(self) -> datetime:
        return self._modified

    @property
    def services(self) -> NoteServices:
        return self._services

    # --- Content ---

    @property
    def content(self) -> str:
        return self._content

    @content.setter
    def content(self, value: str) -> None:
        self.set_content(value)

    def set_content(self, content: str) -> None:
        """Replace the in-memory content. Never writes to disk."""
        self._content = content
        self._modified = datetime.now()

    def apply_template(self, data: Any) -> None:
        """
        Render the note's template with ``data`` and use it as content.

        Raises:
            TemplateError: No template name set, or rendering failed
                (TemplateNotFoundError, RenderError, DeadlineExceededError)
        """
        if not self._template_name:
            self._log.error(f"Failed to apply template to {self._title!r}: no template name set")
            raise TemplateError(
                "no template name set",
                operation="apply_template",
                path=self._path,
                title=self._title,
            )

        self._log.debug(f"Applying template {self._template_name!r} to {self._title!r}")
        try:
            rendered = self._services.renderer.render(self._template_name, data)
        except TemplateError as e:
            self._log.error(f"Failed to apply template {self._template_name!r}: {e}")
            _reraise(e, "apply_template", self)

        self.set_content(rendered)
        self._log.info(f"Applied template {self._template_name!r} to {self._title!r}")

    # --- Validation ---

    def validate(self) -> None:
        """Raise ValidationError unless the note has a title and a path."""
        if not self._title:
            raise ValidationError("title is required", operation="validate", path=self._path)
        if not str(self._path):
            raise ValidationError("path is required", operation="validate", title=self._title)

    # --- Persistence ---

    def save(self) -> None:
        """
        Write the content to disk, creating parent directories.

        Overwrites unconditionally.

        Raises:
            ValidationError: Note is invalid; nothing is written
            StorageError: Directory creation or write failed
        """
        self.validate()
        self._log.debug(f"Saving note {self._id} {self._title!r} to {self._path}")
        try:
            self._services.storage.write(self._path, self._content.encode("utf-8"))
        except ExoError as e:
            self._log.error(f"Failed to save note {self._title!r}: {e}")
            _reraise(e, "save", self)
        self._log.info(f"Saved note {self._title!r} to {self._path}")

    def load(self) -> None:
        """
        Replace the in-memory content with the file's content.

        Raises:
            ValidationError: Note is invalid; nothing is read
            NotFoundError: The file does not exist
            StorageError: The file could not be read or decoded
        """
        self.validate()
        self._log.debug(f"Loading note {self._id} {self._title!r} from {self._path}")
        try:
            raw = self._services.storage.read(self._path)
        except ExoError as e:
            self._log.error(f"Failed to load note {self._title!r}: {e}")
            _reraise(e, "load", self)

        try:
            self._content = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise StorageError(
                f"file is not valid UTF-8: {e}",
                operation="load",
                path=self._path,
                title=self._title,
            ) from e
        self._log.info(f"Loaded note {self._title!r} from {self._path}")

    def delete(self) -> None:
        """Remove the file. Deleting a missing file is not an error."""
        self.validate()
        self._log.debug(f"Deleting note {self._id} {self._title!r} at {self._path}")
        try:
            self._services.storage.delete(self._path)
        except ExoError as e:
            self._log.error(f"Failed to delete note {self._title!r}: {e}")
            _reraise(e, "delete", self)
        self._log.info(f"Deleted note {self._title!r}")

    def exists(self) -> bool:
        """Whether the note's file is on disk."""
        if not str(self._path):
            return False
        return self._services.storage.exists(self._path)

    def open(self) -> None:
        """
        Open the note in the configured editor and block until it exits.

        Raises:
            NotFoundError: The file has not been saved yet
            EditorError: The editor failed to launch or exited non-zero
        """
        self.validate()
        if not self.exists():
            self._log.error(f"Failed to open note {self._title!r}: file does not exist")
            raise NotFoundError(
                "note file does not exist", operation="open", path=self._path, title=self._title
            )

        editor = self._services.editor
        self._log.debug(f"Opening {self._path} with {editor!r}")
        try:
            self._services.storage.open_external(self._path, editor)
        except ExoError as e:
            self._log.error(f"Failed to open note {self._title!r} in editor: {e}")
            _reraise(e, "open", self)
        self._log.info(f"Closed editor for {self._title!r}")

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self._id!r}, title={self._title!r}, path={str(self._path)!r})"


class Lifecycle(Protocol):
    """The subset of note operations the initialize-or-load flow needs."""

    def exists(self) -> bool:
        pass

    def apply_template(self, data: Any) -> None:
        pass

    def save(self) -> None:
        pass

    def load(self) -> None:
        pass


def initialize_or_load(note: Lifecycle, template_data: Any) -> bool:
    """
    Bring a freshly constructed note to its ready state.

    If the file does not exist the template is applied and the note saved;
    otherwise the file is loaded, replacing any placeholder content. Any
    failure propagates, so callers never hand out a half-initialized note.

    Returns:
        True if the note was initialized, False if it was loaded
    """
    if not note.exists():
        note.apply_template(template_data)
        note.save()
        return True
    note.load()
    return False
