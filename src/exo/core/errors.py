"""Error taxonomy for exo.

Every note operation raises one of these instead of degrading silently.
Errors carry the operation, path and note title so the CLI can print a
precise message without re-deriving context.
"""

from pathlib import Path


class ExoError(Exception):
    """Base error for all exo failures."""

    def __init__(
        self,
        message: str,
        *,
        operation: str | None = None,
        path: Path | str | None = None,
        title: str | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.path = str(path) if path is not None else None
        self.title = title

    def __str__(self) -> str:
        context = []
        if self.operation:
            context.append(f"operation={self.operation}")
        if self.title:
            context.append(f"title={self.title!r}")
        if self.path:
            context.append(f"path={self.path}")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class ValidationError(ExoError):
    """A required field (title, path, navigator, period type) is missing."""


class NotFoundError(ExoError):
    """The underlying file does not exist."""


class StorageError(ExoError):
    """Directory creation, read, write or delete failed."""


class TemplateError(ExoError):
    """Template name missing or template processing failed."""


class TemplateNotFoundError(TemplateError):
    """No template with the requested name."""


class RenderError(TemplateError):
    """Template could not be rendered against the supplied data."""


class DeadlineExceededError(TemplateError):
    """Rendering did not finish before its deadline."""


class CannotRenameError(ExoError):
    """Raised when renaming a note whose title is derived from its date."""


class EditorError(ExoError):
    """External editor could not be launched or exited non-zero."""


class ConfigError(ExoError):
    """Configuration file is missing, unreadable or invalid."""
