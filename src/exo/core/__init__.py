"""exo core: configuration, errors and the storage/template collaborators."""

from exo.core.errors import (
    CannotRenameError,
    ConfigError,
    DeadlineExceededError,
    EditorError,
    ExoError,
    NotFoundError,
    RenderError,
    StorageError,
    TemplateError,
    TemplateNotFoundError,
    ValidationError,
)
from exo.core.types import IdeaStatus, NoteOptions, NoteServices, NoteType, PeriodType

__all__ = [
    # Errors
    "CannotRenameError",
    "ConfigError",
    "DeadlineExceededError",
    "EditorError",
    "ExoError",
    "NotFoundError",
    "RenderError",
    "StorageError",
    "TemplateError",
    "TemplateNotFoundError",
    "ValidationError",
    # Types
    "IdeaStatus",
    "NoteOptions",
    "NoteServices",
    "NoteType",
    "PeriodType",
]
