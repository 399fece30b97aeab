"""Shared types and data structures for exo."""

from __future__ import annotations

import logging
from dataclasses import dataclass, fields, replace
from enum import StrEnum
from pathlib import Path

from exo.core.config import ExoConfig
from exo.core.errors import ValidationError
from exo.core.storage import StorageBackend
from exo.core.templates import TemplateRenderer


class NoteType(StrEnum):
    """Kinds of notes, used for labelling factories."""

    BASE = "base"
    ZETTEL = "zettel"
    DAILY = "daily"
    IDEA = "idea"


class PeriodType(StrEnum):
    """Calendar period a periodic note covers."""

    DAILY = "daily"


class IdeaStatus(StrEnum):
    """Lifecycle of an idea note."""

    NEW = "new"
    IN_PROGRESS = "in-progress"
    IMPLEMENTED = "implemented"
    ARCHIVED = "archived"


@dataclass(frozen=True)
class NoteOptions:
    """Creation-time options for a note.

    ``None`` means "not supplied". Supplied values are validated immediately
    so an invalid option never reaches a note.
    """

    subdir: str | Path | None = None
    filename: str | None = None
    template_name: str | None = None
    content: str | None = None

    def __post_init__(self) -> None:
        for name in ("subdir", "filename", "template_name"):
            value = getattr(self, name)
            if value is not None and not str(value).strip():
                raise ValidationError(f"{name} cannot be empty", operation="create")

    def merged(self, overrides: NoteOptions) -> NoteOptions:
        """Return these options with every supplied override applied on top."""
        changes = {
            f.name: getattr(overrides, f.name)
            for f in fields(overrides)
            if getattr(overrides, f.name) is not None
        }
        return replace(self, **changes)


@dataclass(frozen=True)
class NoteServices:
    """Dependencies injected into every note.

    Built once per process (see ``exo.core.factory.build_services``) and
    shared by all notes; nothing in it is note-specific.
    """

    config: ExoConfig
    renderer: TemplateRenderer
    storage: StorageBackend
    logger: logging.Logger | None = None

    @property
    def data_home(self) -> Path:
        return Path(self.config.dir.data_home)

    @property
    def editor(self) -> str:
        return self.config.general.editor
