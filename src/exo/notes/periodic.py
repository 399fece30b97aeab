"""Periodic notes: notes indexed by a calendar period.

A PeriodicNote wraps a Note and adds a date, a period type and a navigator
strategy. Unchanged operations are forwarded to the wrapped note; validate,
save, load and renaming are redefined here.
"""

from datetime import date, datetime, timedelta
from pathlib import Path
from typing import Any, Protocol

from exo.core.errors import CannotRenameError, ValidationError
from exo.core.paths import note_filename
from exo.core.types import NoteOptions, NoteServices, PeriodType
from exo.notes.note import Note

DEFAULT_PERIODIC_SUBDIR = "periodic"


class PeriodNavigator(Protocol):
    """Computes adjacent and boundary dates of a period. Pure functions."""

    def previous(self, day: date) -> date:
        pass

    def next(self, day: date) -> date:
        pass

    def start(self, day: date) -> date:
        pass

    def end(self, day: date) -> date:
        pass


class DailyNavigator:
    """Navigator for one-day periods."""

    def previous(self, day: date) -> date:
        return day - timedelta(days=1)

    def next(self, day: date) -> date:
        return day + timedelta(days=1)

    def start(self, day: date) -> date:
        return day

    def end(self, day: date) -> date:
        return day

    def __repr__(self) -> str:
        return "DailyNavigator()"


class PeriodicNote:
    """A Note tied to a calendar date, with period navigation.

    The title is derived from the date, so renaming is always rejected.
    """

    def __init__(
        self,
        title: str,
        day: date,
        period_type: PeriodType | str,
        navigator: PeriodNavigator | None,
        services: NoteServices,
        options: NoteOptions | None = None,
    ):
        """
        Create a periodic note in memory. No I/O is performed.

        Args:
            title: Title, normally the formatted date
            day: Date the note covers
            period_type: Period classification, e.g. PeriodType.DAILY
            navigator: Strategy for previous/next/start/end
            services: Injected dependencies
            options: Overrides for the default "periodic" subdir and
                "<title>.md" filename

        Raises:
            ValidationError: Missing title, period type or navigator
        """
        if navigator is None:
            raise ValidationError(
                "period navigator is required", operation="create", title=title
            )
        if not period_type:
            raise ValidationError("period type is required", operation="create", title=title)

        defaults = NoteOptions(
            subdir=DEFAULT_PERIODIC_SUBDIR,
            filename=note_filename(title) if title else None,
        )
        self._note = Note(title, services, defaults.merged(options or NoteOptions()))
        self._date = day
        self._period_type = str(period_type)
        self._navigator: PeriodNavigator | None = navigator

    # --- Periodic fields ---

    @property
    def date(self) -> date:
        return self._date

    @property
    def period_type(self) -> str:
        return self._period_type

    @property
    def navigator(self) -> PeriodNavigator | None:
        return self._navigator

    def set_navigator(self, navigator: PeriodNavigator | None) -> None:
        """Replace the navigator. A note without one fails validation."""
        self._navigator = navigator

    def _require_navigator(self) -> PeriodNavigator:
        if self._navigator is None:
            raise ValidationError(
                "navigator is not set", operation="navigate", path=self.path, title=self.title
            )
        return self._navigator

    def previous(self) -> date:
        return self._require_navigator().previous(self._date)

    def next(self) -> date:
        return self._require_navigator().next(self._date)

    def start(self) -> date:
        return self._require_navigator().start(self._date)

    def end(self) -> date:
        return self._require_navigator().end(self._date)

    # --- Forwarded to the wrapped note ---

    @property
    def note(self) -> Note:
        """The wrapped base note."""
        return self._note

    @property
    def id(self) -> str:
        return self._note.id

    @property
    def title(self) -> str:
        return self._note.title

    @title.setter
    def title(self, value: str) -> None:
        self.rename(value)

    def rename(self, title: str) -> None:
        """Always rejected: the title is derived from the date."""
        raise CannotRenameError(
            "cannot change title of a periodic note", operation="rename", path=self.path, title=self.title
        )

    @property
    def path(self) -> Path:
        return self._note.path

    @property
    def template_name(self) -> str:
        return self._note.template_name

    def set_template_name(self, name: str) -> None:
        self._note.set_template_name(name)

    @property
    def created(self) -> datetime:
        return self._note.created

    @property
    def modified(self) -> datetime:
        return self._note.modified

    @property
    def content(self) -> str:
        return self._note.content

    @content.setter
    def content(self, value: str) -> None:
        self._note.set_content(value)

    def set_content(self, content: str) -> None:
        self._note.set_content(content)

    def apply_template(self, data: Any) -> None:
        self._note.apply_template(data)

    def delete(self) -> None:
        self._note.delete()

    def exists(self) -> bool:
        return self._note.exists()

    def open(self) -> None:
        self._note.open()

    # --- Redefined operations ---

    def validate(self) -> None:
        """Base validation plus a navigator and a period type."""
        self._note.validate()
        if self._navigator is None:
            raise ValidationError(
                "period navigator is required", operation="validate", path=self.path, title=self.title
            )
        if not self._period_type:
            raise ValidationError(
                "period type is required", operation="validate", path=self.path, title=self.title
            )

    def save(self) -> None:
        """Validate, then save. An invalid note never touches the filesystem."""
        self.validate()
        self._note.save()

    def load(self) -> None:
        """Validate, then load. An invalid note never touches the filesystem."""
        self.validate()
        self._note.load()

    def __repr__(self) -> str:
        return (
            f"PeriodicNote(title={self.title!r}, date={self._date.isoformat()}, "
            f"period_type={self._period_type!r})"
        )
