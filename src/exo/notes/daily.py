"""Daily notes: one periodic note per calendar day."""

import logging
from datetime import date
from pathlib import Path

from exo.core.errors import ExoError
from exo.core.paths import note_filename
from exo.core.types import NoteOptions, NoteServices, PeriodType
from exo.notes.note import _reraise, initialize_or_load
from exo.notes.periodic import DailyNavigator, PeriodicNote

logger = logging.getLogger(__name__)

DAILY_TEMPLATE = "day"
DAILY_SUBDIR = "day"
DATE_FORMAT = "%Y-%m-%d"


def daily_title(day: date) -> str:
    """Title (and file stem) of the daily note for ``day``."""
    return day.strftime(DATE_FORMAT)


def daily_template_data(note: PeriodicNote) -> dict[str, str]:
    """Template variables for a new daily note."""
    return {
        "Date": daily_title(note.date),
        "Previous": daily_title(note.previous()),
        "Next": daily_title(note.next()),
    }


def create_daily_note(
    day: date,
    services: NoteServices,
    options: NoteOptions | None = None,
) -> PeriodicNote:
    """
    Create or load the daily note for ``day``.

    New notes are rendered from the "day" template and saved; existing
    notes are loaded from disk.

    Args:
        day: Date of the note
        services: Injected dependencies
        options: Overrides for subdir, filename or template name

    Returns:
        Ready daily note

    Raises:
        ExoError: Template, storage or validation failure; no note is returned
    """
    title = daily_title(day)
    defaults = NoteOptions(
        subdir=Path(services.config.dir.periodic_dir) / DAILY_SUBDIR,
        filename=note_filename(title),
        template_name=DAILY_TEMPLATE,
    )
    note = PeriodicNote(
        title,
        day,
        PeriodType.DAILY,
        DailyNavigator(),
        services,
        defaults.merged(options or NoteOptions()),
    )

    if initialize_or_load(note, daily_template_data(note)):
        logger.info(f"Initialized new daily note {note.path}")
    else:
        logger.debug(f"Loaded existing daily note {note.path}")
    return note


def get_or_create_today_note(services: NoteServices, today: date | None = None) -> PeriodicNote:
    """Daily note for today (or the given date)."""
    return create_daily_note(today or date.today(), services)


def link_to_daily(title: str, daily: PeriodicNote) -> str:
    """
    Append a ``- [[title]]`` link to a daily note's file and reload it.

    Returns:
        The link line that was appended
    """
    link = f"- [[{title}]]"
    daily.validate()
    separator = "" if not daily.content or daily.content.endswith("\n") else "\n"
    try:
        daily.note.services.storage.append(daily.path, separator + link)
    except ExoError as e:
        logger.error(f"Failed to link {title!r} from daily note {daily.title!r}: {e}")
        _reraise(e, "link_to_daily", daily.note)
    daily.load()
    return link
