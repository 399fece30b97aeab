"""Note model: base notes, periodic notes and the concrete note kinds."""

from exo.notes.daily import create_daily_note, get_or_create_today_note, link_to_daily
from exo.notes.factory import NoteFactory
from exo.notes.idea import IdeaNote, create_idea_note
from exo.notes.note import Note, initialize_or_load
from exo.notes.periodic import DailyNavigator, PeriodicNote, PeriodNavigator
from exo.notes.zettel import create_zettel_note

__all__ = [
    "DailyNavigator",
    "IdeaNote",
    "Note",
    "NoteFactory",
    "PeriodNavigator",
    "PeriodicNote",
    "create_daily_note",
    "create_idea_note",
    "create_zettel_note",
    "get_or_create_today_note",
    "initialize_or_load",
    "link_to_daily",
]
