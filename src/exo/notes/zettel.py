"""Zettel notes: atomic notes named after their title."""

from exo.core.errors import ValidationError
from exo.core.paths import note_filename, sanitize_filename
from exo.core.types import NoteOptions, NoteServices, NoteType
from exo.notes.factory import NoteFactory
from exo.notes.note import Note, initialize_or_load

ZETTEL_TEMPLATE = "zet"


def zettel_filename(title: str) -> str:
    """
    File name for a Zettel title, e.g. "Interesting Thought" -> "interesting-thought.md".

    Raises:
        ValidationError: The title has no usable characters
    """
    stem = sanitize_filename(title)
    if not stem:
        raise ValidationError(
            "title produces an empty file name", operation="create", title=title
        )
    return note_filename(stem)


def create_zettel_note(
    title: str,
    services: NoteServices,
    options: NoteOptions | None = None,
) -> Note:
    """Create or load the Zettel note for ``title`` in the inbox."""
    if not title or not title.strip():
        raise ValidationError("title cannot be empty", operation="create")

    defaults = NoteOptions(
        subdir=services.config.dir.inbox_dir,
        filename=zettel_filename(title),
        template_name=ZETTEL_TEMPLATE,
    )
    options = defaults.merged(options or NoteOptions())
    note = NoteFactory(NoteType.ZETTEL, services).create_note(
        title,
        subdir=options.subdir,
        filename=options.filename,
        template_name=options.template_name,
        content=options.content,
    )

    initialize_or_load(
        note,
        {
            "Title": title,
            "Created": note.created.isoformat(timespec="seconds"),
            "FileName": options.filename,
        },
    )
    return note
