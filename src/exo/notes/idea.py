"""Idea notes: a Note with a status, tags and a category."""

from datetime import datetime
from typing import Iterable

from exo.core.errors import ValidationError
from exo.core.types import IdeaStatus, NoteOptions, NoteServices
from exo.notes.note import Note, initialize_or_load
from exo.notes.zettel import zettel_filename

IDEA_TEMPLATE = "idea"


class IdeaNote(Note):
    """A note capturing an idea and where it stands."""

    def __init__(
        self,
        title: str,
        services: NoteServices,
        options: NoteOptions | None = None,
        status: IdeaStatus | str = IdeaStatus.NEW,
        tags: Iterable[str] = (),
        category: str = "",
    ):
        super().__init__(title, services, options)
        self._status = self._parse_status(status)
        self._tags: list[str] = []
        self._category = category.strip()
        for tag in tags:
            self.add_tag(tag)

    def _parse_status(self, status: IdeaStatus | str) -> IdeaStatus:
        try:
            return IdeaStatus(status)
        except ValueError as e:
            raise ValidationError(
                f"unknown idea status: {status!r}", operation="set_status", title=self.title
            ) from e

    @property
    def status(self) -> IdeaStatus:
        return self._status

    def set_status(self, status: IdeaStatus | str) -> None:
        self._status = self._parse_status(status)
        self._modified = datetime.now()

    @property
    def tags(self) -> list[str]:
        return list(self._tags)

    def add_tag(self, tag: str) -> None:
        """Add a tag; blank tags are rejected and duplicates ignored."""
        tag = tag.strip().lstrip("#")
        if not tag:
            raise ValidationError("tag cannot be empty", operation="add_tag", title=self.title)
        if tag not in self._tags:
            self._tags.append(tag)
            self._modified = datetime.now()

    @property
    def category(self) -> str:
        return self._category

    @category.setter
    def category(self, value: str) -> None:
        self._category = value.strip()
        self._modified = datetime.now()

    def template_data(self) -> dict[str, object]:
        return {
            "Title": self.title,
            "Created": self.created.isoformat(timespec="seconds"),
            "FileName": self.path.name,
            "Status": str(self._status),
            "Tags": self.tags,
            "Category": self._category,
        }


def create_idea_note(
    title: str,
    services: NoteServices,
    tags: Iterable[str] = (),
    category: str = "",
    options: NoteOptions | None = None,
) -> IdeaNote:
    """Create or load the idea note for ``title``."""
    if not title or not title.strip():
        raise ValidationError("title cannot be empty", operation="create")

    defaults = NoteOptions(
        subdir=services.config.dir.idea_dir,
        filename=zettel_filename(title),
        template_name=IDEA_TEMPLATE,
    )
    note = IdeaNote(
        title,
        services,
        defaults.merged(options or NoteOptions()),
        tags=tags,
        category=category,
    )
    initialize_or_load(note, note.template_data())
    return note
