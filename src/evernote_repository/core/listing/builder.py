"""Turn Evernote entities into file picker listing entries."""

import mimetypes
import re
import unicodedata
from collections.abc import Iterable
from dataclasses import replace
from datetime import UTC, datetime
from typing import Any

from evernote_repository.core.path.codec import encode_segment
from evernote_repository.models.entities import Note, Notebook, SavedSearch, Tag
from evernote_repository.models.listing import ListingEntry
from evernote_repository.strings import get_string

FOLDER_THUMBNAIL = "f/folder-64"

# Appended to a stack name to key it among notebook names. A notebook named
# exactly like this collides with the stack; known and accepted.
STACK_KEY_SUFFIX = "-=-1Make2Me3Unique4Please5-=-"

ROOT_CATEGORIES = ("all", "notebooks", "tags", "searchs")
_CATEGORY_STRINGS = {
    "all": "allnotes",
    "notebooks": "notebooks",
    "tags": "tags",
    "searchs": "savedsearchs",
}

_DIGITS = re.compile(r"(\d+)")

_MIME_ICONS = {
    "application/pdf": "pdf",
    "application/zip": "archive",
    "application/msword": "document",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": "document",
    "application/vnd.ms-excel": "spreadsheet",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet": "spreadsheet",
    "application/vnd.ms-powerpoint": "powerpoint",
    "application/vnd.openxmlformats-officedocument.presentationml.presentation": "powerpoint",
}


def _fold(value: str) -> str:
    decomposed = unicodedata.normalize("NFKD", value.casefold())
    return "".join(c for c in decomposed if not unicodedata.combining(c))


def natural_key(value: str) -> tuple[Any, ...]:
    """Key for a case- and accent-insensitive, numeric-aware sort.

    Numbers sort before words, and the raw value breaks ties so that the
    order never depends on the input order.
    """
    parts: list[tuple[int, int, str]] = []
    for chunk in _DIGITS.split(_fold(value)):
        if not chunk:
            continue
        if chunk.isdecimal():
            parts.append((0, int(chunk), ""))
        else:
            parts.append((1, 0, chunk))
    return (tuple(parts), value)


def thumbnail_for(filename: str) -> str:
    """Icon reference for a file, guessed from its name."""
    mime, _ = mimetypes.guess_type(filename)
    if mime is None:
        return "f/unknown-64"
    if mime in _MIME_ICONS:
        return f"f/{_MIME_ICONS[mime]}-64"
    major = mime.split("/", 1)[0]
    if major in {"image", "audio", "video", "text"}:
        return f"f/{major}-64"
    return "f/unknown-64"


def _from_millis(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=UTC)


def _folder(title: str, path: str, created: int | None = None, updated: int | None = None) -> ListingEntry:
    return ListingEntry(
        title=title,
        path=path,
        thumbnail=FOLDER_THUMBNAIL,
        created=_from_millis(created),
        updated=_from_millis(updated),
        children=(),
    )


def build_root_list() -> list[ListingEntry]:
    """The categories shown when browsing the root of the repository."""
    return [_folder(get_string(_CATEGORY_STRINGS[mode]), encode_segment(mode)) for mode in ROOT_CATEGORIES]


def build_notebooks_list(notebooks: Iterable[Notebook], path: str, stack: str = "") -> list[ListingEntry]:
    """Build the notebooks and stacks shown under ``path``.

    Without ``stack``, notebooks belonging to a stack are collapsed into one
    folder per stack, the first notebook seen creating it. With ``stack``,
    only the notebooks of that stack are listed.
    """
    entries: dict[str, ListingEntry] = {}
    for notebook in notebooks:
        notebook_stack = notebook.stack or ""
        if stack and stack != notebook_stack:
            continue
        if not stack and notebook_stack:
            key = notebook_stack + STACK_KEY_SUFFIX
            if key in entries:
                continue
            entries[key] = _folder(notebook_stack, encode_segment("stack", notebook_stack, parent=path))
        else:
            entries[notebook.name] = _folder(
                notebook.name,
                encode_segment("notebook", notebook.guid, notebook.name, path),
                created=notebook.service_created,
                updated=notebook.service_updated,
            )
    return [entries[key] for key in sorted(entries, key=natural_key)]


def build_tags_list(tags: Iterable[Tag], path: str) -> list[ListingEntry]:
    # TODO: nest tags under their parent tag once Tag carries parentGuid.
    ordered = sorted(tags, key=lambda tag: natural_key(tag.name))
    return [_folder(tag.name, encode_segment("tags", tag.guid, tag.name, path)) for tag in ordered]


def build_saved_search_list(searches: Iterable[SavedSearch], path: str) -> list[ListingEntry]:
    ordered = sorted(searches, key=lambda search: natural_key(search.name))
    return [
        _folder(search.name, encode_segment("searchs", search.guid, search.name, path)) for search in ordered
    ]


def build_note_content(note: Note) -> list[ListingEntry]:
    """Build the file entries of the attachments of a note.

    Attachments without a file name are skipped: they could not be picked by
    name later on.
    """
    files = []
    for resource in note.resources:
        if not resource.file_name:
            continue
        files.append(
            ListingEntry(
                title=resource.file_name,
                source=f"resource:{resource.guid}|note:{note.guid}",
                thumbnail=thumbnail_for(resource.file_name),
                created=_from_millis(note.created),
                updated=_from_millis(note.updated),
                size=resource.size,
                children=None,
            )
        )
    return files


def build_notes_list(notes: Iterable[Note], path: str, *, include_resources: bool = False) -> list[ListingEntry]:
    """Build the note folders shown under ``path``.

    The order of the service is kept, so that pages stay consistent with each
    other.
    """
    entries = []
    for note in notes:
        entry = _folder(
            note.title,
            encode_segment("note", note.guid, note.title, path),
            created=note.created,
            updated=note.updated,
        )
        if include_resources:
            entry = replace(entry, children=tuple(build_note_content(note)))
        entries.append(entry)
    return entries


def filter_files(files: Iterable[ListingEntry], accepted_types: Iterable[str]) -> list[ListingEntry]:
    """Keep the files whose extension is accepted by the host.

    ``*`` accepts everything; extensions are compared case-insensitively and
    may be given with or without the leading dot.
    """
    accepted = {t.lower().lstrip(".") for t in accepted_types}
    if "*" in accepted:
        return list(files)
    kept = []
    for entry in files:
        _, dot, ext = entry.title.rpartition(".")
        if dot and ext.lower() in accepted:
            kept.append(entry)
    return kept
