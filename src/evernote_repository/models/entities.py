"""Records for the Evernote entities the repository reads."""

from dataclasses import dataclass, field
from enum import IntEnum


class NoteSortOrder(IntEnum):
    """Sort orders accepted by the note store search calls."""

    CREATED = 1
    UPDATED = 2
    RELEVANCE = 3
    UPDATE_SEQUENCE_NUMBER = 4
    TITLE = 5


class EdamErrorCode(IntEnum):
    """Error codes carried by EDAM user and system exceptions."""

    UNKNOWN = 1
    BAD_DATA_FORMAT = 2
    PERMISSION_DENIED = 3
    INTERNAL_ERROR = 4
    DATA_REQUIRED = 5
    LIMIT_REACHED = 6
    QUOTA_REACHED = 7
    INVALID_AUTH = 8
    AUTH_EXPIRED = 9
    DATA_CONFLICT = 10
    ENML_VALIDATION = 11
    SHARD_UNAVAILABLE = 12
    LEN_TOO_SHORT = 13
    LEN_TOO_LONG = 14
    TOO_FEW = 15
    TOO_MANY = 16
    UNSUPPORTED_OPERATION = 17
    TAKEN_DOWN = 18
    RATE_LIMIT_REACHED = 19


@dataclass(frozen=True)
class Notebook:
    """A notebook, optionally grouped in a stack."""

    guid: str
    name: str
    stack: str | None = None
    service_created: int | None = None
    service_updated: int | None = None


@dataclass(frozen=True)
class Tag:
    guid: str
    name: str


@dataclass(frozen=True)
class SavedSearch:
    guid: str
    name: str
    query: str = ""


@dataclass(frozen=True)
class Resource:
    """A binary attachment embedded in a note."""

    guid: str
    note_guid: str
    file_name: str | None = None
    mime: str | None = None
    size: int | None = None
    body: bytes | None = None


@dataclass(frozen=True)
class Note:
    """A note, or the metadata of a note when resources are not loaded.

    Timestamps are epoch milliseconds, as returned by the service.
    """

    guid: str
    title: str
    created: int | None = None
    updated: int | None = None
    resources: tuple[Resource, ...] = ()


@dataclass(frozen=True)
class NotesMetadataList:
    """One page of a note search."""

    notes: tuple[Note, ...]
    total_notes: int
    start_index: int = 0


@dataclass(frozen=True)
class User:
    id: int
    username: str | None = None
    name: str | None = None
    shard_id: str | None = None


@dataclass
class NoteFilter:
    """Search filter for the note store.

    Mutable on purpose: the search wrapper fills in the default order and
    the attachments-only query before sending it.
    """

    words: str | None = None
    notebook_guid: str | None = None
    tag_guids: list[str] = field(default_factory=list)
    order: NoteSortOrder | None = None
    ascending: bool | None = None


@dataclass(frozen=True)
class NotesMetadataResultSpec:
    include_title: bool = True
    include_created: bool = True
    include_updated: bool = True
