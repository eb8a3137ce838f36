"""Wrappers around the Evernote note and user stores.

Each wrapper returns a ``CallResult``: either the value, or the error the
service reported, translated into the repository's error types. Transport
failures are not caught and propagate unchanged.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from loguru import logger

from evernote_repository.errors import (
    AuthError,
    ConfigError,
    PermissionDeniedError,
    RemoteServiceError,
    RepositoryError,
)
from evernote_repository.models.entities import (
    EdamErrorCode,
    Note,
    NoteFilter,
    Notebook,
    NoteSortOrder,
    NotesMetadataList,
    NotesMetadataResultSpec,
    Resource,
    SavedSearch,
    Tag,
    User,
)
from evernote_repository.protocols import NoteStoreProtocol, UserStoreProtocol
from evernote_repository.strings import get_string

T = TypeVar("T")

# Query matching the notes that have at least one attachment.
ATTACHMENTS_QUERY = "resource:*"

_AUTH_ERROR_CODES = {EdamErrorCode.INVALID_AUTH, EdamErrorCode.AUTH_EXPIRED}


@dataclass(frozen=True)
class CallResult(Generic[T]):
    """Outcome of a remote call: a value or an error, never both."""

    value: T | None = None
    error: RepositoryError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T:
        """Return the value, or raise the error."""
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]


def translate_error(exc: RemoteServiceError, *, searching: bool = False) -> RepositoryError:
    """Map a service error onto the error the user should see.

    A denied permission only gets the "cannot access those notes" message
    when it answers a note search.
    """
    if searching and exc.error_code == EdamErrorCode.PERMISSION_DENIED:
        return PermissionDeniedError(get_string("nopermissiontoaccessnotes"))
    if exc.error_code in _AUTH_ERROR_CODES:
        return AuthError(f"Evernote rejected the access token ({exc.error_code})")
    return exc


class NotesClient:
    """Evernote access on behalf of one user.

    The note store is built lazily from ``note_store_url`` the first time it
    is needed, and kept for the lifetime of the client.
    """

    def __init__(
        self,
        access_token: str | None,
        note_store_url: str | None,
        *,
        note_store_factory: Callable[[str], NoteStoreProtocol],
        user_store: UserStoreProtocol | None = None,
        notes_with_attachments_only: bool = True,
    ) -> None:
        self.access_token = access_token or ""
        self.note_store_url = note_store_url or ""
        self.notes_with_attachments_only = notes_with_attachments_only
        self._note_store_factory = note_store_factory
        self._note_store: NoteStoreProtocol | None = None
        self._user_store = user_store

    @property
    def note_store(self) -> NoteStoreProtocol:
        if self._note_store is None:
            if not self.note_store_url:
                msg = "No note store URL, the user is not logged in"
                raise AuthError(msg)
            self._note_store = self._note_store_factory(self.note_store_url)
        return self._note_store

    def _call(self, name: str, func: Callable[[], T], *, searching: bool = False) -> CallResult[T]:
        if not self.access_token:
            return CallResult(error=AuthError(f"Cannot call {name} without an access token"))
        logger.debug("Evernote call: {}", name)
        try:
            return CallResult(value=func())
        except RemoteServiceError as exc:
            logger.debug("Evernote call {} failed with code {}", name, exc.error_code)
            return CallResult(error=translate_error(exc, searching=searching))

    def find_notes_metadata(self, note_filter: NoteFilter, offset: int, limit: int) -> CallResult[NotesMetadataList]:
        """Find metadata of the notes matching ``note_filter``.

        Notes are sorted by title unless the filter says otherwise, and
        restricted to notes with attachments when no words are given.
        """
        if note_filter.order is None:
            note_filter.order = NoteSortOrder.TITLE
            note_filter.ascending = True
        if self.notes_with_attachments_only and note_filter.words is None:
            note_filter.words = ATTACHMENTS_QUERY
        spec = NotesMetadataResultSpec(include_title=True, include_created=True, include_updated=True)
        return self._call(
            "findNotesMetadata",
            lambda: self.note_store.find_notes_metadata(self.access_token, note_filter, offset, limit, spec),
            searching=True,
        )

    def find_notes(self, note_filter: NoteFilter, offset: int, limit: int) -> CallResult[NotesMetadataList]:
        return self._call(
            "findNotes",
            lambda: self.note_store.find_notes(self.access_token, note_filter, offset, limit),
            searching=True,
        )

    def list_notebooks(self) -> CallResult[list[Notebook]]:
        return self._call("listNotebooks", lambda: self.note_store.list_notebooks(self.access_token))

    def list_tags(self) -> CallResult[list[Tag]]:
        return self._call("listTags", lambda: self.note_store.list_tags(self.access_token))

    def list_searches(self) -> CallResult[list[SavedSearch]]:
        return self._call("listSearches", lambda: self.note_store.list_searches(self.access_token))

    def get_search(self, guid: str) -> CallResult[SavedSearch]:
        return self._call("getSearch", lambda: self.note_store.get_search(self.access_token, guid))

    def get_note(self, guid: str) -> CallResult[Note]:
        """Get a note with its attachments' metadata, without their data."""
        return self._call(
            "getNote",
            lambda: self.note_store.get_note(
                self.access_token, guid, with_content=False, with_resources_data=False
            ),
        )

    def get_resource(self, guid: str) -> CallResult[Resource]:
        """Get an attachment with its data."""
        return self._call(
            "getResource",
            lambda: self.note_store.get_resource(self.access_token, guid, with_data=True, with_attributes=True),
        )

    def share_note(self, guid: str) -> CallResult[str]:
        """Share a note publicly, returning its share key."""
        return self._call("shareNote", lambda: self.note_store.share_note(self.access_token, guid))

    def get_user(self) -> CallResult[User]:
        if self._user_store is None:
            return CallResult(error=ConfigError("No user store configured"))
        user_store = self._user_store
        return self._call("getUser", lambda: user_store.get_user(self.access_token))
