"""Fake implementations for testing the Evernote repository."""

from typing import Any

from evernote_repository.errors import RemoteServiceError
from evernote_repository.models.entities import (
    Note,
    NoteFilter,
    Notebook,
    NotesMetadataList,
    NotesMetadataResultSpec,
    Resource,
    SavedSearch,
    Tag,
    User,
)


class FakeNoteStore:
    """In-memory fake for the SDK note store.

    Holds notebooks, tags, searches and notes, and records all calls for
    assertions. Set ``fail_with`` to make every call raise a service error.
    """

    def __init__(self, url: str = "https://www.evernote.com/shard/s1/notestore") -> None:
        self.url = url
        self.notebooks: list[Notebook] = []
        self.tags: list[Tag] = []
        self.searches: list[SavedSearch] = []
        self.notes: dict[str, Note] = {}
        self.resources: dict[str, Resource] = {}
        self.total_notes: int | None = None
        self.share_keys: dict[str, str] = {}
        self.fail_with: RemoteServiceError | None = None
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _record(self, name: str, *args: Any) -> None:
        self.calls.append((name, args))
        if self.fail_with is not None:
            raise self.fail_with

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    def _matching(self, note_filter: NoteFilter) -> list[Note]:
        notes = list(self.notes.values())
        if note_filter.words == "resource:*":
            notes = [n for n in notes if n.resources]
        return notes

    def find_notes_metadata(
        self,
        token: str,
        note_filter: NoteFilter,
        offset: int,
        limit: int,
        result_spec: NotesMetadataResultSpec,
    ) -> NotesMetadataList:
        self._record("find_notes_metadata", token, note_filter, offset, limit, result_spec)
        notes = self._matching(note_filter)
        page = tuple(Note(n.guid, n.title, n.created, n.updated) for n in notes[offset : offset + limit])
        total = self.total_notes if self.total_notes is not None else len(notes)
        return NotesMetadataList(notes=page, total_notes=total, start_index=offset)

    def find_notes(self, token: str, note_filter: NoteFilter, offset: int, limit: int) -> NotesMetadataList:
        self._record("find_notes", token, note_filter, offset, limit)
        notes = self._matching(note_filter)
        return NotesMetadataList(notes=tuple(notes[offset : offset + limit]), total_notes=len(notes))

    def list_notebooks(self, token: str) -> list[Notebook]:
        self._record("list_notebooks", token)
        return list(self.notebooks)

    def list_tags(self, token: str) -> list[Tag]:
        self._record("list_tags", token)
        return list(self.tags)

    def list_searches(self, token: str) -> list[SavedSearch]:
        self._record("list_searches", token)
        return list(self.searches)

    def get_search(self, token: str, guid: str) -> SavedSearch:
        self._record("get_search", token, guid)
        return next(s for s in self.searches if s.guid == guid)

    def get_note(
        self,
        token: str,
        guid: str,
        *,
        with_content: bool = False,
        with_resources_data: bool = False,
    ) -> Note:
        self._record("get_note", token, guid)
        return self.notes[guid]

    def get_resource(
        self,
        token: str,
        guid: str,
        *,
        with_data: bool = True,
        with_attributes: bool = True,
    ) -> Resource:
        self._record("get_resource", token, guid)
        return self.resources[guid]

    def share_note(self, token: str, guid: str) -> str:
        self._record("share_note", token, guid)
        return self.share_keys.get(guid, f"key-{guid}")


class FakeUserStore:
    """In-memory fake for the SDK user store."""

    def __init__(self, user: User | None = None) -> None:
        self.user = user or User(id=42, username="alice", name="Alice", shard_id="s1")
        self.calls: list[str] = []

    def get_user(self, token: str) -> User:
        self.calls.append(token)
        return self.user


class FakeOAuth:
    """Fake OAuth helper returning canned tokens.

    Set ``fail`` to make the request token step raise.
    """

    def __init__(self) -> None:
        self.fail = False
        self.access_calls: list[tuple[str, str, str]] = []

    def request_token(self) -> dict[str, str]:
        if self.fail:
            msg = "OAuth server unreachable"
            raise ConnectionError(msg)
        return {
            "oauth_token": "request-token",
            "oauth_token_secret": "request-secret",
            "authorize_url": "https://sandbox.evernote.com/OAuth.action?oauth_token=request-token",
        }

    def get_access_token(self, token: str, secret: str, verifier: str) -> dict[str, str]:
        self.access_calls.append((token, secret, verifier))
        return {
            "oauth_token": "access-token",
            "edam_noteStoreUrl": "https://sandbox.evernote.com/shard/s1/notestore",
            "edam_userId": "42",
        }


class FakePreferences:
    """In-memory fake for the host's user preferences."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.data: dict[str, str] = dict(initial or {})

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.data.get(name, default)

    def set(self, name: str, value: str) -> None:
        self.data[name] = value

    def unset(self, name: str) -> None:
        self.data.pop(name, None)
