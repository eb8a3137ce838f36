"""Protocols for the collaborators of the Evernote repository.

The note store, user store and OAuth helper come from the Evernote SDK (see
``evernote_repository.sdk``); preferences and cache are owned by the host.
"""

from typing import Any, Protocol, runtime_checkable

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
from evernote_repository.models.listing import (
    Listing,
    LoginPrompt,
    MaterializedFile,
    ReferenceSize,
    ReturnType,
    SessionContext,
)


@runtime_checkable
class NoteStoreProtocol(Protocol):
    """Note store RPC client.

    Service-level failures raise ``RemoteServiceError``; transport failures
    raise whatever the transport raises.
    """

    def find_notes_metadata(
        self,
        token: str,
        note_filter: NoteFilter,
        offset: int,
        limit: int,
        result_spec: NotesMetadataResultSpec,
    ) -> NotesMetadataList: ...

    def find_notes(
        self, token: str, note_filter: NoteFilter, offset: int, limit: int
    ) -> NotesMetadataList: ...

    def list_notebooks(self, token: str) -> list[Notebook]: ...

    def list_tags(self, token: str) -> list[Tag]: ...

    def list_searches(self, token: str) -> list[SavedSearch]: ...

    def get_search(self, token: str, guid: str) -> SavedSearch: ...

    def get_note(
        self,
        token: str,
        guid: str,
        *,
        with_content: bool = False,
        with_resources_data: bool = False,
    ) -> Note: ...

    def get_resource(
        self,
        token: str,
        guid: str,
        *,
        with_data: bool = True,
        with_attributes: bool = True,
    ) -> Resource: ...

    def share_note(self, token: str, guid: str) -> str: ...


@runtime_checkable
class UserStoreProtocol(Protocol):
    def get_user(self, token: str) -> User: ...


@runtime_checkable
class OAuthHelperProtocol(Protocol):
    """OAuth 1.0a helper performing the request/access token exchange."""

    def request_token(self) -> dict[str, str]:
        """Return ``oauth_token``, ``oauth_token_secret`` and ``authorize_url``."""
        ...

    def get_access_token(self, token: str, secret: str, verifier: str) -> dict[str, str]:
        """Return ``oauth_token``, ``edam_noteStoreUrl`` and ``edam_userId``."""
        ...


@runtime_checkable
class PreferenceStoreProtocol(Protocol):
    """Per-user key/value preferences persisted by the host."""

    def get(self, name: str, default: str | None = None) -> str | None: ...

    def set(self, name: str, value: str) -> None: ...

    def unset(self, name: str) -> None: ...


@runtime_checkable
class CacheStoreProtocol(Protocol):
    """Host cache service. ``get`` returns None on a miss."""

    def get(self, key: str) -> Any | None: ...

    def set(self, key: str, value: Any) -> None: ...

    def purge(self) -> None: ...


@runtime_checkable
class BrowsableSource(Protocol):
    """What the file picker host expects from a repository."""

    def check_login(self) -> bool: ...

    def login(self) -> LoginPrompt: ...

    def logout(self) -> LoginPrompt: ...

    def get_listing(
        self, path: str = "", page: int = 1, session: SessionContext | None = None
    ) -> Listing: ...

    def search(self, text: str, page: int = 0) -> Listing: ...

    def get_file(self, reference: str, filename: str = "") -> MaterializedFile: ...

    def get_file_reference(self, source: str, *, use_file_reference: bool = False) -> str: ...

    def get_file_by_reference(self, reference: str) -> ReferenceSize: ...

    def send_file(self, reference: str) -> str: ...

    def supported_return_types(self) -> ReturnType: ...
