"""Adapters from the Evernote SDK to the repository's protocols.

The SDK speaks Thrift over HTTP; this module only converts its objects to
the repository's records and its exceptions to ``RemoteServiceError``.
"""

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from evernote.api.client import EvernoteClient
from evernote.edam.error.ttypes import EDAMNotFoundException, EDAMSystemException, EDAMUserException
from evernote.edam.notestore import NoteStore
from evernote.edam.notestore.ttypes import NoteFilter as EdamNoteFilter
from evernote.edam.notestore.ttypes import NotesMetadataResultSpec as EdamResultSpec
from evernote.edam.userstore import UserStore
from loguru import logger
from thrift.protocol import TBinaryProtocol
from thrift.transport import THttpClient

from evernote_repository.config import RepositorySettings
from evernote_repository.errors import RemoteServiceError
from evernote_repository.models.entities import (
    EdamErrorCode,
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
from evernote_repository.models.listing import UserIdentity
from evernote_repository.protocols import CacheStoreProtocol, PreferenceStoreProtocol
from evernote_repository.repository import EvernoteRepository


@contextmanager
def _service_errors() -> Iterator[None]:
    try:
        yield
    except EDAMUserException as exc:
        raise RemoteServiceError(exc.errorCode, exc.parameter) from exc
    except EDAMSystemException as exc:
        raise RemoteServiceError(exc.errorCode, exc.message) from exc
    except EDAMNotFoundException as exc:
        raise RemoteServiceError(EdamErrorCode.UNKNOWN, exc.identifier) from exc


def _binary_protocol(url: str) -> Any:
    http_client = THttpClient.THttpClient(url)
    return TBinaryProtocol.TBinaryProtocol(http_client)


def _to_edam_filter(note_filter: NoteFilter) -> EdamNoteFilter:
    return EdamNoteFilter(
        order=int(note_filter.order) if note_filter.order is not None else None,
        ascending=note_filter.ascending,
        words=note_filter.words,
        notebookGuid=note_filter.notebook_guid,
        tagGuids=list(note_filter.tag_guids) or None,
    )


def _to_resource(resource: Any, note_guid: str) -> Resource:
    attributes = resource.attributes
    data = resource.data
    return Resource(
        guid=resource.guid,
        note_guid=resource.noteGuid or note_guid,
        file_name=attributes.fileName if attributes is not None else None,
        mime=resource.mime,
        size=data.size if data is not None else None,
        body=data.body if data is not None else None,
    )


def _to_note(note: Any) -> Note:
    resources = getattr(note, "resources", None) or []
    return Note(
        guid=note.guid,
        title=note.title or "",
        created=note.created,
        updated=note.updated,
        resources=tuple(_to_resource(r, note.guid) for r in resources),
    )


def _to_notes_list(result: Any) -> NotesMetadataList:
    return NotesMetadataList(
        notes=tuple(_to_note(n) for n in result.notes or []),
        total_notes=result.totalNotes or 0,
        start_index=result.startIndex or 0,
    )


class SdkNoteStore:
    """Note store backed by the SDK's Thrift client."""

    def __init__(self, note_store_url: str) -> None:
        logger.debug("Connecting to note store {!r}", note_store_url)
        self.client = NoteStore.Client(_binary_protocol(note_store_url))

    def find_notes_metadata(
        self,
        token: str,
        note_filter: NoteFilter,
        offset: int,
        limit: int,
        result_spec: NotesMetadataResultSpec,
    ) -> NotesMetadataList:
        spec = EdamResultSpec(
            includeTitle=result_spec.include_title,
            includeCreated=result_spec.include_created,
            includeUpdated=result_spec.include_updated,
        )
        with _service_errors():
            result = self.client.findNotesMetadata(token, _to_edam_filter(note_filter), offset, limit, spec)
        return _to_notes_list(result)

    def find_notes(self, token: str, note_filter: NoteFilter, offset: int, limit: int) -> NotesMetadataList:
        with _service_errors():
            result = self.client.findNotes(token, _to_edam_filter(note_filter), offset, limit)
        return _to_notes_list(result)

    def list_notebooks(self, token: str) -> list[Notebook]:
        with _service_errors():
            notebooks = self.client.listNotebooks(token)
        return [
            Notebook(
                guid=nb.guid,
                name=nb.name,
                stack=nb.stack,
                service_created=nb.serviceCreated,
                service_updated=nb.serviceUpdated,
            )
            for nb in notebooks
        ]

    def list_tags(self, token: str) -> list[Tag]:
        with _service_errors():
            tags = self.client.listTags(token)
        return [Tag(guid=t.guid, name=t.name) for t in tags]

    def list_searches(self, token: str) -> list[SavedSearch]:
        with _service_errors():
            searches = self.client.listSearches(token)
        return [SavedSearch(guid=s.guid, name=s.name, query=s.query or "") for s in searches]

    def get_search(self, token: str, guid: str) -> SavedSearch:
        with _service_errors():
            s = self.client.getSearch(token, guid)
        return SavedSearch(guid=s.guid, name=s.name, query=s.query or "")

    def get_note(
        self,
        token: str,
        guid: str,
        *,
        with_content: bool = False,
        with_resources_data: bool = False,
    ) -> Note:
        with _service_errors():
            note = self.client.getNote(token, guid, with_content, with_resources_data, False, False)
        return _to_note(note)

    def get_resource(
        self,
        token: str,
        guid: str,
        *,
        with_data: bool = True,
        with_attributes: bool = True,
    ) -> Resource:
        with _service_errors():
            resource = self.client.getResource(token, guid, with_data, False, with_attributes, False)
        return _to_resource(resource, "")

    def share_note(self, token: str, guid: str) -> str:
        with _service_errors():
            return self.client.shareNote(token, guid)


class SdkUserStore:
    """User store backed by the SDK's Thrift client."""

    def __init__(self, api_url: str) -> None:
        self.client = UserStore.Client(_binary_protocol(f"{api_url}/edam/user"))

    def get_user(self, token: str) -> User:
        with _service_errors():
            u = self.client.getUser(token)
        return User(id=u.id, username=u.username, name=u.name, shard_id=u.shardId)


class SdkOAuthHelper:
    """OAuth handshake performed by the SDK's client."""

    def __init__(self, settings: RepositorySettings) -> None:
        self.callback_url = settings.callback_url
        self.client = EvernoteClient(
            consumer_key=settings.consumer_key,
            consumer_secret=settings.consumer_secret,
            sandbox=settings.use_sandbox_api,
        )

    def request_token(self) -> dict[str, str]:
        token = self.client.get_request_token(self.callback_url)
        return {
            "oauth_token": token["oauth_token"],
            "oauth_token_secret": token["oauth_token_secret"],
            "authorize_url": self.client.get_authorize_url(token),
        }

    def get_access_token(self, token: str, secret: str, verifier: str) -> dict[str, str]:
        access = self.client.get_access_token_dict(token, secret, verifier)
        return {str(k): str(v) for k, v in access.items()}


def build_repository(
    settings: RepositorySettings,
    preferences: PreferenceStoreProtocol,
    user: UserIdentity,
    *,
    cache: CacheStoreProtocol | None = None,
    download_dir: Path | None = None,
) -> EvernoteRepository:
    """Build a repository talking to the real Evernote service."""
    return EvernoteRepository(
        settings,
        preferences,
        user=user,
        note_store_factory=SdkNoteStore,
        user_store=SdkUserStore(settings.api_url),
        oauth=SdkOAuthHelper(settings),
        cache=cache,
        download_dir=download_dir,
    )
