"""The Evernote repository, as plugged into a file picker host."""

import math
import tempfile
import uuid
from collections.abc import Callable
from dataclasses import replace
from pathlib import Path

import requests
from loguru import logger

from evernote_repository.cache import RequestCache, cache_key
from evernote_repository.config import (
    ITEMS_PER_PAGE,
    LOGOUT_URL,
    MANAGE_URL,
    SEARCH_MAX_RESULTS,
    RepositorySettings,
    apply_ssl_compatibility,
)
from evernote_repository.core.download import FileMaterializer
from evernote_repository.core.listing.builder import (
    build_note_content,
    build_notebooks_list,
    build_notes_list,
    build_root_list,
    build_saved_search_list,
    build_tags_list,
    filter_files,
)
from evernote_repository.core.path.codec import (
    build_breadcrumb,
    decode_segment,
    encode_segment,
    split_path,
)
from evernote_repository.core.reference import make_file_reference
from evernote_repository.core.remote.client import NotesClient
from evernote_repository.errors import AuthError, ConfigError, DownloadError
from evernote_repository.models.entities import NoteFilter, NoteSortOrder, NotesMetadataList
from evernote_repository.models.listing import (
    CachedListing,
    FileReference,
    Listing,
    ListingEntry,
    LoginPrompt,
    MaterializedFile,
    ReferenceSize,
    ReturnType,
    Segment,
    SessionContext,
    UserIdentity,
)
from evernote_repository.preferences import ACCESS_TOKEN, NOTE_STORE_URL, TOKEN_SECRET, USER_ID
from evernote_repository.protocols import (
    CacheStoreProtocol,
    NoteStoreProtocol,
    OAuthHelperProtocol,
    PreferenceStoreProtocol,
    UserStoreProtocol,
)
from evernote_repository.strings import get_string

# Path browsed when the file picker opens.
DEFAULT_PATH = "all:"


class EvernoteRepository:
    """Browse, search and pick attachments of an Evernote account.

    The access token and note store URL are read from the user preferences
    once, when the repository is built. Collaborators are injected: the note
    store is built by ``note_store_factory`` from the stored URL, the rest is
    passed as is.

    Without ``download_dir``, downloads land in one temporary directory
    created on first use and kept for the life of the repository. The caller
    removes it when done (see ``temp_dir``).
    """

    def __init__(
        self,
        settings: RepositorySettings,
        preferences: PreferenceStoreProtocol,
        *,
        user: UserIdentity,
        note_store_factory: Callable[[str], NoteStoreProtocol],
        user_store: UserStoreProtocol | None = None,
        oauth: OAuthHelperProtocol | None = None,
        cache: CacheStoreProtocol | None = None,
        session: requests.Session | None = None,
        download_dir: Path | None = None,
    ) -> None:
        self.settings = settings
        self.preferences = preferences
        self.user = user
        self.oauth = oauth
        self.cache = RequestCache(cache)
        self.download_dir = download_dir
        self.temp_dir: Path | None = None
        self.access_token = preferences.get(ACCESS_TOKEN) or ""
        self.note_store_url = preferences.get(NOTE_STORE_URL) or ""
        self._note_store_factory = note_store_factory
        self._user_store = user_store
        self._session = session
        self._connect()

    def _connect(self) -> None:
        def factory(url: str) -> NoteStoreProtocol:
            return self._note_store_factory(
                apply_ssl_compatibility(url, enabled=self.settings.ssl_compatibility_mode)
            )

        self.client = NotesClient(
            self.access_token,
            self.note_store_url,
            note_store_factory=factory,
            user_store=self._user_store,
            notes_with_attachments_only=self.settings.notes_with_attachments_only,
        )
        self.materializer = FileMaterializer(self.client, session=self._session)

    # --- Authentication ---

    def check_login(self) -> bool:
        return bool(self.access_token) and bool(self.note_store_url)

    def _oauth(self) -> OAuthHelperProtocol:
        if self.oauth is None:
            msg = "No OAuth helper configured for the Evernote repository"
            raise ConfigError(msg)
        return self.oauth

    def login(self) -> LoginPrompt:
        """Start the OAuth handshake, returning the popup to open."""
        oauth = self._oauth()
        try:
            result = oauth.request_token()
        except Exception as exc:
            raise AuthError(get_string("requesttokenerror")) from exc
        self.preferences.set(TOKEN_SECRET, result["oauth_token_secret"])
        return LoginPrompt(url=result["authorize_url"])

    def callback(self, oauth_token: str, oauth_verifier: str) -> None:
        """Finish the OAuth handshake and store the access token.

        The stored token is used by repositories built afterwards.
        """
        secret = self.preferences.get(TOKEN_SECRET, "") or ""
        access = self._oauth().get_access_token(oauth_token, secret, oauth_verifier)
        self.preferences.set(ACCESS_TOKEN, access["oauth_token"])
        self.preferences.set(NOTE_STORE_URL, access["edam_noteStoreUrl"])
        self.preferences.set(USER_ID, str(access["edam_userId"]))
        logger.info("Evernote account of user {} connected", self.user.id)

    def logout(self) -> LoginPrompt:
        """Forget the user's token and start a new login."""
        self.cache.purge()
        for name in (ACCESS_TOKEN, NOTE_STORE_URL, USER_ID):
            self.preferences.set(name, "")
        self.access_token = ""
        self.note_store_url = ""
        self._connect()
        return self.login()

    # --- Browsing ---

    def _note_pages(self, result: NotesMetadataList) -> int:
        return math.ceil(result.total_notes / ITEMS_PER_PAGE)

    def _browse_notes(self, note_filter: NoteFilter, path: str, offset: int) -> CachedListing:
        result = self.client.find_notes_metadata(note_filter, offset, ITEMS_PER_PAGE).unwrap()
        return CachedListing(
            folders=tuple(build_notes_list(result.notes, path)),
            pages=self._note_pages(result),
        )

    def _browse(self, seg: Segment, path: str, parent: str, offset: int) -> CachedListing:
        mode = seg.mode
        if mode == "all":
            return self._browse_notes(NoteFilter(), path, offset)
        if mode == "tags":
            if not seg.id:
                tags = self.client.list_tags().unwrap()
                return CachedListing(folders=tuple(build_tags_list(tags, parent)))
            return self._browse_notes(NoteFilter(tag_guids=[seg.id]), path, offset)
        if mode in ("notebooks", "stack"):
            notebooks = self.client.list_notebooks().unwrap()
            stack = seg.id if mode == "stack" else ""
            return CachedListing(folders=tuple(build_notebooks_list(notebooks, path, stack)))
        if mode == "notebook":
            return self._browse_notes(NoteFilter(notebook_guid=seg.id), path, offset)
        if mode == "searchs":
            if not seg.id:
                searches = self.client.list_searches().unwrap()
                return CachedListing(folders=tuple(build_saved_search_list(searches, parent)))
            saved = self.client.get_search(seg.id).unwrap()
            return self._browse_notes(NoteFilter(words=saved.query), path, offset)
        if mode == "note":
            note = self.client.get_note(seg.id).unwrap()
            return CachedListing(files=tuple(build_note_content(note)))
        return CachedListing(folders=tuple(build_root_list()))

    def _listing(self, path: str, entries: list[ListingEntry], *, dynload: bool = True) -> Listing:
        return Listing(
            path=build_breadcrumb(path),
            entries=tuple(entries),
            manage=MANAGE_URL,
            logout_url=LOGOUT_URL,
            dynload=dynload,
        )

    def get_listing(self, path: str = "", page: int = 1, session: SessionContext | None = None) -> Listing:
        """Browse the content found at ``path``.

        When paging (``page`` > 1), the path browsed is the one kept in
        ``session`` by the first page; the first page stores it there.
        """
        path = path or DEFAULT_PATH
        page = page or 1
        if session is not None:
            if page > 1 and session.path:
                path = session.path
            else:
                session.path = path

        parent, last = split_path(path)
        seg = decode_segment(last)
        if seg.mode == "mysearch":
            return self.search(seg.id, 0)

        key = cache_key(last, page)
        cached = self.cache.get(key)
        if cached is None:
            offset = (page - 1) * ITEMS_PER_PAGE
            cached = self._browse(seg, path, parent, offset)
            # Cached before filtering, the accepted types vary between callers.
            self.cache.set(key, cached)

        files = filter_files(cached.files, self.settings.accepted_types)
        listing = self._listing(path, [*cached.folders, *files])
        if cached.pages and self.settings.enable_paging:
            listing = replace(listing, page=page, pages=cached.pages)
        return listing

    def search(self, text: str, page: int = 0) -> Listing:
        """Search the notes matching ``text``.

        With dynamic loading, only note metadata is fetched and the user opens
        the notes to see their attachments; otherwise the attachments are
        listed directly under each note.
        """
        path = encode_segment("mysearch", text)
        note_filter = NoteFilter(words=text, order=NoteSortOrder.TITLE, ascending=True)
        if self.settings.search_dynload:
            result = self.client.find_notes_metadata(note_filter, 0, SEARCH_MAX_RESULTS).unwrap()
            entries = build_notes_list(result.notes, path)
        else:
            result = self.client.find_notes(note_filter, 0, SEARCH_MAX_RESULTS).unwrap()
            entries = build_notes_list(result.notes, "", include_resources=True)
        return self._listing(path, entries, dynload=self.settings.search_dynload)

    # --- Files ---

    def _prepare_file(self, filename: str) -> Path:
        if self.download_dir is not None:
            directory = self.download_dir
            directory.mkdir(parents=True, exist_ok=True)
        else:
            if self.temp_dir is None:
                self.temp_dir = Path(tempfile.mkdtemp(prefix="evernote-"))
            directory = self.temp_dir
        name = Path(filename).name if filename else uuid.uuid4().hex
        return directory / name

    def get_file_reference(self, source: str, *, use_file_reference: bool = False) -> str:
        """Create the reference blob of a picked file.

        With ``use_file_reference`` the note is shared, so that the host can
        refresh the file later on without the user's token.
        """
        reference = make_file_reference(
            source,
            self.user,
            client=self.client,
            api_url=self.settings.api_url,
            share=use_file_reference,
        )
        return reference.to_blob()

    def get_file(self, reference: str, filename: str = "") -> MaterializedFile:
        """Download the referenced file to a local path."""
        ref = FileReference.from_blob(reference)
        return self.materializer.materialize(ref, self._prepare_file(filename))

    def get_file_by_reference(self, reference: str) -> ReferenceSize:
        """Size of a referenced file, used to synchronise references."""
        return self.materializer.reference_size(FileReference.from_blob(reference))

    def send_file(self, reference: str) -> str:
        """URL the host redirects to in order to serve a referenced file."""
        ref = FileReference.from_blob(reference)
        if not ref.share_url:
            raise DownloadError(get_string("cannotdownload"))
        return ref.share_url

    def get_reference_details(self, reference: str, file_status: int = 0) -> str:
        if file_status != 0:
            return get_string("lostsource", source="")
        ref = FileReference.from_blob(reference)
        return get_string("referencedetails", name=get_string("pluginname"), fullname=ref.owner_display_name)

    def get_file_source_info(self, source: str) -> str:
        return get_string("sourceinfo", fullname=self.user.fullname, source=source)

    def supported_return_types(self) -> ReturnType:
        return ReturnType.INTERNAL | ReturnType.REFERENCE
