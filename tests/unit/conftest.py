"""Shared test fixtures."""

from collections.abc import Callable
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest

from evernote_repository.cache import MemoryCacheStore
from evernote_repository.config import RepositorySettings
from evernote_repository.models.entities import Note, Notebook, Resource, SavedSearch, Tag
from evernote_repository.models.listing import UserIdentity
from evernote_repository.preferences import ACCESS_TOKEN, NOTE_STORE_URL, USER_ID
from evernote_repository.repository import EvernoteRepository
from tests.unit.fakes import FakeNoteStore, FakeOAuth, FakePreferences, FakeUserStore

USER = UserIdentity(id="7", fullname="Jane Doe")

NOTE_STORE_URL_VALUE = "https://www.evernote.com/shard/s1/notestore"


@pytest.fixture
def note_store() -> FakeNoteStore:
    """A note store holding a small account."""
    store = FakeNoteStore()
    store.notebooks = [
        Notebook("nb1", "Inbox", service_created=1_000_000, service_updated=2_000_000),
        Notebook("nb2", "Work", stack="Projects"),
        Notebook("nb3", "Home", stack="Projects"),
        Notebook("nb4", "10 Archive"),
    ]
    store.tags = [Tag("t1", "banana"), Tag("t2", "Apple"), Tag("t3", "10-item")]
    store.searches = [SavedSearch("s1", "Invoices", "intitle:invoice")]
    photo = Resource("r1", "n1", file_name="photo.jpg", mime="image/jpeg", size=10, body=b"jpeg-bytes")
    inline = Resource("r2", "n1", mime="image/png", size=5)
    invoice = Resource("r3", "n3", file_name="invoice.pdf", mime="application/pdf", size=20, body=b"%PDF")
    store.notes = {
        "n1": Note("n1", "Trip", created=1_000_000, updated=3_000_000, resources=(photo, inline)),
        "n2": Note("n2", "Empty note"),
        "n3": Note("n3", "Invoice 2024", resources=(invoice,)),
    }
    store.resources = {r.guid: r for r in (photo, inline, invoice)}
    return store


@pytest.fixture
def user_store() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture
def oauth() -> FakeOAuth:
    return FakeOAuth()


@pytest.fixture
def preferences() -> FakePreferences:
    """Preferences of a user who already logged in."""
    return FakePreferences(
        {
            ACCESS_TOKEN: "access-token",
            NOTE_STORE_URL: NOTE_STORE_URL_VALUE,
            USER_ID: "42",
        }
    )


@pytest.fixture
def cache_store() -> MemoryCacheStore:
    return MemoryCacheStore()


@pytest.fixture
def http_session() -> MagicMock:
    return MagicMock()


@pytest.fixture
def make_repo(
    tmp_path: Path,
    note_store: FakeNoteStore,
    user_store: FakeUserStore,
    oauth: FakeOAuth,
    preferences: FakePreferences,
    cache_store: MemoryCacheStore,
    http_session: MagicMock,
) -> Callable[..., EvernoteRepository]:
    """Build a repository wired to the fakes, with settings overrides."""

    def _make(**overrides: Any) -> EvernoteRepository:
        settings = RepositorySettings(consumer_key="key", consumer_secret="secret", **overrides)
        return EvernoteRepository(
            settings,
            preferences,
            user=USER,
            note_store_factory=lambda url: note_store,
            user_store=user_store,
            oauth=oauth,
            cache=cache_store,
            session=http_session,
            download_dir=tmp_path / "downloads",
        )

    return _make


@pytest.fixture
def repo(make_repo: Callable[..., EvernoteRepository]) -> EvernoteRepository:
    return make_repo()
