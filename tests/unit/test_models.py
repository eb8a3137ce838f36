"""Tests for the records exchanged with the host."""

import dataclasses

import pytest

from evernote_repository.errors import AuthError, RemoteServiceError, RepositoryError
from evernote_repository.models.entities import Notebook
from evernote_repository.models.listing import Breadcrumb, Listing, ListingEntry, LoginPrompt
from evernote_repository.strings import get_string


def test_entities_are_frozen() -> None:
    notebook = Notebook("nb1", "Inbox")
    with pytest.raises(dataclasses.FrozenInstanceError):
        notebook.name = "Other"  # type: ignore[misc]


def test_listing_to_dict_without_paging() -> None:
    listing = Listing(
        path=(Breadcrumb("Evernote", "root:"),),
        entries=(ListingEntry(title="Inbox", thumbnail="f/folder-64", path="notebook:nb1|Inbox"),),
        manage="https://manage",
        logout_url="https://logout",
    )
    data = listing.to_dict()
    assert data == {
        "path": [{"name": "Evernote", "path": "root:"}],
        "list": [
            {
                "title": "Inbox",
                "thumbnail": "f/folder-64",
                "thumbnail_height": 64,
                "thumbnail_width": 64,
                "path": "notebook:nb1|Inbox",
                "children": [],
            }
        ],
        "manage": "https://manage",
        "logouturl": "https://logout",
        "dynload": True,
    }


def test_listing_to_dict_with_paging() -> None:
    listing = Listing(path=(), entries=(), manage="", logout_url="", page=2, pages=5)
    data = listing.to_dict()
    assert (data["page"], data["pages"]) == (2, 5)


def test_login_prompt_is_a_popup() -> None:
    assert LoginPrompt(url="https://auth").type == "popup"


def test_errors_carry_string_identifiers() -> None:
    assert AuthError("x").identifier == "requesttokenerror"
    assert RepositoryError("x", identifier="sharingerror").identifier == "sharingerror"
    assert RepositoryError("x").identifier is None
    assert RemoteServiceError(19, "60").parameter == "60"


def test_get_string_formats_and_flags_unknown_ids() -> None:
    assert get_string("sourceinfo", fullname="Jane", source="s") == "Evernote (Jane): s"
    assert get_string("nosuchstring") == "[[nosuchstring]]"
