"""Tests for the command-line interface."""

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
import typer
from typer.testing import CliRunner

from evernote_repository.cli import _build_repository as build_from_environment
from evernote_repository.cli import app
from evernote_repository.errors import RemoteServiceError
from evernote_repository.models.entities import EdamErrorCode
from evernote_repository.preferences import VERSION, JsonPreferenceStore
from evernote_repository.repository import EvernoteRepository
from tests.unit.fakes import FakeNoteStore, FakePreferences

runner = CliRunner()


@pytest.fixture(autouse=True)
def _fake_repository(make_repo: Callable[..., EvernoteRepository]) -> Iterator[EvernoteRepository]:
    """Wire CLI commands to a repository built on fakes."""
    repo = make_repo()
    with patch("evernote_repository.cli._build_repository", return_value=repo):
        yield repo


def test_browse_prints_breadcrumb_and_entries() -> None:
    result = runner.invoke(app, ["browse", "notebooks:"])
    assert result.exit_code == 0, result.output
    assert "Evernote > Notebooks" in result.output
    assert "[+] Projects  path=notebooks:/stack:Projects" in result.output


def test_browse_json_output() -> None:
    result = runner.invoke(app, ["browse", "all:/note:n1|Trip", "--json"])
    assert result.exit_code == 0, result.output
    data = json.loads(result.output)
    assert data["list"][0]["source"] == "resource:r1|note:n1"


def test_browse_reports_service_errors(note_store: FakeNoteStore) -> None:
    note_store.fail_with = RemoteServiceError(EdamErrorCode.PERMISSION_DENIED)
    result = runner.invoke(app, ["browse", "all:"])
    assert result.exit_code == 1
    assert "permission" in result.output


def test_search_lists_matching_notes() -> None:
    result = runner.invoke(app, ["search", "trip"])
    assert result.exit_code == 0, result.output
    assert "Search results" in result.output
    assert "Trip" in result.output


def test_status_when_connected_and_not(preferences: FakePreferences, make_repo: Callable[..., EvernoteRepository]) -> None:
    result = runner.invoke(app, ["status"])
    assert result.exit_code == 0
    assert "Connected" in result.output

    preferences.data.clear()
    with patch("evernote_repository.cli._build_repository", return_value=make_repo()):
        result = runner.invoke(app, ["status"])
    assert result.exit_code == 1
    assert "Not connected" in result.output


def test_login_prints_authorize_url() -> None:
    result = runner.invoke(app, ["login"])
    assert result.exit_code == 0, result.output
    assert "oauth_token=request-token" in result.output


def test_callback_stores_the_token(preferences: FakePreferences) -> None:
    result = runner.invoke(app, ["callback", "request-token", "verifier"])
    assert result.exit_code == 0, result.output
    assert preferences.get("repository_evernote_accesstoken") == "access-token"


def test_logout_prints_new_login_url(preferences: FakePreferences) -> None:
    result = runner.invoke(app, ["logout"])
    assert result.exit_code == 0, result.output
    assert "Logged out." in result.output
    assert preferences.get("repository_evernote_accesstoken") == ""


def test_reference_then_fetch() -> None:
    result = runner.invoke(app, ["reference", "resource:r1|note:n1"])
    assert result.exit_code == 0, result.output
    blob = result.output.strip()
    assert json.loads(blob)["guid"] == "r1"

    result = runner.invoke(app, ["fetch", blob, "--filename", "photo.jpg"])
    assert result.exit_code == 0, result.output
    assert Path(result.output.strip()).read_bytes() == b"jpeg-bytes"


def test_reference_with_bad_source_fails() -> None:
    result = runner.invoke(app, ["reference", "note:n1"])
    assert result.exit_code == 1


def test_upgrade_records_the_version(tmp_path: Path) -> None:
    store = JsonPreferenceStore(tmp_path / "preferences.json")
    store.set("evernote_accesstoken", "tok")

    result = runner.invoke(app, ["upgrade", "--data-dir", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert store.get("repository_evernote_accesstoken") == "tok"
    assert store.get(VERSION) == "2013113000"


def test_missing_settings_exit_before_connecting(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("EVERNOTE_CONSUMER_KEY", raising=False)
    monkeypatch.delenv("EVERNOTE_CONSUMER_SECRET", raising=False)
    with pytest.raises(typer.Exit):
        build_from_environment(None)
