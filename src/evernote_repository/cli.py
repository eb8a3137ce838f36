"""CLI for the Evernote repository (login, browse, pick files, MCP server)."""

import json
from pathlib import Path
from typing import Annotated

import typer
from loguru import logger

from evernote_repository.cache import MemoryCacheStore
from evernote_repository.config import load_settings, resolve_data_directory
from evernote_repository.errors import ConfigError, RepositoryError
from evernote_repository.logging_config import configure_logging
from evernote_repository.models.listing import Listing, SessionContext
from evernote_repository.preferences import VERSION, JsonPreferenceStore, local_user, upgrade_preferences
from evernote_repository.repository import EvernoteRepository

app = typer.Typer(help="Evernote repository: browse your notes and pick their attachments.")

DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", "-d", help="Directory holding the stored preferences"),
]


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    configure_logging(verbose=verbose)


def _preferences(data_dir: Path | None) -> JsonPreferenceStore:
    return JsonPreferenceStore((data_dir or resolve_data_directory()) / "preferences.json")


def _build_repository(data_dir: Path | None) -> EvernoteRepository:
    """Build the repository from the environment, exiting on bad settings."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        logger.error("{}", exc)
        raise typer.Exit(1) from exc

    from evernote_repository.sdk import build_repository

    root = data_dir or resolve_data_directory()
    preferences = _preferences(root)
    return build_repository(
        settings,
        preferences,
        local_user(preferences),
        cache=MemoryCacheStore(),
        download_dir=root / "downloads",
    )


def _fail(exc: RepositoryError) -> typer.Exit:
    typer.echo(f"Error: {exc}", err=True)
    logger.debug("{!r}", exc)
    return typer.Exit(1)


def _print_listing(listing: Listing, *, output_json: bool) -> None:
    if output_json:
        typer.echo(json.dumps(listing.to_dict(), indent=2))
        return
    typer.echo(" > ".join(c.name for c in listing.path))
    if listing.page is not None:
        typer.echo(f"Page {listing.page} of {listing.pages}")
    typer.echo()
    for entry in listing.entries:
        if entry.is_folder:
            typer.echo(f"  [+] {entry.title}  path={entry.path}")
            for child in entry.children or ():
                typer.echo(f"        {child.title}  source={child.source}")
        else:
            size = f"  ({entry.size} bytes)" if entry.size is not None else ""
            typer.echo(f"      {entry.title}{size}  source={entry.source}")


@app.command()
def login(data_dir: DataDirOption = None) -> None:
    """Start the OAuth handshake and print the authorization URL."""
    repo = _build_repository(data_dir)
    try:
        prompt = repo.login()
    except RepositoryError as exc:
        raise _fail(exc) from exc
    typer.echo(f"Open this URL to authorize access: {prompt.url}")


@app.command()
def callback(
    oauth_token: str = typer.Argument(..., help="oauth_token received by the callback URL"),
    oauth_verifier: str = typer.Argument(..., help="oauth_verifier received by the callback URL"),
    data_dir: DataDirOption = None,
) -> None:
    """Finish the OAuth handshake and store the access token."""
    repo = _build_repository(data_dir)
    try:
        repo.callback(oauth_token, oauth_verifier)
    except RepositoryError as exc:
        raise _fail(exc) from exc
    typer.echo("Evernote account connected.")


@app.command()
def logout(data_dir: DataDirOption = None) -> None:
    """Forget the stored token and print a new authorization URL."""
    repo = _build_repository(data_dir)
    try:
        prompt = repo.logout()
    except RepositoryError as exc:
        raise _fail(exc) from exc
    typer.echo("Logged out.")
    typer.echo(f"Open this URL to log in again: {prompt.url}")


@app.command()
def status(data_dir: DataDirOption = None) -> None:
    """Tell whether an Evernote account is connected."""
    repo = _build_repository(data_dir)
    if repo.check_login():
        typer.echo(f"Connected (note store: {repo.note_store_url})")
    else:
        typer.echo("Not connected. Run 'login' first.")
        raise typer.Exit(1)


@app.command()
def browse(
    path: str = typer.Argument("", help="Browse path, e.g. 'notebooks:' (default: all notes)"),
    page: int = typer.Option(1, "--page", "-p", help="Page of the listing"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """List the folders and attachments found at a path."""
    repo = _build_repository(data_dir)
    try:
        listing = repo.get_listing(path, page, SessionContext())
    except RepositoryError as exc:
        raise _fail(exc) from exc
    _print_listing(listing, output_json=output_json)


@app.command()
def search(
    text: str = typer.Argument(..., help="Evernote search grammar"),
    output_json: bool = typer.Option(False, "--json", "-j", help="Output as JSON"),
    data_dir: DataDirOption = None,
) -> None:
    """Search notes."""
    repo = _build_repository(data_dir)
    try:
        listing = repo.search(text)
    except RepositoryError as exc:
        raise _fail(exc) from exc
    _print_listing(listing, output_json=output_json)


@app.command()
def reference(
    source: str = typer.Argument(..., help="Source of a listed attachment"),
    share: bool = typer.Option(False, "--share", "-s", help="Share the note and keep its public URL"),
    data_dir: DataDirOption = None,
) -> None:
    """Print the reference blob of an attachment."""
    repo = _build_repository(data_dir)
    try:
        blob = repo.get_file_reference(source, use_file_reference=share)
    except RepositoryError as exc:
        raise _fail(exc) from exc
    typer.echo(blob)


@app.command()
def fetch(
    blob: str = typer.Argument(..., help="Reference blob printed by 'reference'"),
    filename: str = typer.Option("", "--filename", "-f", help="Name of the local file"),
    data_dir: DataDirOption = None,
) -> None:
    """Download a referenced attachment."""
    repo = _build_repository(data_dir)
    try:
        result = repo.get_file(blob, filename)
    except RepositoryError as exc:
        raise _fail(exc) from exc
    typer.echo(str(result.path))


@app.command()
def size(
    blob: str = typer.Argument(..., help="Reference blob holding a share URL"),
    data_dir: DataDirOption = None,
) -> None:
    """Print the size announced by the share URL of a reference."""
    repo = _build_repository(data_dir)
    try:
        result = repo.get_file_by_reference(blob)
    except RepositoryError as exc:
        raise _fail(exc) from exc
    typer.echo(f"{result.filepath}: {result.filesize if result.filesize is not None else 'unknown'}")


@app.command()
def upgrade(
    from_version: Annotated[
        int | None,
        typer.Option("--from-version", help="Version to upgrade from (default: stored version)"),
    ] = None,
    data_dir: DataDirOption = None,
) -> None:
    """Upgrade the stored preferences to the current layout."""
    preferences = _preferences(data_dir)
    old = from_version if from_version is not None else int(preferences.get(VERSION) or 0)
    new = upgrade_preferences(preferences, old)
    preferences.set(VERSION, str(new))
    typer.echo(f"Preferences at version {new}")


@app.command()
def serve() -> None:
    """Start the MCP server (stdio transport)."""
    from evernote_repository.mcp.server import run_mcp_server

    run_mcp_server()
