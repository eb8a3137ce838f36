"""MCP server exposing Evernote browse, search and attachment tools."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any

from loguru import logger
from mcp.server.fastmcp import Context, FastMCP

from evernote_repository.cache import MemoryCacheStore
from evernote_repository.config import load_settings, resolve_data_directory
from evernote_repository.errors import RepositoryError
from evernote_repository.models.listing import SessionContext
from evernote_repository.preferences import JsonPreferenceStore, local_user
from evernote_repository.repository import EvernoteRepository


def _error(exc: RepositoryError, **extra: Any) -> dict[str, Any]:
    logger.debug("Tool call failed: {!r}", exc)
    result: dict[str, Any] = {"error": str(exc)}
    if exc.identifier:
        result["error_id"] = exc.identifier
    result.update(extra)
    return result


# --- Core functions (testable without MCP context) ---


def evernote_browse(
    repo: EvernoteRepository,
    *,
    path: str = "",
    page: int = 1,
    session: SessionContext | None = None,
) -> dict[str, Any]:
    """Browse the folders and attachments found at a path.

    Args:
        path: Browse path, e.g. "notebooks:" or "tags:". Empty for all notes.
        page: Page of note listings, starting at 1.
        session: Keeps the browsed path between two pages.
    """
    if not repo.check_login():
        return {"error": "Not connected to Evernote. Run the 'login' command first.", "list": []}
    try:
        listing = repo.get_listing(path, page, session)
    except RepositoryError as exc:
        return _error(exc, list=[])
    return listing.to_dict()


def evernote_search(repo: EvernoteRepository, *, text: str) -> dict[str, Any]:
    """Search notes with the Evernote search grammar."""
    if not text.strip():
        return {"error": "No search text provided.", "list": []}
    if not repo.check_login():
        return {"error": "Not connected to Evernote. Run the 'login' command first.", "list": []}
    try:
        listing = repo.search(text)
    except RepositoryError as exc:
        return _error(exc, list=[])
    return listing.to_dict()


def evernote_reference(repo: EvernoteRepository, *, source: str, share: bool = False) -> dict[str, Any]:
    """Create the reference blob of a listed attachment.

    Args:
        source: The "source" of a file entry.
        share: Share the note publicly and keep the attachment's public URL.
    """
    try:
        blob = repo.get_file_reference(source, use_file_reference=share)
    except RepositoryError as exc:
        return _error(exc)
    return {
        "reference": blob,
        "details": repo.get_reference_details(blob),
        "source_info": repo.get_file_source_info(source),
    }


def evernote_fetch(repo: EvernoteRepository, *, reference: str, filename: str = "") -> dict[str, Any]:
    """Download a referenced attachment to a local file."""
    try:
        result = repo.get_file(reference, filename)
    except RepositoryError as exc:
        return _error(exc)
    return {"path": str(result.path)}


# --- Server lifecycle ---


@dataclass
class ServerContext:
    """Shared resources for the MCP server lifetime."""

    repo: EvernoteRepository
    session: SessionContext = field(default_factory=SessionContext)


def _build_repository() -> EvernoteRepository:
    from evernote_repository.sdk import build_repository

    data_dir = resolve_data_directory()
    preferences = JsonPreferenceStore(data_dir / "preferences.json")
    return build_repository(
        load_settings(),
        preferences,
        local_user(preferences),
        cache=MemoryCacheStore(),
        download_dir=data_dir / "downloads",
    )


@asynccontextmanager
async def server_lifespan(_server: FastMCP) -> AsyncIterator[ServerContext]:
    """Build the repository on startup."""
    repo = _build_repository()
    if not repo.check_login():
        logger.warning("No Evernote account connected, tools will report an error until login")
    yield ServerContext(repo=repo)


mcp_server = FastMCP(
    "evernote-repository",
    instructions="""\
Evernote notes hold attachments (resources). Browse paths are chains of
"mode:value|name" segments separated by "/".

## Typical flow

1. Browse from the root with evernote_browse_tool(path="root:"), then follow
   the "path" of folders: notebooks, tags, saved searches, notes.
2. Or search with evernote_search_tool using the Evernote search grammar.
3. Opening a note lists its attachments; each has a "source".
4. Call evernote_reference_tool with that source, then evernote_fetch_tool
   with the returned reference to download the file.
""",
    lifespan=server_lifespan,
)


def _ctx(mcp_ctx: Context) -> ServerContext:
    return mcp_ctx.request_context.lifespan_context  # type: ignore[return-value]


# --- MCP Tool Wrappers ---


@mcp_server.tool()
async def evernote_browse_tool(ctx: Context, path: str = "", page: int = 1) -> dict[str, Any]:
    """Browse Evernote folders and attachments.

    Returns breadcrumbs under "path" and entries under "list". Folders carry
    a "path" to browse next; files carry a "source" to reference.

    Args:
        path: Browse path (empty for all notes, "root:" for the top level).
        page: Page of note listings, starting at 1.
    """
    server = _ctx(ctx)
    return evernote_browse(server.repo, path=path, page=page, session=server.session)


@mcp_server.tool()
async def evernote_search_tool(ctx: Context, text: str) -> dict[str, Any]:
    """Search Evernote notes.

    Args:
        text: Query in the Evernote search grammar, e.g. "intitle:invoice".
    """
    return evernote_search(_ctx(ctx).repo, text=text)


@mcp_server.tool()
async def evernote_reference_tool(ctx: Context, source: str, share: bool = False) -> dict[str, Any]:
    """Create a reference to an attachment found by browse or search.

    Args:
        source: The "source" of a file entry.
        share: Share the note publicly so the file stays reachable by URL.
    """
    return evernote_reference(_ctx(ctx).repo, source=source, share=share)


@mcp_server.tool()
async def evernote_fetch_tool(ctx: Context, reference: str, filename: str = "") -> dict[str, Any]:
    """Download the attachment of a reference to a local file.

    Args:
        reference: Reference blob returned by evernote_reference_tool.
        filename: Name of the local file (default: random name).
    """
    return evernote_fetch(_ctx(ctx).repo, reference=reference, filename=filename)


def run_mcp_server() -> None:
    """Run the MCP server with stdio transport."""
    from evernote_repository.logging_config import configure_logging

    configure_logging(verbose=False)
    mcp_server.run(transport="stdio")
