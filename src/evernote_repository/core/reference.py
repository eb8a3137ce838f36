"""File references: what the host keeps when a user picks an attachment."""

from loguru import logger

from evernote_repository.core.remote.client import NotesClient
from evernote_repository.errors import ConfigError, RepositoryError
from evernote_repository.models.listing import FileReference, UserIdentity
from evernote_repository.strings import get_string


def parse_source(source: str) -> tuple[str, str]:
    """Extract the resource and note identifiers of a listing source.

    Sources look like ``resource:<guid>|note:<guid>``; older ones only carry
    the resource part, in which case the note identifier is empty.

    Raises:
        ConfigError: The source does not designate a resource.
    """
    if not source.startswith("resource:"):
        msg = f"Error while creating a reference object from {source!r}"
        raise ConfigError(msg)
    resource_part, _, note_part = source.partition("|")
    guid = resource_part.split(":", 1)[1]
    note_id = note_part.split(":", 1)[1] if ":" in note_part else ""
    if not guid:
        msg = f"Source without a resource identifier: {source!r}"
        raise ConfigError(msg)
    return guid, note_id


def share_url(api_url: str, shard_id: str, note_id: str, share_key: str, guid: str) -> str:
    """Public URL of an attachment of a shared note."""
    return f"{api_url}/shard/{shard_id}/sh/{note_id}/{share_key}/res/{guid}"


def make_file_reference(
    source: str,
    user: UserIdentity,
    *,
    client: NotesClient | None = None,
    api_url: str = "",
    share: bool = False,
) -> FileReference:
    """Create the reference to the attachment designated by ``source``.

    With ``share``, the note is shared publicly and the attachment's public
    URL is stored in the reference, so that the file can be fetched later
    without the user's token. Sharing failures fail the whole selection.
    """
    guid, note_id = parse_source(source)
    url = ""
    if share:
        if client is None or not note_id:
            msg = f"Cannot share the note of {source!r}"
            raise RepositoryError(msg, identifier="sharingerror")
        try:
            evernote_user = client.get_user().unwrap()
            share_key = client.share_note(note_id).unwrap()
        except Exception as exc:
            logger.warning("Sharing note {} failed: {}", note_id, exc)
            raise RepositoryError(get_string("sharingerror"), identifier="sharingerror") from exc
        url = share_url(api_url, str(evernote_user.shard_id or ""), note_id, share_key, guid)

    return FileReference(
        source=source,
        remote_id=guid,
        parent_note_id=note_id,
        owner_user_id=user.id,
        owner_display_name=user.fullname,
        share_url=url,
    )
