"""Records exchanged with the file picker host."""

import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntFlag
from pathlib import Path
from typing import Any

from evernote_repository.errors import ConfigError

THUMBNAIL_SIZE = 64


class ReturnType(IntFlag):
    """Kinds of file the host can get out of a repository."""

    EXTERNAL = 1
    INTERNAL = 2
    REFERENCE = 4


@dataclass(frozen=True)
class Segment:
    """One ``mode:value[|name]`` token of a browse path."""

    mode: str
    id: str = ""
    name: str = ""


@dataclass(frozen=True)
class Breadcrumb:
    name: str
    path: str


@dataclass(frozen=True)
class ListingEntry:
    """A folder or a file displayed by the file picker.

    Folders have a navigable ``path`` and a ``children`` tuple; files have a
    ``source`` tag and ``children`` set to None.
    """

    title: str
    thumbnail: str
    path: str | None = None
    source: str | None = None
    created: datetime | None = None
    updated: datetime | None = None
    size: int | None = None
    children: tuple["ListingEntry", ...] | None = ()

    @property
    def is_folder(self) -> bool:
        return self.children is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialize the way the file picker expects its list items."""
        item: dict[str, Any] = {
            "title": self.title,
            "thumbnail": self.thumbnail,
            "thumbnail_height": THUMBNAIL_SIZE,
            "thumbnail_width": THUMBNAIL_SIZE,
        }
        if self.path is not None:
            item["path"] = self.path
        if self.source is not None:
            item["source"] = self.source
        if self.updated is not None:
            item["date"] = self.updated.timestamp()
            item["datemodified"] = self.updated.timestamp()
        if self.created is not None:
            item["datecreated"] = self.created.timestamp()
        if self.size is not None:
            item["size"] = self.size
        if self.children is not None:
            item["children"] = [child.to_dict() for child in self.children]
        return item


@dataclass(frozen=True)
class Listing:
    """Result of a browse or search call."""

    path: tuple[Breadcrumb, ...]
    entries: tuple[ListingEntry, ...]
    manage: str
    logout_url: str
    dynload: bool = True
    page: int | None = None
    pages: int | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "path": [{"name": c.name, "path": c.path} for c in self.path],
            "list": [entry.to_dict() for entry in self.entries],
            "manage": self.manage,
            "logouturl": self.logout_url,
            "dynload": self.dynload,
        }
        if self.page is not None and self.pages is not None:
            result["page"] = self.page
            result["pages"] = self.pages
        return result


@dataclass
class SessionContext:
    """Browse state the host keeps between two paged requests."""

    path: str | None = None


@dataclass(frozen=True)
class UserIdentity:
    """The host user on whose behalf the repository works."""

    id: str
    fullname: str


@dataclass(frozen=True)
class LoginPrompt:
    """Popup the host opens to start the OAuth handshake."""

    url: str
    type: str = "popup"


@dataclass(frozen=True)
class MaterializedFile:
    path: Path


@dataclass(frozen=True)
class ReferenceSize:
    filepath: str
    filesize: int | None = None


@dataclass(frozen=True)
class FileReference:
    """What the host stores when a user picks a file.

    The blob form keeps the key names used by previously stored references.
    """

    source: str
    remote_id: str
    parent_note_id: str = ""
    owner_user_id: str = ""
    owner_display_name: str = ""
    share_url: str = ""

    @property
    def source_kind(self) -> str:
        return "shareLink" if self.share_url else "resource"

    def to_blob(self) -> str:
        return json.dumps(
            {
                "source": self.source,
                "guid": self.remote_id,
                "noteid": self.parent_note_id,
                "userid": self.owner_user_id,
                "username": self.owner_display_name,
                "url": self.share_url,
            },
            sort_keys=True,
        )

    @classmethod
    def from_blob(cls, blob: str) -> "FileReference":
        """Parse a stored reference.

        Older references may only carry ``source``; the remote id is then
        read from its ``resource:`` prefix.
        """
        try:
            data = json.loads(blob)
        except (TypeError, ValueError) as exc:
            msg = f"Malformed file reference: {blob!r}"
            raise ConfigError(msg) from exc
        if not isinstance(data, dict) or not data.get("source"):
            msg = f"File reference without a source: {blob!r}"
            raise ConfigError(msg)

        source = str(data["source"])
        remote_id = str(data.get("guid") or "")
        if not remote_id and source.startswith("resource:"):
            resource_part = source.split("|", 1)[0]
            remote_id = resource_part.split(":", 1)[1]
        return cls(
            source=source,
            remote_id=remote_id,
            parent_note_id=str(data.get("noteid") or ""),
            owner_user_id=str(data.get("userid") or ""),
            owner_display_name=str(data.get("username") or ""),
            share_url=str(data.get("url") or ""),
        )


@dataclass(frozen=True)
class CachedListing:
    """Folders and files of one browsed segment, before file filtering."""

    folders: tuple[ListingEntry, ...] = field(default_factory=tuple)
    files: tuple[ListingEntry, ...] = field(default_factory=tuple)
    pages: int = 0
