"""User preferences: names, a JSON file store, and their upgrade."""

import getpass
import json
import os
from pathlib import Path

from loguru import logger

from evernote_repository.config import LEGACY_SETTING_PREFIX, SETTING_PREFIX
from evernote_repository.models.listing import UserIdentity
from evernote_repository.protocols import PreferenceStoreProtocol

ACCESS_TOKEN = SETTING_PREFIX + "accesstoken"
NOTE_STORE_URL = SETTING_PREFIX + "notestoreurl"
USER_ID = SETTING_PREFIX + "userid"
TOKEN_SECRET = SETTING_PREFIX + "tokensecret"
VERSION = SETTING_PREFIX + "version"

# Preferences renamed when the prefix changed.
MIGRATED_PREFERENCES = ("tokensecret", "accesstoken", "notestoreurl", "userid")

# Version introducing the current preference prefix.
PREFIX_MIGRATION_VERSION = 2013090600

# Version of the stored preferences layout.
PREFERENCES_VERSION = 2013113000


class JsonPreferenceStore:
    """Preferences of one user, kept in a JSON file.

    The file is rewritten on every change; a missing file reads as empty.
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict[str, str]:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        if not isinstance(data, dict):
            msg = f"Preferences file {str(self.path)!r} does not hold an object"
            raise ValueError(msg)
        return {str(k): str(v) for k, v in data.items()}

    def _save(self, data: dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, sort_keys=True, indent=4) + "\n", encoding="utf-8")

    def get(self, name: str, default: str | None = None) -> str | None:
        return self._load().get(name, default)

    def set(self, name: str, value: str) -> None:
        data = self._load()
        data[name] = value
        self._save(data)

    def unset(self, name: str) -> None:
        data = self._load()
        if data.pop(name, None) is not None:
            self._save(data)


def upgrade_preferences(store: PreferenceStoreProtocol, old_version: int) -> int:
    """Bring stored preferences from ``old_version`` to the current layout.

    Returns:
        The version the preferences are now at.
    """
    if old_version < PREFIX_MIGRATION_VERSION:
        for name in MIGRATED_PREFERENCES:
            value = store.get(LEGACY_SETTING_PREFIX + name)
            if value is None:
                continue
            store.set(SETTING_PREFIX + name, value)
            store.unset(LEGACY_SETTING_PREFIX + name)
            logger.info("Migrated preference {} to the {} prefix", name, SETTING_PREFIX)
    return max(old_version, PREFERENCES_VERSION)


def local_user(store: PreferenceStoreProtocol) -> UserIdentity:
    """Identity of the local user, for the CLI and the MCP server."""
    login = getpass.getuser()
    return UserIdentity(
        id=store.get(USER_ID) or login,
        fullname=os.environ.get("EVERNOTE_USER_FULLNAME", login),
    )
