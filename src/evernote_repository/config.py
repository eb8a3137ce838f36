"""Configuration for the Evernote repository."""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from loguru import logger

from evernote_repository.errors import ConfigError
from evernote_repository.strings import get_string

API_PROD = "https://www.evernote.com"
API_DEV = "https://sandbox.evernote.com"

MANAGE_URL = "https://www.evernote.com/Home.action"
LOGOUT_URL = "https://www.evernote.com/Logout.action"

# Prefix of the user preferences, and the one used before 2013090600.
SETTING_PREFIX = "repository_evernote_"
LEGACY_SETTING_PREFIX = "evernote_"

# Items per page of a note listing. Also the page size sent to the service.
ITEMS_PER_PAGE = 250

# Maximum results of a user search, must respect EDAM_USER_NOTES_MAX.
SEARCH_MAX_RESULTS = 50

# Seconds allowed to download a file from a share link.
GETFILE_TIMEOUT = 30

# Local state used by the CLI and the MCP server.
DEFAULT_DATA_DIR = Path("~/.local/share/evernote-repository").expanduser()

DEFAULT_CALLBACK_URL = "http://localhost:8000/repository/callback"

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FormField:
    """A field of the admin settings form."""

    name: str
    label: str
    kind: str
    required: bool = False
    info: str | None = None


SETTINGS_FORM: tuple[FormField, ...] = (
    FormField("key", get_string("key"), "text", required=True),
    FormField("secret", get_string("secret"), "text", required=True),
    FormField("usedevapi", get_string("usedevapi"), "yesno", info=get_string("usedevapi_info")),
)


def type_option_names() -> tuple[str, ...]:
    """Names of the admin options stored by the host."""
    return tuple(f.name for f in SETTINGS_FORM)


@dataclass(frozen=True)
class RepositorySettings:
    """Admin-level settings, read once when a repository is built."""

    consumer_key: str
    consumer_secret: str
    use_sandbox_api: bool = False
    # Forces plain HTTP towards the note store; works around TLS handshake
    # failures of some OpenSSL builds. Deprecated.
    ssl_compatibility_mode: bool = False
    callback_url: str = DEFAULT_CALLBACK_URL
    enable_paging: bool = False
    search_dynload: bool = True
    notes_with_attachments_only: bool = True
    accepted_types: tuple[str, ...] = ("*",)

    @property
    def api_url(self) -> str:
        return API_DEV if self.use_sandbox_api else API_PROD


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def validate_settings(options: Mapping[str, Any], **overrides: Any) -> RepositorySettings:
    """Build settings from the admin form values.

    Raises:
        ConfigError: The consumer key or secret is missing.
    """
    missing = [f.name for f in SETTINGS_FORM if f.required and not str(options.get(f.name) or "").strip()]
    if missing:
        msg = f"Missing required Evernote settings: {', '.join(missing)}"
        raise ConfigError(msg)

    return RepositorySettings(
        consumer_key=str(options["key"]).strip(),
        consumer_secret=str(options["secret"]).strip(),
        use_sandbox_api=_as_bool(options.get("usedevapi", False)),
        **overrides,
    )


def load_settings(environ: Mapping[str, str] | None = None) -> RepositorySettings:
    """Read settings from ``EVERNOTE_*`` environment variables."""
    env = os.environ if environ is None else environ
    accepted = env.get("EVERNOTE_ACCEPTED_TYPES", "*")
    return validate_settings(
        {
            "key": env.get("EVERNOTE_CONSUMER_KEY", ""),
            "secret": env.get("EVERNOTE_CONSUMER_SECRET", ""),
            "usedevapi": env.get("EVERNOTE_SANDBOX", ""),
        },
        ssl_compatibility_mode=_as_bool(env.get("EVERNOTE_SSL_COMPATIBILITY", "")),
        callback_url=env.get("EVERNOTE_CALLBACK_URL", DEFAULT_CALLBACK_URL),
        enable_paging=_as_bool(env.get("EVERNOTE_ENABLE_PAGING", "")),
        accepted_types=tuple(t.strip() for t in accepted.split(",") if t.strip()) or ("*",),
    )


def resolve_data_directory(environ: Mapping[str, str] | None = None) -> Path:
    """Directory holding preferences of the CLI and MCP server."""
    env = os.environ if environ is None else environ
    configured = env.get("EVERNOTE_DATA_DIR")
    return Path(configured).expanduser() if configured else DEFAULT_DATA_DIR


def apply_ssl_compatibility(url: str, *, enabled: bool) -> str:
    """Rewrite an https note store URL to plain http when compatibility mode is on."""
    if not enabled or not url.startswith("https://"):
        return url
    logger.warning("SSL compatibility mode is on, talking to {} over plain HTTP", url)
    return "http://" + url[len("https://") :]
