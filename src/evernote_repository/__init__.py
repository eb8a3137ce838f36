"""Evernote repository: browse notes and pick their attachments."""

from evernote_repository.config import RepositorySettings, load_settings
from evernote_repository.protocols import BrowsableSource, NoteStoreProtocol, PreferenceStoreProtocol
from evernote_repository.repository import EvernoteRepository

__all__ = [
    "BrowsableSource",
    "EvernoteRepository",
    "NoteStoreProtocol",
    "PreferenceStoreProtocol",
    "RepositorySettings",
    "load_settings",
]
