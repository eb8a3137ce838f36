"""Tests for settings validation and environment loading."""

from pathlib import Path

import pytest

from evernote_repository.config import (
    API_DEV,
    API_PROD,
    DEFAULT_DATA_DIR,
    apply_ssl_compatibility,
    load_settings,
    resolve_data_directory,
    type_option_names,
    validate_settings,
)
from evernote_repository.errors import ConfigError


def test_form_declares_key_secret_and_sandbox_flag() -> None:
    assert type_option_names() == ("key", "secret", "usedevapi")


def test_validate_settings_requires_key_and_secret() -> None:
    with pytest.raises(ConfigError, match="key, secret"):
        validate_settings({"key": " ", "usedevapi": "1"})


def test_validate_settings_selects_api() -> None:
    settings = validate_settings({"key": " k ", "secret": "s"})
    assert settings.consumer_key == "k"
    assert settings.api_url == API_PROD
    assert validate_settings({"key": "k", "secret": "s", "usedevapi": "yes"}).api_url == API_DEV


def test_load_settings_from_environment() -> None:
    settings = load_settings(
        {
            "EVERNOTE_CONSUMER_KEY": "k",
            "EVERNOTE_CONSUMER_SECRET": "s",
            "EVERNOTE_SANDBOX": "true",
            "EVERNOTE_ENABLE_PAGING": "1",
            "EVERNOTE_ACCEPTED_TYPES": ".pdf, .jpg",
        }
    )
    assert settings.use_sandbox_api
    assert settings.enable_paging
    assert not settings.ssl_compatibility_mode
    assert settings.accepted_types == (".pdf", ".jpg")
    assert settings.search_dynload


def test_load_settings_without_credentials_fails() -> None:
    with pytest.raises(ConfigError):
        load_settings({})


def test_accepted_types_default_to_everything() -> None:
    settings = load_settings({"EVERNOTE_CONSUMER_KEY": "k", "EVERNOTE_CONSUMER_SECRET": "s"})
    assert settings.accepted_types == ("*",)


def test_resolve_data_directory(tmp_path: Path) -> None:
    assert resolve_data_directory({}) == DEFAULT_DATA_DIR
    assert resolve_data_directory({"EVERNOTE_DATA_DIR": str(tmp_path)}) == tmp_path


def test_ssl_compatibility_rewrites_https_only_when_enabled() -> None:
    url = "https://www.evernote.com/shard/s1/notestore"
    assert apply_ssl_compatibility(url, enabled=False) == url
    assert apply_ssl_compatibility(url, enabled=True) == "http://www.evernote.com/shard/s1/notestore"
    assert apply_ssl_compatibility("http://x", enabled=True) == "http://x"
