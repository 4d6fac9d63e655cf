"""Unit tests for settings file I/O and config resolution."""

import json
import logging

import pytest

from postsync.io.gateway import DEFAULT_BASE_URL
from postsync.io.settings import (
    ClientConfig,
    get_config_path,
    load_config,
    load_settings,
    parse_value,
    save_setting,
)


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path))
    for name in ("POSTSYNC_BASE_URL", "POSTSYNC_TIMEOUT", "POSTSYNC_PAGE_SIZE"):
        monkeypatch.delenv(name, raising=False)
    return tmp_path


def write_settings(config_home, data):
    path = config_home / "postsync" / "settings.json"
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def test_config_path_under_xdg(config_home):
    assert get_config_path() == config_home / "postsync" / "settings.json"


def test_missing_file_is_empty(config_home):
    assert load_settings() == {}


def test_corrupt_file_is_empty(config_home):
    path = config_home / "postsync" / "settings.json"
    path.parent.mkdir(parents=True)
    path.write_text("{not json", encoding="utf-8")
    assert load_settings() == {}


def test_save_setting_parses_and_merges(config_home):
    assert save_setting("page_size", "20") == 20
    save_setting("timeout", 5.0)
    assert load_settings() == {"page_size": 20, "timeout": 5.0}
    assert load_config().page_size == 20


@pytest.mark.parametrize(
    "key, raw",
    [("page_size", "0"), ("timeout", "-1"), ("apply_strategy", "guess"), ("colour", "red")],
)
def test_save_setting_rejects_invalid(config_home, key, raw):
    with pytest.raises(ValueError):
        save_setting(key, raw)
    assert load_settings() == {}


def test_parse_value_types():
    assert parse_value("timeout", "2.5") == 2.5
    assert parse_value("apply_strategy", "draft") == "draft"


def test_defaults(config_home):
    assert load_config() == ClientConfig()
    assert load_config().base_url == DEFAULT_BASE_URL


def test_precedence(config_home, monkeypatch):
    write_settings(config_home, {"page_size": 20, "timeout": 5, "base_url": "http://file.test"})
    monkeypatch.setenv("POSTSYNC_PAGE_SIZE", "30")
    config = load_config({"page_size": 40, "base_url": None})
    assert config.page_size == 40
    assert config.timeout == 5.0
    assert config.base_url == "http://file.test"

    assert load_config().page_size == 30


def test_invalid_values_ignored_with_warning(config_home, monkeypatch, caplog):
    write_settings(config_home, {"page_size": 0, "apply_strategy": "guess", "unknown": 1})
    monkeypatch.setenv("POSTSYNC_TIMEOUT", "soon")
    with caplog.at_level(logging.WARNING, logger="postsync.io.settings"):
        config = load_config()
    assert config == ClientConfig()
    messages = " ".join(r.message for r in caplog.records)
    assert "page_size" in messages
    assert "apply_strategy" in messages
    assert "POSTSYNC_TIMEOUT" in messages


def test_apply_strategy_from_file(config_home):
    write_settings(config_home, {"apply_strategy": "draft", "owner_field": "ownerId"})
    config = load_config()
    assert config.apply_strategy == "draft"
    assert config.owner_field == "ownerId"
