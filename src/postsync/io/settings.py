"""Settings file I/O and resolved client configuration.

Manages a JSON settings file at XDG_CONFIG_HOME/postsync/settings.json.
Precedence: defaults < settings file < environment < explicit overrides.

Import as: import postsync.io.settings
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass, fields, replace
from pathlib import Path

from postsync.core.query import DEFAULT_PAGE_SIZE
from postsync.io.gateway import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

logger = logging.getLogger(__name__)

APPLY_SERVER = "server"
APPLY_DRAFT = "draft"


@dataclass(frozen=True)
class ClientConfig:
    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    page_size: int = DEFAULT_PAGE_SIZE
    owner_field: str = "userId"
    apply_strategy: str = APPLY_SERVER


# Environment variable → config field
_ENV_OVERRIDES = {
    "POSTSYNC_BASE_URL": "base_url",
    "POSTSYNC_TIMEOUT": "timeout",
    "POSTSYNC_PAGE_SIZE": "page_size",
}


def get_config_path() -> Path:
    """Return path to settings file.

    Uses XDG_CONFIG_HOME (default ~/.config) / postsync / settings.json.
    """
    config_home = os.environ.get("XDG_CONFIG_HOME", os.path.expanduser("~/.config"))
    return Path(config_home) / "postsync" / "settings.json"


def load_settings() -> dict:
    """Load settings from JSON file. Returns empty dict on missing/corrupt file."""
    path = get_config_path()
    # [LAW:dataflow-not-control-flow] Always attempt read; empty dict is the "no data" value.
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (FileNotFoundError, json.JSONDecodeError, OSError):
        return {}
    return data if isinstance(data, dict) else {}


def save_settings(data: dict) -> None:
    """Atomic write of settings dict to JSON file.

    Creates parent directories if needed. Writes to temp file then renames
    to avoid partial writes on crash.
    """
    path = get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)
            f.write("\n")
        os.replace(tmp_path, path)
    except Exception:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def _field_defaults() -> dict:
    return {f.name: f.default for f in fields(ClientConfig)}


def parse_value(key: str, raw):
    """Convert ``raw`` to the type of config field ``key``. Raises ValueError."""
    defaults = _field_defaults()
    if key not in defaults:
        raise ValueError(f"unknown setting {key!r} (known: {', '.join(defaults)})")
    kind = type(defaults[key])
    try:
        value = kind(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{key}={raw!r} is not a valid {kind.__name__}") from None
    if key == "page_size" and value < 1:
        raise ValueError(f"page_size={raw!r} must be >= 1")
    if key == "timeout" and value <= 0:
        raise ValueError(f"timeout={raw!r} must be > 0")
    if key == "apply_strategy" and value not in (APPLY_SERVER, APPLY_DRAFT):
        raise ValueError(f"apply_strategy={raw!r} must be {APPLY_SERVER!r} or {APPLY_DRAFT!r}")
    return value


def save_setting(key: str, raw) -> object:
    """Validate one setting and merge it into the settings file. Returns the stored value."""
    value = parse_value(key, raw)
    data = load_settings()
    data[key] = value
    save_settings(data)
    logger.debug("saved %s=%r to %s", key, value, get_config_path())
    return value


def _coerce(config: ClientConfig, key: str, raw, source: str) -> ClientConfig:
    if key not in _field_defaults():
        return config
    try:
        value = parse_value(key, raw)
    except ValueError as e:
        logger.warning("Ignoring %s from %s: %s", key, source, e)
        return config
    return replace(config, **{key: value})


def load_config(overrides: dict | None = None) -> ClientConfig:
    """Resolve the client configuration from every source."""
    config = ClientConfig()
    for key, raw in load_settings().items():
        config = _coerce(config, key, raw, "settings file")
    for env_name, key in _ENV_OVERRIDES.items():
        raw = os.environ.get(env_name, "").strip()
        if raw:
            config = _coerce(config, key, raw, env_name)
    for key, raw in (overrides or {}).items():
        if raw is not None:
            config = _coerce(config, key, raw, "overrides")
    return config
