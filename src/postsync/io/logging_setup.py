"""Logging bootstrap for the postsync CLI.

// [LAW:single-enforcer] Handlers are attached to the "postsync" logger here and nowhere else.

Two sinks: stderr for the person at the terminal (quiet by default so the
rendered tables stay readable) and a rotating DEBUG file that keeps the full
operation trace: engine start/failure lines and every page correction.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

ROOT_LOGGER = "postsync"


@dataclass(frozen=True)
class LoggingRuntime:
    level_name: str
    level: int
    file_path: str


def _stderr_level(verbose: bool) -> int:
    if verbose:
        return logging.DEBUG
    raw = os.environ.get("POSTSYNC_LOG_LEVEL", "").strip().upper()
    level = logging.getLevelName(raw) if raw else logging.WARNING
    # getLevelName answers "Level X" for names it does not know.
    return level if isinstance(level, int) else logging.WARNING


def _log_file(command: str) -> Path:
    explicit = os.environ.get("POSTSYNC_LOG_FILE")
    if explicit:
        return Path(explicit)
    log_dir = Path(os.environ.get("POSTSYNC_LOG_DIR") or Path.home() / ".local/share/postsync/logs")
    stamp = datetime.now(timezone.utc).strftime("%Y%m%d-%H%M%S")
    return log_dir / f"{command}-{stamp}-{os.getpid()}.log"


def configure(command: str = "postsync", *, verbose: bool = False) -> LoggingRuntime:
    """Attach the stderr and file handlers to the postsync logger.

    Calling it again swaps in fresh handlers; the old ones are closed.
    """
    level = _stderr_level(verbose)
    file_path = _log_file(command)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    stderr = logging.StreamHandler()
    stderr.setLevel(level)
    stderr.setFormatter(logging.Formatter("[%(name)s] %(levelname)s %(message)s"))

    trace = RotatingFileHandler(file_path, maxBytes=2 * 1024 * 1024, backupCount=2, encoding="utf-8")
    trace.setLevel(logging.DEBUG)
    trace.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s", datefmt="%Y-%m-%dT%H:%M:%S")
    )

    logger = logging.getLogger(ROOT_LOGGER)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(logging.DEBUG)
    logger.propagate = False
    logger.addHandler(stderr)
    logger.addHandler(trace)

    return LoggingRuntime(
        level_name=logging.getLevelName(level),
        level=level,
        file_path=str(file_path),
    )
