from __future__ import annotations

import logging
import sys
from contextlib import suppress
from logging.handlers import RotatingFileHandler
from pathlib import Path

from novel_formatter.env import env_str, env_truthy

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def _log_level_from_env() -> str | None:
    return env_str("NOVEL_FORMATTER_LOG_LEVEL")


def log_dir_from_env() -> Path | None:
    raw = env_str("NOVEL_FORMATTER_LOG_DIR")
    return Path(raw) if raw else None


def configure_console_logging(default_level: str = "WARNING") -> None:
    """Send records to stderr (idempotent). NOVEL_FORMATTER_LOG_LEVEL overrides the level."""

    root = logging.getLogger()
    handler = next((h for h in root.handlers if getattr(h, "_novel_formatter_console_log", False)), None)
    if handler is None:
        handler = logging.StreamHandler(sys.stderr)
        handler._novel_formatter_console_log = True  # type: ignore[attr-defined]
        handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
        root.addHandler(handler)

    level = logging.getLevelName((_log_level_from_env() or default_level).upper())
    if not isinstance(level, int):
        level = logging.WARNING
    handler.setLevel(level)
    # The rotating file log records INFO even when the console is quieter.
    root.setLevel(min(level, logging.INFO))


def ensure_file_logging(*, log_dir: Path, filename: str = "novel-formatter.log") -> Path:
    """Attach a rotating file handler to the root logger (idempotent)."""

    if env_truthy("NOVEL_FORMATTER_DISABLE_FILE_LOG"):
        return log_dir / filename

    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = (log_dir / filename).resolve()

    root = logging.getLogger()
    for h in root.handlers:
        if getattr(h, "_novel_formatter_file_log", False):
            base = getattr(h, "baseFilename", None)
            return Path(str(base)).resolve() if base else log_file
        base = getattr(h, "baseFilename", None)
        if base and Path(str(base)).resolve() == log_file:
            return log_file

    handler = RotatingFileHandler(
        log_file,
        maxBytes=5 * 1024 * 1024,
        backupCount=3,
        encoding="utf-8",
    )
    handler._novel_formatter_file_log = True  # type: ignore[attr-defined]
    handler.setLevel(logging.INFO)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    root.addHandler(handler)

    lvl = _log_level_from_env()
    if lvl:
        with suppress(ValueError):
            root.setLevel(lvl.upper())

    return log_file
