from __future__ import annotations

import itertools
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

LOG_FILENAME = "log"
BACKUP_PREFIX = "original_"

_tmp_seq = itertools.count()


def _tmp_suffix() -> str:
    return f".{os.getpid()}_{next(_tmp_seq)}.tmp"


def backup_original_path(input_path: Path) -> Path:
    """``dir/novel.txt`` -> ``dir/original_novel.txt`` (always a .txt name)."""

    stem = Path(input_path.name).stem or input_path.name
    return input_path.with_name(f"{BACKUP_PREFIX}{stem}.txt")


def log_path_for_output(output_path: Path) -> Path:
    return output_path.parent / LOG_FILENAME


def write_bytes_atomic(path: Path, data: bytes) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_name(path.name + _tmp_suffix())
    try:
        tmp.write_bytes(data)
        tmp.replace(path)
    finally:
        if tmp.exists():
            tmp.unlink()


def backup_if_absent(input_path: Path, data: bytes) -> Path | None:
    """Write the untouched input next to it once; later runs keep the first backup."""

    backup = backup_original_path(input_path)
    if backup.exists():
        logger.info("backup already exists, keeping it: %s", backup)
        return None
    write_bytes_atomic(backup, data)
    logger.info("wrote backup: %s", backup)
    return backup
