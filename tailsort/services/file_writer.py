from __future__ import annotations

import logging
import os
from pathlib import Path
import shutil
import tempfile

from ..config import SafetySettings

logger = logging.getLogger(__name__)

BACKUP_SUFFIX = ".bak"


def read_source(path: Path) -> str:
    # Bytes, not read_text: newline translation would rewrite CRLF files.
    return path.read_bytes().decode("utf-8")


def write_text_atomic(path: Path, text: str) -> None:
    fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "wb") as handle:
            handle.write(text.encode("utf-8"))
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            shutil.copymode(path, tmp_path)
        os.replace(tmp_path, path)
    except BaseException:
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def create_backup(path: Path) -> Path:
    backup = path.with_name(path.name + BACKUP_SUFFIX)
    shutil.copy2(path, backup)
    logger.debug("[file_writer] backup written to %s", backup)
    return backup


def write_source(path: Path, text: str, safety: SafetySettings) -> None:
    if safety.create_backups:
        create_backup(path)

    if safety.atomic_writes:
        write_text_atomic(path, text)
    else:
        path.write_bytes(text.encode("utf-8"))

    if safety.verify_writes and read_source(path) != text:
        raise OSError(f"Verification failed after writing {path}")
