from __future__ import annotations

from fnmatch import fnmatch
import logging
import os
from pathlib import Path
from typing import Iterable

logger = logging.getLogger(__name__)

KIND_ALIASES = {"htm": "html"}


def document_kind(path: Path) -> str:
    kind = path.suffix.lower().lstrip(".")
    return KIND_ALIASES.get(kind, kind)


def _normalize_extensions(extensions: Iterable[str]) -> set[str]:
    return {extension.lower().lstrip(".") for extension in extensions}


def is_ignored(path: Path, root: Path, ignore_paths: Iterable[str]) -> bool:
    try:
        relative = path.relative_to(root).as_posix()
    except ValueError:
        relative = path.as_posix()
    for pattern in ignore_paths:
        if path.name == pattern or fnmatch(path.name, pattern) or fnmatch(relative, pattern):
            return True
    return False


def _scan_directory(
    directory: Path,
    extensions: set[str],
    ignore_paths: list[str],
    max_depth: int | None,
) -> list[Path]:
    found: list[Path] = []
    for current, dirnames, filenames in os.walk(directory):
        current_path = Path(current)
        depth = len(current_path.relative_to(directory).parts)

        dirnames[:] = sorted(
            name for name in dirnames if not is_ignored(current_path / name, directory, ignore_paths)
        )
        if max_depth is not None and depth >= max_depth:
            dirnames[:] = []

        for filename in sorted(filenames):
            path = current_path / filename
            if document_kind(path) not in extensions:
                continue
            if is_ignored(path, directory, ignore_paths):
                continue
            found.append(path)
    return found


def discover_files(
    paths: Iterable[str | Path],
    extensions: Iterable[str],
    ignore_paths: Iterable[str] = (),
    max_depth: int | None = None,
) -> list[Path]:
    wanted = _normalize_extensions(extensions)
    ignored = list(ignore_paths)
    seen: set[Path] = set()
    files: list[Path] = []

    for raw in paths:
        path = Path(raw)
        if path.is_file():
            candidates = [path] if document_kind(path) in wanted else []
            if not candidates:
                logger.info("[inventory] skipping %s: extension not selected", path)
        elif path.is_dir():
            candidates = _scan_directory(path, wanted, ignored, max_depth)
        else:
            logger.warning("[inventory] path not found: %s", path)
            continue

        for candidate in candidates:
            resolved = candidate.resolve()
            if resolved in seen:
                continue
            seen.add(resolved)
            files.append(candidate)

    return files
