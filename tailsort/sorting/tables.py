from __future__ import annotations

from dataclasses import dataclass
import json
from pathlib import Path

from ..errors import InvalidConfiguration

PREFIX_MARKER = "-"


@dataclass(frozen=True)
class CategoryEntry:
    prefix: str
    category: str
    intra_rank: int


@dataclass(frozen=True)
class CategoryTable:
    table_id: str
    categories: tuple[str, ...]
    # Longest prefix first so the first hit is the longest match.
    entries: tuple[CategoryEntry, ...]
    unknown_category: str = "unknown"

    def match(self, base: str) -> CategoryEntry | None:
        for entry in self.entries:
            if _prefix_matches(entry.prefix, base):
                return entry
        return None


@dataclass(frozen=True)
class VariantTable:
    table_id: str
    names: tuple[str, ...]
    exact: dict[str, int]
    prefixes: tuple[tuple[str, int], ...]

    def rank(self, variant: str) -> tuple[int, int, str]:
        index = self.exact.get(variant)
        if index is not None:
            return (0, index, "")
        for prefix, prefix_index in self.prefixes:
            if variant.startswith(prefix):
                return (0, prefix_index, variant)
        return (1, 0, variant)


def _prefix_matches(prefix: str, base: str) -> bool:
    if prefix.endswith(PREFIX_MARKER):
        return base.startswith(prefix)
    return base == prefix or base.startswith(prefix + PREFIX_MARKER)


def _read_payload(path: str | Path) -> dict:
    table_path = Path(path)
    try:
        payload = json.loads(table_path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as exc:
        raise InvalidConfiguration(f"Cannot read table {table_path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidConfiguration(f"Table {table_path} must be a JSON object")
    return payload


def load_category_table(path: str | Path) -> CategoryTable:
    payload = _read_payload(path)
    categories: list[str] = []
    entries: list[CategoryEntry] = []

    for raw_category in payload.get("categories", []):
        name = raw_category.get("name")
        if not name or name in categories:
            raise InvalidConfiguration(f"Category names must be unique and non-empty: {name!r}")
        categories.append(name)
        for index, prefix in enumerate(raw_category.get("prefixes", [])):
            entries.append(CategoryEntry(prefix=prefix, category=name, intra_rank=index))

    if not categories:
        raise InvalidConfiguration(f"Category table {path} defines no categories")

    entries.sort(key=lambda entry: len(entry.prefix), reverse=True)
    return CategoryTable(
        table_id=payload.get("table_id", Path(path).stem),
        categories=tuple(categories),
        entries=tuple(entries),
        unknown_category=payload.get("unknown_category", "unknown"),
    )


def load_variant_table(path: str | Path) -> VariantTable:
    payload = _read_payload(path)
    names = tuple(payload.get("variants", []))
    exact = {name: index for index, name in enumerate(names) if not name.endswith(PREFIX_MARKER)}
    prefixes = [(name, index) for index, name in enumerate(names) if name.endswith(PREFIX_MARKER)]
    prefixes.sort(key=lambda item: len(item[0]), reverse=True)

    return VariantTable(
        table_id=payload.get("table_id", Path(path).stem),
        names=names,
        exact=exact,
        prefixes=tuple(prefixes),
    )
