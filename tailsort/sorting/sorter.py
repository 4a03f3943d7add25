from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, NamedTuple, Sequence

from ..domain import ClassToken
from ..errors import InvalidConfiguration
from ..extraction.classifier import is_utility
from .tables import CategoryTable, VariantTable
from .tokens import parse_token, split_classes


class SortKey(NamedTuple):
    variants: tuple[tuple[int, int, str], ...]
    category: int
    intra: int
    base: str
    negative: bool
    important: bool


@dataclass(frozen=True)
class SortConfig:
    categories: CategoryTable
    variants: VariantTable
    category_ranks: dict[str, int]
    unknown_rank: int
    custom: bool = False
    remove_duplicates: bool = True


def build_sort_config(
    categories: CategoryTable,
    variants: VariantTable,
    custom_order: Sequence[str] | None = None,
    unknown_position: Literal["first", "last"] | int = "last",
    remove_duplicates: bool = True,
) -> SortConfig:
    if custom_order is not None:
        if not custom_order:
            raise InvalidConfiguration("A custom sort order needs at least one category")
        unknown = [name for name in custom_order if name not in categories.categories]
        if unknown:
            raise InvalidConfiguration(
                f"Unknown categories in custom order: {', '.join(unknown)}. "
                f"Valid categories: {', '.join(categories.categories)}"
            )
        if len(set(custom_order)) != len(custom_order):
            raise InvalidConfiguration("Custom order lists a category more than once")
        ordered = list(custom_order)
    else:
        ordered = list(categories.categories)

    if unknown_position == "last":
        slot = len(ordered)
    elif unknown_position == "first":
        slot = 0
    elif isinstance(unknown_position, int) and 0 <= unknown_position <= len(ordered):
        slot = unknown_position
    else:
        raise InvalidConfiguration(
            f"Unknown position must be 'first', 'last' or an index between 0 and {len(ordered)}"
        )

    ranks: dict[str, int] = {}
    for index, name in enumerate(ordered):
        ranks[name] = index if index < slot else index + 1

    return SortConfig(
        categories=categories,
        variants=variants,
        category_ranks=ranks,
        unknown_rank=slot,
        custom=custom_order is not None,
        remove_duplicates=remove_duplicates,
    )


def sort_key(token: ClassToken, config: SortConfig) -> SortKey:
    variant_ranks = tuple(config.variants.rank(variant) for variant in token.variants)
    entry = config.categories.match(token.base) if is_utility(token) else None
    rank = config.category_ranks.get(entry.category) if entry is not None else None

    if rank is None:
        return SortKey(variant_ranks, config.unknown_rank, 0, "", False, False)
    if config.custom:
        return SortKey(variant_ranks, rank, 0, "", False, False)
    return SortKey(variant_ranks, rank, entry.intra_rank, token.base, token.negative, token.important)


def sort_tokens(
    tokens: Sequence[str],
    config: SortConfig,
    remove_duplicates: bool | None = None,
) -> list[str]:
    dedupe = config.remove_duplicates if remove_duplicates is None else remove_duplicates
    parsed = [parse_token(token) for token in tokens]
    if dedupe:
        # !p-4 and p-4! are the same utility; the first spelling wins.
        first_seen: dict[tuple, ClassToken] = {}
        for token in parsed:
            first_seen.setdefault((token.important, token.negative, token.variants, token.base), token)
        parsed = list(first_seen.values())
    parsed.sort(key=lambda token: sort_key(token, config))
    return [token.text for token in parsed]


def sort_classes(text: str, config: SortConfig) -> str:
    return " ".join(sort_tokens(split_classes(text), config))
