from __future__ import annotations

import pytest

from tailsort.config import TailsortSettings, build_pipeline_config
from tailsort.errors import InvalidConfiguration
from tailsort.extraction.classifier import TokenClass, classify_token
from tailsort.sorting.sorter import SortConfig, sort_classes, sort_key, sort_tokens
from tailsort.sorting.tokens import parse_token, split_variants


def _config(**settings: object) -> SortConfig:
    return build_pipeline_config(TailsortSettings(**settings)).sort


def test_sorts_layout_before_spacing() -> None:
    assert sort_classes("p-4 flex m-2 items-center", _config()) == "flex items-center m-2 p-4"


def test_removes_duplicates_by_default() -> None:
    assert sort_classes("flex p-4 flex items-center p-4", _config()) == "flex items-center p-4"


def test_important_spellings_collapse_to_first_occurrence() -> None:
    assert sort_classes("!p-4 p-4! flex", _config()) == "flex !p-4"


def test_preserve_duplicates_keeps_every_token() -> None:
    result = sort_classes("flex p-4 flex items-center p-4", _config(preserve_duplicates=True))
    assert result == "flex flex items-center p-4 p-4"


def test_variant_groups_follow_bare_utilities() -> None:
    result = sort_classes("p-4 hover:bg-blue-500 flex md:flex-row flex-col hover:p-6 sm:p-2", _config())
    assert result == "flex flex-col p-4 hover:bg-blue-500 hover:p-6 sm:p-2 md:flex-row"


def test_empty_and_single_token_inputs() -> None:
    config = _config()
    assert sort_classes("", config) == ""
    assert sort_classes("   ", config) == ""
    assert sort_classes("flex", config) == "flex"


def test_whitespace_runs_collapse_to_single_spaces() -> None:
    assert sort_classes("  p-4\n\t flex  ", _config()) == "flex p-4"


def test_unknown_tokens_go_last_and_keep_their_order() -> None:
    assert sort_classes("custom-b flex custom-a p-4", _config()) == "flex p-4 custom-b custom-a"


def test_unknown_position_first() -> None:
    result = sort_classes("custom-b flex custom-a p-4", _config(unknown_position="first"))
    assert result == "custom-b custom-a flex p-4"


def test_non_utility_shapes_are_kept_as_unknown() -> None:
    assert sort_classes("Flex p-4 BEM__block flex", _config()) == "flex p-4 Flex BEM__block"


def test_custom_order_ranks_listed_categories_and_keeps_original_order() -> None:
    config = _config(sort_order="custom", custom_order=["padding", "flexbox-grid"])
    assert sort_classes("items-center m-2 flex p-4", config) == "p-4 items-center flex m-2"


def test_custom_order_puts_unlisted_categories_with_unknown_tokens() -> None:
    config = _config(sort_order="custom", custom_order=["padding", "flexbox-grid"])
    result = sort_classes("custom-x m-2 flex block p-4 card-title", config)
    assert result == "p-4 flex custom-x m-2 block card-title"


def test_unknown_position_index_places_unknown_tokens_between_categories() -> None:
    result = sort_classes("p-4 custom-x flex block card-title", _config(unknown_position=1))
    assert result == "block custom-x card-title flex p-4"


def test_custom_order_with_unknown_category_is_rejected() -> None:
    with pytest.raises(InvalidConfiguration):
        _config(sort_order="custom", custom_order=["padding", "colors"])


def test_important_and_negative_modifiers_sort_by_their_utility() -> None:
    assert sort_classes("!p-4 -mt-2 flex", _config()) == "flex -mt-2 !p-4"


def test_arbitrary_values_keep_colons_inside_brackets() -> None:
    result = sort_classes("p-[23px] bg-[url(data:image/png)] flex", _config())
    assert result == "flex bg-[url(data:image/png)] p-[23px]"


def test_unknown_variants_follow_known_variants() -> None:
    assert sort_classes("foo:p-2 sm:p-2 hover:p-2", _config()) == "hover:p-2 sm:p-2 foo:p-2"


def test_sorting_is_idempotent() -> None:
    config = _config()
    samples = [
        "p-4 flex m-2 items-center",
        "p-4 hover:bg-blue-500 flex md:flex-row flex-col hover:p-6 sm:p-2",
        "custom-b flex custom-a p-4 dark:md:hover:text-white group-hover:underline",
        "[mask-type:luminance] -translate-x-1/2 !font-bold w-1/2 data-[state=open]:flex",
        "text-sm text-sm Flex flex",
    ]
    for sample in samples:
        once = sort_classes(sample, config)
        assert sort_classes(once, config) == once


def test_sorting_is_deterministic_and_stable() -> None:
    config = _config()
    tokens = ["widget", "p-4", "gadget", "flex", "thing"]
    assert sort_tokens(tokens, config) == sort_tokens(list(tokens), config)
    assert sort_tokens(tokens, config) == ["flex", "p-4", "widget", "gadget", "thing"]


def test_variant_ranks_never_decrease_in_sorted_output() -> None:
    config = _config()
    result = sort_tokens(
        ["md:p-2", "p-4", "hover:flex", "sm:m-1", "flex", "focus:ring", "dark:bg-black", "lg:hidden"],
        config,
    )
    keys = [sort_key(parse_token(token), config) for token in result]
    variant_vectors = [key.variants for key in keys]
    assert variant_vectors == sorted(variant_vectors)
    for previous, current in zip(keys, keys[1:]):
        if previous.variants == current.variants:
            assert previous.category <= current.category


def test_split_variants_ignores_colons_in_brackets() -> None:
    assert split_variants("md:hover:p-4") == ["md", "hover", "p-4"]
    assert split_variants("data-[state=open]:flex") == ["data-[state=open]", "flex"]
    assert split_variants("[mask-type:luminance]") == ["[mask-type:luminance]"]


def test_parse_token_reads_modifiers() -> None:
    token = parse_token("md:hover:!-mt-2")
    assert token.variants == ("md", "hover")
    assert token.important is True
    assert token.negative is True
    assert token.base == "mt-2"
    assert token.text == "md:hover:!-mt-2"


def test_classify_token() -> None:
    assert classify_token("p-[23px]") == TokenClass.UTILITY
    assert classify_token("hover:bg-blue-500/50") == TokenClass.UTILITY
    assert classify_token("[mask-type:luminance]") == TokenClass.UTILITY
    assert classify_token("Flex") == TokenClass.UNKNOWN
    assert classify_token("hover::flex") == TokenClass.UNKNOWN
