from __future__ import annotations

from enum import StrEnum
import re

from ..domain import ClassSite, ClassToken
from ..sorting.tokens import parse_token, split_classes

BASE_PATTERN = re.compile(
    r"^[a-z0-9@][a-z0-9@_.%/-]*(?:\[[^\s\]]+\])?(?:/[A-Za-z0-9_.%\[\]-]+)?$"
)
ARBITRARY_PROPERTY_PATTERN = re.compile(r"^\[[A-Za-z-]+:[^\s\]]+\]$")


class TokenClass(StrEnum):
    UTILITY = "utility"
    UNKNOWN = "unknown"


class SiteClass(StrEnum):
    EMPTY = "empty"
    DYNAMIC = "dynamic"
    ESCAPED = "escaped"
    SORTABLE = "sortable"


def is_utility(token: ClassToken) -> bool:
    if any(not variant for variant in token.variants):
        return False
    return bool(BASE_PATTERN.match(token.base) or ARBITRARY_PROPERTY_PATTERN.match(token.base))


def classify_token(text: str) -> TokenClass:
    return TokenClass.UTILITY if is_utility(parse_token(text)) else TokenClass.UNKNOWN


def classify_site(site: ClassSite, sort_dynamic_segments: bool = False) -> SiteClass:
    if not split_classes(site.raw):
        return SiteClass.EMPTY
    # A moved backslash can escape the closing quote.
    if "\\" in site.raw:
        return SiteClass.ESCAPED
    if site.dynamic and not sort_dynamic_segments:
        return SiteClass.DYNAMIC
    return SiteClass.SORTABLE
