from __future__ import annotations

from ..domain import ClassToken

IMPORTANT_MARKER = "!"
NEGATIVE_MARKER = "-"
VARIANT_SEPARATOR = ":"
OPENING_BRACKETS = "[("
CLOSING_BRACKETS = "])"


def split_classes(text: str) -> list[str]:
    return text.split()


def split_variants(token: str) -> list[str]:
    parts: list[str] = []
    depth = 0
    start = 0
    for index, char in enumerate(token):
        if char in OPENING_BRACKETS:
            depth += 1
        elif char in CLOSING_BRACKETS:
            depth = max(0, depth - 1)
        elif char == VARIANT_SEPARATOR and depth == 0:
            parts.append(token[start:index])
            start = index + 1
    parts.append(token[start:])
    return parts


def parse_token(text: str) -> ClassToken:
    parts = split_variants(text)
    base = parts[-1]

    important = False
    if base.startswith(IMPORTANT_MARKER):
        important, base = True, base[1:]
    elif len(base) > 1 and base.endswith(IMPORTANT_MARKER):
        important, base = True, base[:-1]

    negative = False
    if len(base) > 1 and base.startswith(NEGATIVE_MARKER):
        negative, base = True, base[1:]

    return ClassToken(
        text=text,
        important=important,
        negative=negative,
        variants=tuple(parts[:-1]),
        base=base,
    )
