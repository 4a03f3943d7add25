from __future__ import annotations

from itertools import accumulate
import logging
import re

from bs4 import BeautifulSoup

from .script_parser import parse_embedded_script, parse_expression
from .syntax import NodeKind, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)

TAG_NAME_PATTERN = re.compile(r"<[^\s/>]+")
ATTRIBUTE_PATTERN = re.compile(
    r"""(?P<name>[^\s"'<>/=]+)(?:\s*=\s*(?P<value>"[^"]*"|'[^']*'|\{[^{}]*\}|[^\s"'=<>`]+))?"""
)
INTERPOLATION_PATTERN = re.compile(r"\{[^{}]*\}")
BOUND_PREFIXES = ("v-bind:", ":")
QUOTES = "\"'"
SCRIPT_LANGUAGE_ATTRIBUTES = {"ts": "ts", "typescript": "ts", "tsx": "tsx", "jsx": "jsx"}
SCRIPT_TYPES = {"", "module", "text/javascript", "application/javascript", "text/typescript"}


class _ByteOffsets:
    """Maps character offsets of ``text`` to byte offsets of its UTF-8 encoding."""

    def __init__(self, text: str) -> None:
        self.text = text
        self._offsets: list[int] | None = None
        if not text.isascii():
            self._offsets = list(accumulate((len(char.encode("utf-8")) for char in text), initial=0))

    def __call__(self, index: int) -> int:
        if self._offsets is None:
            return index
        return self._offsets[index]


def _line_starts(text: str) -> list[int]:
    starts = [0]
    for index, char in enumerate(text):
        if char == "\n":
            starts.append(index + 1)
    return starts


def _start_tag_end(text: str, position: int) -> int:
    quote: str | None = None
    depth = 0
    for index in range(position, len(text)):
        char = text[index]
        if quote:
            if char == quote:
                quote = None
        elif char in QUOTES:
            quote = char
        elif char == "{":
            depth += 1
        elif char == "}":
            depth = max(0, depth - 1)
        elif char == ">" and depth == 0:
            return index
    return len(text)


def _interpolated_value(value: str, value_start: int, to_byte: _ByteOffsets) -> SyntaxNode:
    """Split a quoted Svelte attribute value such as ``"p-2 {open ? 'a' : 'b'}"`` into static and dynamic parts."""
    children: list[SyntaxNode] = []
    cursor = 1
    inner_end = len(value) - 1
    for match in INTERPOLATION_PATTERN.finditer(value, 1, inner_end):
        if match.start() > cursor:
            children.append(SyntaxNode(NodeKind.SEGMENT, to_byte(value_start + cursor), to_byte(value_start + match.start())))
        expression = parse_expression(match.group()[1:-1].encode("utf-8"), to_byte(value_start + match.start() + 1))
        children.append(
            SyntaxNode(
                NodeKind.SUBSTITUTION,
                to_byte(value_start + match.start()),
                to_byte(value_start + match.end()),
                children=[expression] if expression is not None else [],
            )
        )
        cursor = match.end()
    if inner_end > cursor:
        children.append(SyntaxNode(NodeKind.SEGMENT, to_byte(value_start + cursor), to_byte(value_start + inner_end)))
    return SyntaxNode(
        NodeKind.TEMPLATE,
        to_byte(value_start),
        to_byte(value_start + len(value)),
        quote=value[0],
        children=children,
    )


def _attribute_nodes(
    text: str, to_byte: _ByteOffsets, start: int, end: int, interpolated: bool = False
) -> list[SyntaxNode]:
    nodes: list[SyntaxNode] = []
    for match in ATTRIBUTE_PATTERN.finditer(text, start, end):
        value = match.group("value")
        if not value:
            continue
        name = match.group("name")
        value_start = match.start("value")
        value_end = match.end("value")
        attribute_start, attribute_end = to_byte(match.start()), to_byte(match.end())

        bound_name = next((name[len(prefix) :] for prefix in BOUND_PREFIXES if name.startswith(prefix)), None)
        if bound_name is not None and value[0] in QUOTES:
            inner_start = to_byte(value_start + 1)
            expression = parse_expression(value[1:-1].encode("utf-8"), inner_start)
            if expression is None:
                logger.debug("[markup_parser] skipping unparseable binding %s at byte %d", name, attribute_start)
                continue
            nodes.append(SyntaxNode(NodeKind.ATTRIBUTE, attribute_start, attribute_end, name=bound_name, children=[expression]))
        elif value[0] == "{":
            inner_start = to_byte(value_start + 1)
            expression = parse_expression(value[1:-1].encode("utf-8"), inner_start)
            if expression is None:
                logger.debug("[markup_parser] skipping unparseable expression %s at byte %d", name, attribute_start)
                continue
            nodes.append(SyntaxNode(NodeKind.ATTRIBUTE, attribute_start, attribute_end, name=name, children=[expression]))
        elif value[0] in QUOTES and interpolated and "{" in value:
            template = _interpolated_value(value, value_start, to_byte)
            nodes.append(SyntaxNode(NodeKind.ATTRIBUTE, attribute_start, attribute_end, name=name, children=[template]))
        elif value[0] in QUOTES:
            literal = SyntaxNode(NodeKind.STRING, to_byte(value_start), to_byte(value_end), quote=value[0])
            nodes.append(SyntaxNode(NodeKind.ATTRIBUTE, attribute_start, attribute_end, name=name, children=[literal]))
    return nodes


def _script_language(tag) -> str:
    lang = (tag.get("lang") or "").lower()
    return SCRIPT_LANGUAGE_ATTRIBUTES.get(lang, "js")


def parse_markup(text: str, language: str) -> SyntaxTree:
    soup = BeautifulSoup(text, "html.parser")
    to_byte = _ByteOffsets(text)
    line_starts = _line_starts(text)
    encoded_length = to_byte(len(text))
    children: list[SyntaxNode] = []

    for tag in soup.find_all(True):
        if tag.sourceline is None or tag.sourcepos is None:
            continue
        position = line_starts[tag.sourceline - 1] + tag.sourcepos
        name_match = TAG_NAME_PATTERN.match(text, position)
        if name_match is None:
            logger.debug("[markup_parser] tag %s not found at offset %d", tag.name, position)
            continue

        tag_end = _start_tag_end(text, name_match.end())
        attributes = _attribute_nodes(text, to_byte, name_match.end(), tag_end, interpolated=language == "svelte")
        children.append(
            SyntaxNode(NodeKind.OTHER, to_byte(position), to_byte(min(tag_end + 1, len(text))), name=tag.name, children=attributes)
        )

        if tag.name == "script" and tag_end < len(text) and (tag.get("type") or "").lower() in SCRIPT_TYPES:
            body_start = tag_end + 1
            body_end = text.find("</", body_start)
            while body_end != -1 and not text[body_end + 2 : body_end + 8].lower().startswith("script"):
                body_end = text.find("</", body_end + 2)
            if body_end == -1:
                body_end = len(text)
            body = text[body_start:body_end]
            if not body.strip():
                continue
            script = parse_embedded_script(body.encode("utf-8"), to_byte(body_start), _script_language(tag))
            if not script.valid:
                return SyntaxTree(
                    root=SyntaxNode(NodeKind.DOCUMENT, 0, encoded_length, children=children),
                    language=language,
                    valid=False,
                    error=f"script block: {script.error}",
                )
            children.append(script.root)

    return SyntaxTree(root=SyntaxNode(NodeKind.DOCUMENT, 0, encoded_length, children=children), language=language)
