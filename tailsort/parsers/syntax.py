from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class NodeKind(StrEnum):
    DOCUMENT = "document"
    ATTRIBUTE = "attribute"
    CALL = "call"
    TAGGED_TEMPLATE = "tagged_template"
    MEMBER = "member"
    IDENTIFIER = "identifier"
    STRING = "string"
    TEMPLATE = "template"
    SEGMENT = "segment"
    SUBSTITUTION = "substitution"
    BINARY = "binary"
    CONDITIONAL = "conditional"
    GROUP = "group"
    ARRAY = "array"
    OBJECT = "object"
    PROPERTY = "property"
    OTHER = "other"


@dataclass
class SyntaxNode:
    """One node of the parsed document.

    ``start`` and ``end`` are byte offsets into the UTF-8 encoded document.
    ``name`` carries the attribute name, dotted callee path, member name,
    static property key or binary operator depending on ``kind``.

    Child layout per kind:

    * CALL: callee, then the arguments
    * TAGGED_TEMPLATE: tag expression, template
    * MEMBER: receiver
    * BINARY: left, right
    * CONDITIONAL: condition, consequence, alternative
    * PROPERTY: key, value
    * ATTRIBUTE: value, when present
    * TEMPLATE: SEGMENT and SUBSTITUTION nodes in source order
    """

    kind: NodeKind
    start: int
    end: int
    name: str | None = None
    quote: str | None = None
    children: list[SyntaxNode] = field(default_factory=list)


@dataclass
class SyntaxTree:
    root: SyntaxNode
    language: str
    valid: bool = True
    error: str | None = None
