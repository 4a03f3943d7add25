from __future__ import annotations

from ..domain import SourceDocument
from .markup_parser import parse_markup
from .script_parser import SCRIPT_LANGUAGES, parse_script
from .syntax import NodeKind, SyntaxNode, SyntaxTree

MARKUP_KINDS = {"html", "htm", "vue", "svelte"}

__all__ = ["NodeKind", "SyntaxNode", "SyntaxTree", "parse_document"]


def parse_document(document: SourceDocument) -> SyntaxTree:
    if document.kind in SCRIPT_LANGUAGES:
        return parse_script(document.encoded(), document.kind)
    if document.kind in MARKUP_KINDS:
        return parse_markup(document.text, document.kind)
    raise ValueError(f"Unsupported document type: {document.kind}")
