from __future__ import annotations

import logging
from typing import Callable

import tree_sitter_javascript
import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .syntax import NodeKind, SyntaxNode, SyntaxTree

logger = logging.getLogger(__name__)

JAVASCRIPT = Language(tree_sitter_javascript.language())
TYPESCRIPT = Language(tree_sitter_typescript.language_typescript())
TSX = Language(tree_sitter_typescript.language_tsx())

SCRIPT_LANGUAGES = {
    "js": JAVASCRIPT,
    "jsx": JAVASCRIPT,
    "mjs": JAVASCRIPT,
    "cjs": JAVASCRIPT,
    "ts": TYPESCRIPT,
    "mts": TYPESCRIPT,
    "cts": TYPESCRIPT,
    "tsx": TSX,
}

WRAPPER_TYPES = {
    "parenthesized_expression",
    "as_expression",
    "satisfies_expression",
    "non_null_expression",
    "jsx_expression",
}
IDENTIFIER_TYPES = {"identifier", "property_identifier", "this"}
PROPERTY_KEY_TYPES = {"property_identifier", "identifier"}


class _TreeBuilder:
    def __init__(self, source: bytes, shift: int = 0) -> None:
        self.source = source
        self.shift = shift
        self._handlers: dict[str, Callable[[Node], SyntaxNode]] = {
            "program": self._document,
            "string": self._string,
            "template_string": self._template,
            "call_expression": self._call,
            "member_expression": self._member,
            "identifier": self._identifier,
            "binary_expression": self._binary,
            "ternary_expression": self._conditional,
            "array": self._array,
            "object": self._object,
            "pair": self._pair,
            "jsx_attribute": self._attribute,
        }
        for wrapper in WRAPPER_TYPES:
            self._handlers[wrapper] = self._group

    def _text(self, node: Node) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")

    def _make(
        self,
        kind: NodeKind,
        node: Node,
        name: str | None = None,
        quote: str | None = None,
        children: list[SyntaxNode | None] | None = None,
    ) -> SyntaxNode:
        return SyntaxNode(
            kind=kind,
            start=node.start_byte + self.shift,
            end=node.end_byte + self.shift,
            name=name,
            quote=quote,
            children=[child for child in children or [] if child is not None],
        )

    def convert(self, node: Node | None) -> SyntaxNode | None:
        if node is None or node.type == "comment":
            return None
        handler = self._handlers.get(node.type)
        if handler is not None:
            return handler(node)
        return self._make(NodeKind.OTHER, node, children=self.convert_many(node.named_children))

    def convert_many(self, nodes: list[Node]) -> list[SyntaxNode | None]:
        return [self.convert(node) for node in nodes]

    def _document(self, node: Node) -> SyntaxNode:
        return self._make(NodeKind.DOCUMENT, node, children=self.convert_many(node.named_children))

    def _string(self, node: Node) -> SyntaxNode:
        return self._make(NodeKind.STRING, node, quote=self._text(node)[:1])

    def _template(self, node: Node) -> SyntaxNode:
        children: list[SyntaxNode | None] = []
        cursor = node.start_byte + 1
        end = node.end_byte - 1
        for child in node.named_children:
            if child.type != "template_substitution":
                continue
            if child.start_byte > cursor:
                children.append(SyntaxNode(NodeKind.SEGMENT, cursor + self.shift, child.start_byte + self.shift))
            children.append(
                self._make(NodeKind.SUBSTITUTION, child, children=self.convert_many(child.named_children))
            )
            cursor = child.end_byte
        if end > cursor:
            children.append(SyntaxNode(NodeKind.SEGMENT, cursor + self.shift, end + self.shift))
        return self._make(NodeKind.TEMPLATE, node, quote="`", children=children)

    def _callee_path(self, node: Node | None) -> str | None:
        if node is None:
            return None
        if node.type in IDENTIFIER_TYPES:
            return self._text(node)
        if node.type == "member_expression":
            receiver = self._callee_path(node.child_by_field_name("object"))
            prop = node.child_by_field_name("property")
            if receiver and prop is not None:
                return f"{receiver}.{self._text(prop)}"
        return None

    def _call(self, node: Node) -> SyntaxNode:
        function = node.child_by_field_name("function")
        arguments = node.child_by_field_name("arguments")
        name = self._callee_path(function)
        callee = self.convert(function) or SyntaxNode(NodeKind.OTHER, node.start_byte + self.shift, node.start_byte + self.shift)

        if arguments is not None and arguments.type == "template_string":
            return self._make(NodeKind.TAGGED_TEMPLATE, node, name=name, children=[callee, self._template(arguments)])

        argument_nodes = arguments.named_children if arguments is not None else []
        return self._make(NodeKind.CALL, node, name=name, children=[callee, *self.convert_many(argument_nodes)])

    def _member(self, node: Node) -> SyntaxNode:
        prop = node.child_by_field_name("property")
        return self._make(
            NodeKind.MEMBER,
            node,
            name=self._text(prop) if prop is not None else None,
            children=[self.convert(node.child_by_field_name("object"))],
        )

    def _identifier(self, node: Node) -> SyntaxNode:
        return self._make(NodeKind.IDENTIFIER, node, name=self._text(node))

    def _binary(self, node: Node) -> SyntaxNode:
        operator = node.child_by_field_name("operator")
        return self._make(
            NodeKind.BINARY,
            node,
            name=operator.type if operator is not None else None,
            children=[
                self.convert(node.child_by_field_name("left")),
                self.convert(node.child_by_field_name("right")),
            ],
        )

    def _conditional(self, node: Node) -> SyntaxNode:
        return self._make(
            NodeKind.CONDITIONAL,
            node,
            children=[
                self.convert(node.child_by_field_name("condition")),
                self.convert(node.child_by_field_name("consequence")),
                self.convert(node.child_by_field_name("alternative")),
            ],
        )

    def _group(self, node: Node) -> SyntaxNode:
        inner = [child for child in node.named_children if child.type != "comment"]
        return self._make(NodeKind.GROUP, node, children=[self.convert(inner[0])] if inner else [])

    def _array(self, node: Node) -> SyntaxNode:
        return self._make(NodeKind.ARRAY, node, children=self.convert_many(node.named_children))

    def _object(self, node: Node) -> SyntaxNode:
        return self._make(NodeKind.OBJECT, node, children=self.convert_many(node.named_children))

    def _pair(self, node: Node) -> SyntaxNode:
        key = node.child_by_field_name("key")
        name = None
        if key is not None and key.type in PROPERTY_KEY_TYPES:
            name = self._text(key)
        elif key is not None and key.type == "string":
            name = self._text(key)[1:-1]
        return self._make(
            NodeKind.PROPERTY,
            node,
            name=name,
            children=[self.convert(key), self.convert(node.child_by_field_name("value"))],
        )

    def _attribute(self, node: Node) -> SyntaxNode:
        named = [child for child in node.named_children if child.type != "comment"]
        name = self._text(named[0]) if named else None
        value = self.convert(named[1]) if len(named) > 1 else None
        return self._make(NodeKind.ATTRIBUTE, node, name=name, children=[value])


def _first_error(node: Node) -> Node | None:
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current
        if current.has_error:
            stack.extend(reversed(current.children))
    return None


def _describe_error(root: Node) -> str:
    error = _first_error(root)
    if error is None:
        return "syntax error"
    row, column = error.start_point
    label = f"missing {error.type}" if error.is_missing else "unexpected input"
    return f"{label} at line {row + 1}, column {column + 1}"


def parse_script(source: bytes, language: str) -> SyntaxTree:
    grammar = SCRIPT_LANGUAGES.get(language)
    if grammar is None:
        raise ValueError(f"Unsupported script language: {language}")

    tree = Parser(grammar).parse(source)
    root = tree.root_node
    converted = _TreeBuilder(source).convert(root) or SyntaxNode(NodeKind.DOCUMENT, 0, len(source))
    if root.has_error:
        return SyntaxTree(root=converted, language=language, valid=False, error=_describe_error(root))
    return SyntaxTree(root=converted, language=language)


def parse_embedded_script(source: bytes, offset: int, language: str) -> SyntaxTree:
    """Parse a script block that sits at ``offset`` bytes inside a larger document."""
    grammar = SCRIPT_LANGUAGES.get(language, JAVASCRIPT)
    tree = Parser(grammar).parse(source)
    root = tree.root_node
    converted = _TreeBuilder(source, shift=offset).convert(root) or SyntaxNode(NodeKind.DOCUMENT, offset, offset)
    if root.has_error:
        return SyntaxTree(root=converted, language=language, valid=False, error=_describe_error(root))
    return SyntaxTree(root=converted, language=language)


def parse_expression(source: bytes, offset: int) -> SyntaxNode | None:
    """Parse a bound attribute value such as Vue ``:class`` as a JavaScript expression.

    Returns ``None`` when the value is not a valid expression.
    """
    wrapped = b"(" + source + b")"
    tree = Parser(JAVASCRIPT).parse(wrapped)
    root = tree.root_node
    if root.has_error or not root.named_children:
        return None
    statement = root.named_children[0]
    if statement.type != "expression_statement" or not statement.named_children:
        return None
    return _TreeBuilder(wrapped, shift=offset - 1).convert(statement.named_children[0])
