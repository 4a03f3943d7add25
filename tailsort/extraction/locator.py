from __future__ import annotations

from dataclasses import dataclass

from ..domain import ClassSite, SiteKind
from ..errors import UnparseableSource
from ..parsers.syntax import NodeKind, SyntaxNode, SyntaxTree


@dataclass(frozen=True)
class LocatorOptions:
    function_names: frozenset[str]
    tag_names: frozenset[str]
    attribute_names: frozenset[str]
    property_names: frozenset[str]


class _LocatorWalk:
    """Collects class sites for one document.

    ``visit`` walks code that is not itself a class value and only reacts to
    recognized contexts. ``collect`` walks a value that ends up as a class
    string and turns every static literal it can reach into a site.
    """

    def __init__(self, source: bytes, options: LocatorOptions) -> None:
        self.source = source
        self.options = options
        self.sites: list[ClassSite] = []
        self._next_group = 0

    def _is_class_function(self, name: str | None) -> bool:
        if not name:
            return False
        return name in self.options.function_names or name.rsplit(".", 1)[-1] in self.options.function_names

    def _is_class_tag(self, name: str | None) -> bool:
        if not name:
            return False
        root = name.split(".", 1)[0]
        return name in self.options.tag_names or root in self.options.tag_names or self._is_class_function(name)

    def visit_children(self, node: SyntaxNode) -> None:
        for child in node.children:
            self.visit(child)

    def visit(self, node: SyntaxNode) -> None:
        match node.kind:
            case NodeKind.ATTRIBUTE:
                if node.name in self.options.attribute_names and node.children:
                    self.collect(node.children[0], SiteKind.ATTRIBUTE, node.name or "")
                else:
                    self.visit_children(node)
            case NodeKind.CALL:
                if self._is_class_function(node.name):
                    self._collect_arguments(node)
                else:
                    self.visit_children(node)
            case NodeKind.TAGGED_TEMPLATE:
                if self._is_class_tag(node.name) and len(node.children) > 1:
                    self.collect(node.children[1], SiteKind.TAGGED_TEMPLATE, node.name or "")
                else:
                    self.visit_children(node)
            case NodeKind.PROPERTY:
                if node.name in self.options.property_names and len(node.children) > 1:
                    self.collect(node.children[1], SiteKind.OBJECT_PROPERTY, node.name or "")
                else:
                    self.visit_children(node)
            case (
                NodeKind.DOCUMENT
                | NodeKind.MEMBER
                | NodeKind.IDENTIFIER
                | NodeKind.STRING
                | NodeKind.TEMPLATE
                | NodeKind.SEGMENT
                | NodeKind.SUBSTITUTION
                | NodeKind.BINARY
                | NodeKind.CONDITIONAL
                | NodeKind.GROUP
                | NodeKind.ARRAY
                | NodeKind.OBJECT
                | NodeKind.OTHER
            ):
                self.visit_children(node)
            case _:
                raise ValueError(f"Unhandled node kind: {node.kind}")

    def collect(self, node: SyntaxNode, kind: SiteKind, label: str) -> None:
        match node.kind:
            case NodeKind.STRING:
                self._emit_literal(node, kind, label)
            case NodeKind.TEMPLATE:
                self._collect_template(node, kind, label)
            case NodeKind.BINARY:
                self._collect_binary(node, kind, label)
            case NodeKind.CONDITIONAL:
                if len(node.children) != 3:
                    self.visit_children(node)
                    return
                condition, consequence, alternative = node.children
                self.visit(condition)
                self.collect(consequence, kind, label)
                self.collect(alternative, kind, label)
            case NodeKind.GROUP:
                for child in node.children:
                    self.collect(child, kind, label)
            case NodeKind.ARRAY:
                self._collect_array(node, label)
            case NodeKind.OBJECT:
                for child in node.children:
                    if child.kind == NodeKind.PROPERTY and len(child.children) > 1:
                        self.collect(child.children[1], SiteKind.OBJECT_PROPERTY, child.name or label)
                    else:
                        self.visit(child)
            case NodeKind.CALL:
                if self._is_class_function(node.name):
                    self._collect_arguments(node)
                elif node.name is None and node.children and node.children[0].kind == NodeKind.MEMBER:
                    # ["p-4", "flex"].join(" ") sorts the receiver, never the arguments
                    for receiver in node.children[0].children:
                        self.collect(receiver, kind, label)
                    for argument in node.children[1:]:
                        self.visit(argument)
                else:
                    self.visit_children(node)
            case (
                NodeKind.DOCUMENT
                | NodeKind.ATTRIBUTE
                | NodeKind.TAGGED_TEMPLATE
                | NodeKind.MEMBER
                | NodeKind.IDENTIFIER
                | NodeKind.SEGMENT
                | NodeKind.SUBSTITUTION
                | NodeKind.PROPERTY
                | NodeKind.OTHER
            ):
                self.visit(node)
            case _:
                raise ValueError(f"Unhandled node kind: {node.kind}")

    def _collect_arguments(self, call: SyntaxNode) -> None:
        for index, argument in enumerate(call.children[1:]):
            self.collect(argument, SiteKind.CALL_ARGUMENT, f"{call.name}#{index}")

    def _collect_binary(self, node: SyntaxNode, kind: SiteKind, label: str) -> None:
        if len(node.children) != 2:
            self.visit_children(node)
            return
        left, right = node.children
        if node.name == "+":
            self._collect_concatenation(node, kind, label)
        elif node.name == "&&":
            self.visit(left)
            self.collect(right, kind, label)
        elif node.name in ("||", "??"):
            self.collect(left, kind, label)
            self.collect(right, kind, label)
        else:
            self.visit_children(node)

    def _flatten_concatenation(self, node: SyntaxNode) -> list[SyntaxNode]:
        if node.kind == NodeKind.BINARY and node.name == "+" and len(node.children) == 2:
            return self._flatten_concatenation(node.children[0]) + self._flatten_concatenation(node.children[1])
        return [node]

    def _collect_concatenation(self, node: SyntaxNode, kind: SiteKind, label: str) -> None:
        operands = self._flatten_concatenation(node)
        last = len(operands) - 1
        for index, operand in enumerate(operands):
            joined_left, joined_right = index > 0, index < last
            if operand.kind == NodeKind.STRING:
                self._emit_segment(operand.start + 1, operand.end - 1, kind, label, operand.quote, joined_left, joined_right)
            elif operand.kind == NodeKind.TEMPLATE:
                self._collect_template(operand, kind, label, joined_left, joined_right)
            else:
                self.visit(operand)

    def _collect_template(
        self,
        node: SyntaxNode,
        kind: SiteKind,
        label: str,
        joined_left: bool = False,
        joined_right: bool = False,
    ) -> None:
        parts = node.children
        dynamic = any(part.kind == NodeKind.SUBSTITUTION for part in parts)
        if not dynamic and not joined_left and not joined_right:
            self._emit_literal(node, kind, label)
            return
        if not dynamic:
            self._emit_segment(node.start + 1, node.end - 1, kind, label, "`", joined_left, joined_right)
            return

        last = len(parts) - 1
        for index, part in enumerate(parts):
            if part.kind == NodeKind.SUBSTITUTION:
                for inner in part.children:
                    self.visit(inner)
                continue
            self._emit_segment(
                part.start,
                part.end,
                kind,
                label,
                None,
                joined_left or index > 0,
                joined_right or index < last,
                dynamic=True,
            )

    def _collect_array(self, node: SyntaxNode, label: str) -> None:
        if self._is_token_group(node.children):
            group = self._next_group
            self._next_group += 1
            for element in node.children:
                self._emit_literal(element, SiteKind.ARRAY_ELEMENT, label, group=group)
            return
        for element in node.children:
            self.collect(element, SiteKind.ARRAY_ELEMENT, label)

    def _is_token_group(self, elements: list[SyntaxNode]) -> bool:
        if len(elements) < 2:
            return False
        for element in elements:
            if element.kind != NodeKind.STRING:
                return False
            content = self._content(element.start + 1, element.end - 1)
            if not content or content != content.strip() or len(content.split()) != 1:
                return False
            if any(char in content for char in "\"'`\\"):
                return False
        return True

    def _content(self, start: int, end: int) -> str:
        return self.source[start:end].decode("utf-8")

    def _emit_literal(self, node: SyntaxNode, kind: SiteKind, label: str, group: int | None = None) -> None:
        start, end = node.start + 1, node.end - 1
        if end < start:
            return
        self.sites.append(
            ClassSite(
                start=start,
                end=end,
                kind=kind,
                quote=node.quote,
                raw=self._content(start, end),
                label=label,
                group=group,
            )
        )

    def _emit_segment(
        self,
        start: int,
        end: int,
        kind: SiteKind,
        label: str,
        quote: str | None,
        joined_left: bool,
        joined_right: bool,
        dynamic: bool = False,
    ) -> None:
        text = self._content(start, end)
        stripped = text.strip()
        if not stripped:
            return
        leading = text[: len(text) - len(text.lstrip())]
        trailing = text[len(text.rstrip()) :]
        self.sites.append(
            ClassSite(
                start=start + len(leading.encode("utf-8")),
                end=end - len(trailing.encode("utf-8")),
                kind=kind,
                quote=quote,
                raw=stripped,
                label=label,
                dynamic=dynamic,
                pinned_head=joined_left and not leading,
                pinned_tail=joined_right and not trailing,
            )
        )


def locate_sites(tree: SyntaxTree | None, source: bytes, options: LocatorOptions) -> list[ClassSite]:
    if tree is None:
        raise UnparseableSource("no syntax tree")
    if not tree.valid:
        raise UnparseableSource(tree.error or "syntax error")

    walk = _LocatorWalk(source, options)
    walk.visit(tree.root)
    return sorted(walk.sites, key=lambda site: site.start)
