"""Tree-sitter powered Go parsing helpers."""

from __future__ import annotations

from typing import Iterator, List, Optional

import tree_sitter_go
from tree_sitter import Language, Node, Parser, Tree

GO_LANGUAGE = Language(tree_sitter_go.language())

_parser: Optional[Parser] = None

# Node types whose subtree is a function body.
BODY_PARENTS = frozenset({"function_declaration", "method_declaration", "func_literal"})


def get_parser() -> Parser:
    global _parser
    if _parser is None:
        _parser = Parser(GO_LANGUAGE)
    return _parser


def parse(source: bytes) -> Tree:
    return get_parser().parse(source)


def node_text(node: Node, source: bytes) -> str:
    return source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def named_children(node: Node) -> List[Node]:
    """Named children without interleaved comments."""
    return [child for child in node.named_children if child.type != "comment"]


def field_children(node: Node, name: str) -> List[Node]:
    return [child for child in node.children_by_field_name(name) if child.type != "comment"]


def string_value(node: Node, source: bytes) -> str:
    """Value of an interpreted or raw string literal (import paths only)."""
    text = node_text(node, source)
    if len(text) >= 2 and text[0] == text[-1] and text[0] in {'"', "`"}:
        return text[1:-1]
    return text


def is_function_body(node: Node) -> bool:
    parent = node.parent
    return (
        node.type == "block"
        and parent is not None
        and parent.type in BODY_PARENTS
    )


def iter_error_nodes(node: Node, *, skip_bodies: bool) -> Iterator[Node]:
    """Yield ERROR and MISSING nodes below node."""
    if skip_bodies and is_function_body(node):
        return
    if node.type == "ERROR" or node.is_missing:
        yield node
        return
    if not node.has_error:
        return
    for child in node.children:
        yield from iter_error_nodes(child, skip_bodies=skip_bodies)


def leading_comments(node: Node, source: bytes) -> List[str]:
    """Return the comment group immediately above node, in source order."""
    comments: List[str] = []
    expected_row = node.start_point[0]
    sibling = node.prev_named_sibling
    while sibling is not None and sibling.type == "comment":
        if sibling.end_point[0] != expected_row - 1:
            break
        previous = sibling.prev_named_sibling
        # A comment trailing the previous declaration's last line is not a doc comment.
        if previous is not None and previous.type != "comment" and previous.end_point[0] == sibling.start_point[0]:
            break
        comments.append(node_text(sibling, source))
        expected_row = sibling.start_point[0]
        sibling = previous
    comments.reverse()
    return comments


__all__ = [
    "GO_LANGUAGE",
    "field_children",
    "get_parser",
    "is_function_body",
    "iter_error_nodes",
    "leading_comments",
    "named_children",
    "node_text",
    "parse",
    "string_value",
]
