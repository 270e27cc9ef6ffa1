"""
tree-sitter helpers shared by the schema reader and the attribute parser.

Dependencies:
    pip install tree-sitter tree-sitter-python
"""

import tree_sitter_python
from tree_sitter import Language, Node, Parser

PY_LANGUAGE = Language(tree_sitter_python.language())


def get_parser() -> Parser:
    """Create and return a tree-sitter Python parser."""
    return Parser(language=PY_LANGUAGE)


def node_text(node: Node, source: bytes) -> str:
    """Return the source text spanned by ``node``."""
    return source[node.start_byte : node.end_byte].decode("utf-8")


def position(node: Node) -> tuple[int, int]:
    """Return the 1-based (line, column) of ``node``."""
    row, column = node.start_point
    return row + 1, column + 1


def find_error(node: Node) -> Node | None:
    """Return the first ERROR or MISSING node under ``node``, if any."""
    if node.type == "ERROR" or node.is_missing:
        return node
    if not node.has_error:
        return None
    for child in node.children:
        found = find_error(child)
        if found is not None:
            return found
    return node


def text_without_comments(node: Node, source: bytes) -> str:
    """Return the text spanned by ``node`` with every comment inside it removed."""
    pieces = []
    cursor = node.start_byte
    for comment in _comments(node):
        pieces.append(source[cursor : comment.start_byte])
        cursor = comment.end_byte
    pieces.append(source[cursor : node.end_byte])
    return b"".join(pieces).decode("utf-8")


def _comments(node: Node):
    for child in node.children:
        if child.type == "comment":
            yield child
        else:
            yield from _comments(child)


def unwrap_type(node: Node) -> Node:
    """Step through ``type`` wrapper nodes to the expression they hold."""
    while node.type == "type":
        inner = [c for c in node.named_children if c.type != "comment"]
        if len(inner) != 1:
            break
        node = inner[0]
    return node


def subscript_arguments(node: Node) -> list[Node]:
    """Return the argument nodes of ``Head[a, b, ...]``, comments skipped.

    The grammar reads an annotation either as a ``subscript`` expression or
    as a ``generic_type`` with a ``type_parameter`` list; both are handled.
    Returns an empty list for anything else.
    """
    node = unwrap_type(node)
    if node.type == "subscript":
        return node.children_by_field_name("subscript")
    if node.type == "generic_type":
        for child in node.named_children:
            if child.type == "type_parameter":
                return [unwrap_type(c) for c in child.named_children if c.type != "comment"]
    return []
