"""
Field Attribute Parser

Parses the ``builder(...)`` metadata a record field carries inside
``Annotated[...]``:

    tags: Annotated[list[str], builder(each="tag")]

The only recognised keyword is ``each``, whose value must be a string
literal. Errors raise AttributeParseError; the generator reports them as a
recoverable diagnostic for the record instead of aborting the run.
"""

import ast

from tree_sitter import Node

from .errors import AttributeParseError
from .models import FieldAttributes
from .syntax import get_parser, node_text, text_without_comments, unwrap_type

ATTRIBUTE_NAME = "builder"
KNOWN_KEYWORDS = ("each",)

# tree-sitter literal node type → Python type name used in error messages
_LITERAL_NAMES = {
    "integer": "int",
    "float": "float",
    "true": "bool",
    "false": "bool",
    "none": "None",
    "list": "list",
    "dictionary": "dict",
    "tuple": "tuple",
}


def is_builder_call(function_text: str) -> bool:
    """True for ``builder`` and qualified forms such as ``buildergen.builder``."""
    return function_text.split(".")[-1] == ATTRIBUTE_NAME


def _string_value(value_node, source: bytes) -> str:
    text = node_text(value_node, source)
    if value_node.type != "string":
        literal = _LITERAL_NAMES.get(value_node.type, value_node.type)
        raise AttributeParseError(f"Unexpected literal type `{literal}`", text)
    try:
        value = ast.literal_eval(text)
    except (ValueError, SyntaxError):
        raise AttributeParseError("Unexpected literal type `f-string`", text) from None
    if not isinstance(value, str):
        raise AttributeParseError(f"Unexpected literal type `{type(value).__name__}`", text)
    return value


def parse_attribute(text: str) -> FieldAttributes | None:
    """Parse one ``Annotated`` metadata expression given as text.

    Returns:
        FieldAttributes if ``text`` is a ``builder(...)`` call, None for any
        other metadata (which belongs to someone else and is ignored).

    Raises:
        AttributeParseError: if it is a ``builder(...)`` call that cannot be parsed.
    """
    source = text.encode("utf-8")
    tree = get_parser().parse(source)
    statements = [s for s in tree.root_node.named_children if s.type != "comment"]
    if len(statements) != 1 or statements[0].type != "expression_statement":
        if text.strip().split("(")[0].strip().split(".")[-1] == ATTRIBUTE_NAME:
            raise AttributeParseError("Malformed builder attribute", text)
        return None
    return parse_attribute_node(statements[0].named_children[0], source)


def parse_attribute_node(node: Node, source: bytes) -> FieldAttributes | None:
    """Parse one ``Annotated`` metadata node taken from the record's syntax tree."""
    expression = unwrap_type(node)
    if expression.type != "call":
        return None
    function = expression.child_by_field_name("function")
    if function is None or not is_builder_call(node_text(function, source)):
        return None
    text = text_without_comments(expression, source)
    if expression.has_error:
        raise AttributeParseError("Malformed builder attribute", text)

    arguments = expression.child_by_field_name("arguments")
    values: dict[str, str] = {}
    for argument in arguments.named_children if arguments is not None else []:
        if argument.type == "comment":
            continue
        if argument.type != "keyword_argument":
            raise AttributeParseError(
                f"Unexpected positional argument `{node_text(argument, source)}`", text
            )
        name = node_text(argument.child_by_field_name("name"), source)
        if name not in KNOWN_KEYWORDS:
            raise AttributeParseError(f"Unknown field: `{name}`", text)
        if name in values:
            raise AttributeParseError(f"Duplicate field `{name}`", text)
        values[name] = _string_value(argument.child_by_field_name("value"), source)

    return FieldAttributes(each=values.get("each"))


def parse_field_attributes(metadata: list[Node], source: bytes) -> FieldAttributes:
    """Resolve the configuration of a field from all of its ``Annotated`` metadata nodes."""
    found: FieldAttributes | None = None
    for node in metadata:
        attributes = parse_attribute_node(node, source)
        if attributes is None:
            continue
        if found is not None:
            raise AttributeParseError("Duplicate builder attribute", text_without_comments(node, source))
        found = attributes
    return found or FieldAttributes()
