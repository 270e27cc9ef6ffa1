"""
Record Schema Reader

Parses a Python module with tree-sitter and extracts the record classes a
builder should be generated for. A record is a class whose body declares
annotated fields, typically a @dataclass:

    @derive_builder
    @dataclass(frozen=True)
    class Command:
        executable: str
        env: Optional[str]
        args: Annotated[list[str], builder(each="arg")]

Each annotated statement becomes a FieldSpec, in declaration order. The
``builder(...)`` metadata inside ``Annotated[...]`` is resolved by
attributes.parse_field_attributes. Failures there are kept on the field as
a Diagnostic instead of being raised.

Targets that are not single-variant records (enums, union aliases,
functions) raise UnsupportedShapeError and abort the run.
"""

from pathlib import Path

from tree_sitter import Node

from .attributes import parse_field_attributes
from .errors import (
    AttributeParseError,
    ParseError,
    RecordNotFoundError,
    UnsupportedShapeError,
)
from .models import Diagnostic, FieldAttributes, FieldSpec, RecordInfo, Visibility, WrappedType
from .syntax import find_error, get_parser, node_text, position, subscript_arguments, text_without_comments
from .types import parse_type

MARKER_DECORATOR = "derive_builder"

ENUM_BASES = frozenset({"Enum", "IntEnum", "StrEnum", "Flag", "IntFlag"})
ANNOTATED_WRAPPERS = frozenset({"Annotated", "typing.Annotated"})
CLASSVAR_WRAPPERS = frozenset({"ClassVar", "typing.ClassVar"})


def _last_segment(text: str) -> str:
    return text.split("[")[0].strip().split(".")[-1]


class RecordParser:
    """Parse Python modules to extract record names, fields and field configuration."""

    def __init__(self):
        self.parser = get_parser()

    def parse_source(
        self,
        source: bytes | str,
        source_path: Path,
        targets: list[str] | None = None,
    ) -> list[RecordInfo]:
        """Extract record metadata from module source.

        Args:
            source: Module source text.
            source_path: Path used in diagnostics.
            targets: Record names to generate for. When omitted, every class
                decorated with @derive_builder is a target.

        Returns:
            One RecordInfo per target, in the order the targets were found
            (source order for decorated classes, argument order otherwise).
        """
        if isinstance(source, str):
            source = source.encode("utf-8")
        source_path = Path(source_path)
        tree = self.parser.parse(source)

        error = find_error(tree.root_node)
        if error is not None:
            line, column = position(error)
            raise ParseError(f"Syntax error in {source_path}:{line}:{column}")

        definitions = self._top_level_definitions(tree.root_node, source)

        if targets is None:
            selected = [
                (name, node)
                for name, (node, decorators) in definitions.items()
                if any(self._is_marker(d, source) for d in decorators)
            ]
        else:
            selected = []
            for name in targets:
                if name not in definitions:
                    raise RecordNotFoundError(name, str(source_path))
                selected.append((name, definitions[name][0]))

        records = []
        for name, node in selected:
            self._check_shape(name, node, source)
            records.append(
                RecordInfo(
                    record_name=name,
                    fields=tuple(self._extract_fields(node, source, source_path)),
                    source_path=source_path,
                    line=position(node)[0],
                )
            )
        return records

    def _top_level_definitions(self, root: Node, source: bytes) -> dict[str, tuple[Node, list[Node]]]:
        """Map each module-level name to its defining node and decorators."""
        definitions: dict[str, tuple[Node, list[Node]]] = {}
        for child in root.named_children:
            decorators: list[Node] = []
            node = child
            if child.type == "decorated_definition":
                decorators = [c for c in child.named_children if c.type == "decorator"]
                node = child.child_by_field_name("definition")

            if node.type in ("class_definition", "function_definition"):
                name = node_text(node.child_by_field_name("name"), source)
            elif node.type == "expression_statement" and node.named_children[0].type == "assignment":
                node = node.named_children[0]
                left = node.child_by_field_name("left")
                if left.type != "identifier":
                    continue
                name = node_text(left, source)
            elif node.type == "type_alias_statement":
                name = _last_segment(node_text(node.named_children[0], source))
            else:
                continue
            definitions[name] = (node, decorators)
        return definitions

    def _is_marker(self, decorator: Node, source: bytes) -> bool:
        """True for @derive_builder, @buildergen.derive_builder and @derive_builder()."""
        expression = decorator.named_children[0]
        if expression.type == "call":
            expression = expression.child_by_field_name("function")
        return node_text(expression, source).split(".")[-1] == MARKER_DECORATOR

    def _check_shape(self, name: str, node: Node, source: bytes) -> None:
        """Raise UnsupportedShapeError unless ``node`` is a record class."""
        if node.type == "function_definition":
            raise UnsupportedShapeError(name, "a function")
        if node.type == "type_alias_statement":
            raise UnsupportedShapeError(name, "a type alias")
        if node.type == "assignment":
            value = node.child_by_field_name("right")
            text = node_text(value, source) if value is not None else ""
            if "|" in text or _last_segment(text) == "Union":
                raise UnsupportedShapeError(name, "a union type alias")
            raise UnsupportedShapeError(name, "a module-level assignment")

        superclasses = node.child_by_field_name("superclasses")
        if superclasses is None:
            return
        for base in superclasses.named_children:
            if base.type == "keyword_argument":
                continue
            if _last_segment(node_text(base, source)) in ENUM_BASES:
                raise UnsupportedShapeError(name, "an enum")

    def _extract_fields(self, class_node: Node, source: bytes, source_path: Path) -> list[FieldSpec]:
        """Extract annotated fields from the class body, in declaration order."""
        fields = []
        body = class_node.child_by_field_name("body")
        for statement in body.named_children if body is not None else []:
            if statement.type != "expression_statement":
                continue
            assignment = statement.named_children[0]
            if assignment.type != "assignment":
                continue
            left = assignment.child_by_field_name("left")
            type_node = assignment.child_by_field_name("type")
            if type_node is None or left.type != "identifier":
                continue  # plain class attribute, not a field

            field = self._read_field(node_text(left, source), type_node, source, left, source_path)
            if field is not None:
                fields.append(field)
        return fields

    def _read_field(
        self, name: str, type_node: Node, source: bytes, node: Node, source_path: Path
    ) -> FieldSpec | None:
        """Build the FieldSpec for one annotated statement (None for ClassVar)."""
        declared = parse_type(text_without_comments(type_node, source))
        if isinstance(declared, WrappedType) and declared.wrapper in CLASSVAR_WRAPPERS:
            return None

        line, column = position(node)
        attributes = FieldAttributes()
        attribute_error = None
        if isinstance(declared, WrappedType) and declared.wrapper in ANNOTATED_WRAPPERS:
            arguments = subscript_arguments(type_node)
            declared = declared.inner
            try:
                attributes = parse_field_attributes(arguments[1:], source)
            except AttributeParseError as e:
                attribute_error = Diagnostic(str(source_path), line, column, e.message)

        return FieldSpec(
            name=name,
            visibility=Visibility.of(name),
            declared_type=declared,
            attributes=attributes,
            line=line,
            column=column,
            attribute_error=attribute_error,
        )
