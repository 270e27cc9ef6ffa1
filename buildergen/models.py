"""
Builder Generator Data Models

Typed dataclasses shared by the three generation stages:

    RecordParser      → RecordInfo / FieldSpec
    classify_record   → ClassifiedField (one StrategyKind per field)
    emit_artifact     → BuilderArtifact / SlotArtifact

All models are plain @dataclass objects. Everything produced by the parser is
frozen: a generation run reads the schema once and never mutates it.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Union


# ---------------------------------------------------------------------------
# Type descriptors
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class PlainType:
    """An opaque type reference, e.g. ``str`` or ``int | None``."""

    text: str

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class WrappedType:
    """A subscripted generic, e.g. ``Optional[int]`` or ``list[str]``.

    ``wrapper`` is the head text exactly as written (``typing.Optional`` stays
    ``typing.Optional``). Only ``inner`` (the first argument) is ever inspected
    by the classifier.
    """

    wrapper: str
    arguments: tuple["TypeDescriptor", ...]
    text: str

    @property
    def inner(self) -> "TypeDescriptor":
        return self.arguments[0]

    def __str__(self) -> str:
        return self.text


TypeDescriptor = Union[PlainType, WrappedType]


# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------


class Visibility:
    PUBLIC = "public"
    PRIVATE = "private"

    @staticmethod
    def of(name: str) -> str:
        """Python has no access modifiers; a leading underscore marks private."""
        return Visibility.PRIVATE if name.startswith("_") else Visibility.PUBLIC


@dataclass(frozen=True)
class FieldAttributes:
    """Parsed ``builder(...)`` configuration for one field."""

    each: str | None = None


@dataclass(frozen=True)
class Diagnostic:
    """A recoverable, user-fixable error reported against a source position."""

    path: str
    line: int
    column: int
    message: str

    def __str__(self) -> str:
        return f"{self.path}:{self.line}:{self.column}: error: {self.message}"


@dataclass(frozen=True)
class FieldSpec:
    """One declared field of a record class."""

    name: str
    visibility: str
    declared_type: TypeDescriptor
    attributes: FieldAttributes = field(default_factory=FieldAttributes)
    line: int = 0
    column: int = 0
    attribute_error: Diagnostic | None = None  # set when builder(...) failed to parse


@dataclass(frozen=True)
class RecordInfo:
    """Parsed record metadata from a Python module."""

    record_name: str  # e.g. "Command"
    fields: tuple[FieldSpec, ...]
    source_path: Path
    line: int = 0


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------


class StrategyKind(Enum):
    """How a builder slot is populated."""

    REQUIRED = "required"
    OPTIONAL_WRAPPED = "optional_wrapped"
    ACCUMULATING = "accumulating"


@dataclass(frozen=True)
class ClassifiedField:
    """A field paired with its population strategy.

    ``value_type`` is the type accepted by the setter: the declared type for
    REQUIRED, the optional's inner type for OPTIONAL_WRAPPED and the list's
    element type for ACCUMULATING.
    """

    field: FieldSpec
    kind: StrategyKind
    value_type: TypeDescriptor
    setter_name: str


# ---------------------------------------------------------------------------
# Emission
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SlotArtifact:
    """Generated pieces for one field, in declaration order."""

    field: FieldSpec
    kind: StrategyKind
    slot: str  # attribute name on the builder, e.g. "_name"
    initial: str  # initial value expression
    setter: str  # full method source, indented for the class body
    extraction: str  # statements run by build()


@dataclass(frozen=True)
class BuilderArtifact:
    """Everything needed to render one builder class."""

    record_name: str
    builder_name: str
    factory_name: str
    slots: tuple[SlotArtifact, ...]

    @property
    def field_order(self) -> list[str]:
        return [slot.field.name for slot in self.slots]


@dataclass(frozen=True)
class RecordOutcome:
    """Result of generating one record: an artifact or a diagnostic, never both."""

    record_name: str
    artifact: BuilderArtifact | None = None
    diagnostic: Diagnostic | None = None

    @property
    def ok(self) -> bool:
        return self.artifact is not None


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


@dataclass
class GeneratorConfig:
    """Resolved generator settings (defaults applied where missing)."""

    optional_wrappers: frozenset[str] = frozenset({"Optional"})
    collection_wrappers: frozenset[str] = frozenset({"list", "List"})
    builder_suffix: str = "Builder"
    factory_name: str = "builder"
    output_suffix: str = "_builders"
    config_path: str | None = None  # file the settings were read from, if any
