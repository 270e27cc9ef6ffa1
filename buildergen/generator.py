"""
Builder Generation Run

Ties the three stages together for one source module:

    [1] RecordParser.parse_source   → RecordInfo per target
    [2] classify_field per field    → ClassifiedField
    [3] emit_artifact + render      → generated module text

A run is all-or-nothing for fatal errors: any GenerationError from stage 1 or
2 propagates before anything is rendered. An attribute diagnostic is
different. It only replaces the output of its own record, and the other
records are still generated.
"""

from dataclasses import dataclass
from pathlib import Path

from .classifier import classify_field
from .codegen import RESERVED_MEMBERS, BuilderCodegen, emit_artifact, slot_name
from .errors import DuplicateDefinitionError, ParseError
from .models import ClassifiedField, Diagnostic, GeneratorConfig, RecordInfo, RecordOutcome
from .parser import RecordParser


@dataclass
class GenerationResult:
    """Output of one generation run."""

    records: list[RecordInfo]
    outcomes: list[RecordOutcome]
    source: str  # generated module text

    @property
    def diagnostics(self) -> list[Diagnostic]:
        return [o.diagnostic for o in self.outcomes if o.diagnostic is not None]

    @property
    def ok(self) -> bool:
        return not self.diagnostics


def build_outcome(record: RecordInfo, config: GeneratorConfig | None = None) -> RecordOutcome:
    """Classify and emit one record, field by field in declaration order.

    A field whose configuration failed to parse stops the record with its
    diagnostic. A misapplied ``each`` raises MisappliedAccumulatorError and
    clashing member names raise DuplicateDefinitionError.
    """
    config = config or GeneratorConfig()
    classified = []
    for field in record.fields:
        if field.attribute_error is not None:
            return RecordOutcome(record.record_name, diagnostic=field.attribute_error)
        classified.append(classify_field(field, record.record_name, config))
    check_member_names(record.record_name, classified, config)
    return RecordOutcome(record.record_name, artifact=emit_artifact(record, classified, config))


def check_member_names(record_name: str, classified: list[ClassifiedField], config: GeneratorConfig) -> None:
    """Raise DuplicateDefinitionError if two generated members would share a name.

    Covers setters against the builder's own methods, its slots and each
    other, and the record factory against the record's fields.
    """
    members = {name: f"the builder's own '{name}'" for name in RESERVED_MEMBERS}
    for c in classified:
        slot = slot_name(c.field.name)
        owner = f"the slot of field '{c.field.name}'"
        if slot in members:
            raise DuplicateDefinitionError(record_name, slot, members[slot], owner)
        members[slot] = owner
    for c in classified:
        owner = f"the setter for field '{c.field.name}'"
        if c.setter_name in members:
            raise DuplicateDefinitionError(record_name, c.setter_name, members[c.setter_name], owner)
        members[c.setter_name] = owner

    if any(c.field.name == config.factory_name for c in classified):
        raise DuplicateDefinitionError(
            record_name,
            config.factory_name,
            f"the record field '{config.factory_name}'",
            f"the {record_name}.{config.factory_name}() factory",
        )


def module_name_for(source_path: Path) -> str:
    """Import name of the source module: its file stem."""
    return Path(source_path).stem


def output_path_for(source_path: Path, config: GeneratorConfig | None = None) -> Path:
    """Default output path: ``records.py`` → ``records_builders.py`` beside it."""
    config = config or GeneratorConfig()
    source_path = Path(source_path)
    return source_path.with_name(f"{source_path.stem}{config.output_suffix}.py")


def generate_builders(
    source: bytes | str,
    source_path: Path,
    module_name: str | None = None,
    targets: list[str] | None = None,
    config: GeneratorConfig | None = None,
) -> GenerationResult:
    """Generate the builders module for ``source``.

    Raises:
        GenerationError: on an unsupported target shape, a misapplied
            accumulator, an unknown target or unparseable source.
    """
    config = config or GeneratorConfig()
    source_path = Path(source_path)
    module_name = module_name or module_name_for(source_path)

    records = RecordParser().parse_source(source, source_path, targets)
    outcomes = [build_outcome(record, config) for record in records]
    text = BuilderCodegen().generate(outcomes, module_name, source_path.name)
    return GenerationResult(records=records, outcomes=outcomes, source=text)


def generate_file(
    source_path: Path,
    module_name: str | None = None,
    targets: list[str] | None = None,
    config: GeneratorConfig | None = None,
) -> GenerationResult:
    """Read ``source_path`` and generate its builders module."""
    source_path = Path(source_path)
    try:
        source = source_path.read_bytes()
    except OSError as e:
        raise ParseError(f"Cannot read {source_path}: {e}") from e
    return generate_builders(source, source_path, module_name, targets, config)
