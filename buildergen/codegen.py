"""
Builder Artifact Emitter

Turns classified fields into the pieces of a builder class and renders the
generated module.

Storage model: every field gets one ``__slots__`` entry named ``_<field>``.
``_UNSET`` marks an absent slot, so ``None`` stays a legitimate value.

    REQUIRED          initial _UNSET   setter stores the value
    OPTIONAL_WRAPPED  initial None     setter stores the value (never blocks build)
    ACCUMULATING      initial []       setter appends one element

``build()`` checks the slots in declaration order and returns None as soon as
one is ``_UNSET``. Otherwise it returns a new record built from shallow
copies of the slot values. It binds no locals, so a field may be named
``_copy``, ``self`` or after the record itself.
"""

import re

from .models import (
    BuilderArtifact,
    ClassifiedField,
    GeneratorConfig,
    RecordInfo,
    RecordOutcome,
    SlotArtifact,
    StrategyKind,
    Visibility,
)

INDENT = "    "

INITIAL_VALUES = {
    StrategyKind.REQUIRED: "_UNSET",
    StrategyKind.OPTIONAL_WRAPPED: "None",
    StrategyKind.ACCUMULATING: "[]",
}

STORE_PATTERN = """\
    def {setter}(self, value: {value_type}) -> {builder}:
        self.{slot} = value
        return self
"""

APPEND_PATTERN = """\
    def {setter}(self, value: {value_type}) -> {builder}:
        if self.{slot} is _UNSET:
            self.{slot} = [value]
        else:
            self.{slot}.append(value)
        return self
"""

SETTER_PATTERNS = {
    StrategyKind.REQUIRED: STORE_PATTERN,
    StrategyKind.OPTIONAL_WRAPPED: STORE_PATTERN,
    StrategyKind.ACCUMULATING: APPEND_PATTERN,
}

GUARD_PATTERN = """\
        if self.{slot} is _UNSET:
            return None
"""

EXTRACTION_PATTERN = "_copy.copy(self.{slot})"

# Members every builder class defines besides its setters and slots
RESERVED_MEMBERS = ("__init__", "__repr__", "__slots__", "build", "missing_fields")


def camel_to_snake(name: str) -> str:
    """Transform CamelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    s2 = re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1)
    return s2.lower()


def slot_name(field_name: str) -> str:
    return f"_{field_name}"


def emit_slot(classified: ClassifiedField, builder_name: str) -> SlotArtifact:
    """Emit slot, initial value, setter and extraction for one field."""
    field = classified.field
    slot = slot_name(field.name)
    setter = SETTER_PATTERNS[classified.kind].format(
        setter=classified.setter_name,
        value_type=classified.value_type,
        builder=builder_name,
        slot=slot,
    )
    return SlotArtifact(
        field=field,
        kind=classified.kind,
        slot=slot,
        initial=INITIAL_VALUES[classified.kind],
        setter=setter,
        extraction=EXTRACTION_PATTERN.format(slot=slot),
    )


def emit_artifact(
    record: RecordInfo,
    classified: list[ClassifiedField],
    config: GeneratorConfig | None = None,
) -> BuilderArtifact:
    """Assemble the BuilderArtifact for a fully classified record."""
    config = config or GeneratorConfig()
    builder_name = f"{record.record_name}{config.builder_suffix}"
    return BuilderArtifact(
        record_name=record.record_name,
        builder_name=builder_name,
        factory_name=config.factory_name,
        slots=tuple(emit_slot(c, builder_name) for c in classified),
    )


class BuilderCodegen:
    """Render the generated builders module from per-record outcomes."""

    def generate(self, outcomes: list[RecordOutcome], module_name: str, source_name: str) -> str:
        """Generate the full ``<module>_builders.py`` content."""
        artifacts = [o.artifact for o in outcomes if o.artifact is not None]

        body = []
        for outcome in outcomes:
            if outcome.artifact is not None:
                body.append(self._generate_builder(outcome.artifact))
                body.append(self._generate_factory(outcome.artifact))
            else:
                body.append(self._generate_diagnostic(outcome))

        return (
            self._generate_header(module_name, source_name, artifacts)
            + "\n\n".join(body)
        )

    def _generate_header(self, module_name: str, source_name: str, artifacts: list[BuilderArtifact]) -> str:
        """Generate the auto-generated banner, imports and the _UNSET marker."""
        lines = [
            "# AUTO-GENERATED by buildergen",
            "# DO NOT EDIT MANUALLY",
            f"# Source: {source_name}",
            "",
            f'"""Builders for the records defined in {module_name}."""',
            "",
            "from __future__ import annotations",
            "",
            "import copy as _copy",
            "from typing import Optional",
            "",
        ]
        if artifacts:
            names = ", ".join(a.record_name for a in artifacts)
            lines.append(f"from {module_name} import {names}")
            lines.append("")
        exported = ", ".join(f'"{a.builder_name}"' for a in artifacts)
        lines.append(f"__all__ = [{exported}]")
        lines.extend([
            "",
            "",
            "class _Unset:",
            f'{INDENT}"""Marker for a builder slot that has not been set."""',
            "",
            f"{INDENT}__slots__ = ()",
            "",
            f"{INDENT}def __repr__(self) -> str:",
            f'{INDENT * 2}return "<unset>"',
            "",
            "",
            "_UNSET = _Unset()",
            "",
            "",
            "",
        ])
        return "\n".join(lines)

    def _generate_builder(self, artifact: BuilderArtifact) -> str:
        """Generate the builder class for one record."""
        slot_names = "".join(f'"{slot.slot}", ' for slot in artifact.slots)
        lines = [
            f"class {artifact.builder_name}:",
            f'{INDENT}"""Staging builder for {artifact.record_name}."""',
            "",
            f"{INDENT}__slots__ = ({slot_names.rstrip(' ')})",
            "",
            f"{INDENT}def __init__(self) -> None:",
        ]
        if artifact.slots:
            lines.extend(f"{INDENT * 2}self.{slot.slot} = {slot.initial}" for slot in artifact.slots)
        else:
            lines.append(f"{INDENT * 2}pass")
        lines.append("")

        for slot in artifact.slots:
            lines.append(slot.setter)

        lines.append(self._generate_missing_fields(artifact))
        lines.append(self._generate_build(artifact))
        lines.append(self._generate_repr(artifact))
        return "\n".join(lines).rstrip("\n") + "\n"

    def _slot_pairs(self, slots) -> str:
        """Render ``(("name", self._name), ...)`` for the given slots."""
        pairs = "".join(f'("{slot.field.name}", self.{slot.slot}), ' for slot in slots)
        return f"({pairs.rstrip(' ')})"

    def _generate_missing_fields(self, artifact: BuilderArtifact) -> str:
        required = [s for s in artifact.slots if s.kind is StrategyKind.REQUIRED]
        return "\n".join([
            f"{INDENT}def missing_fields(self) -> tuple[str, ...]:",
            f'{INDENT * 2}"""Names of required fields that have not been set, in declaration order."""',
            f"{INDENT * 2}slots = {self._slot_pairs(required)}",
            f"{INDENT * 2}return tuple(name for name, value in slots if value is _UNSET)",
            "",
        ])

    def _generate_build(self, artifact: BuilderArtifact) -> str:
        lines = [
            f"{INDENT}def build(self) -> Optional[{artifact.record_name}]:",
            f'{INDENT * 2}"""Return a new {artifact.record_name}, or None if a required field is unset."""',
        ]
        for slot in artifact.slots:
            lines.append(GUARD_PATTERN.format(slot=slot.slot).rstrip("\n"))
        if artifact.slots:
            lines.append(f"{INDENT * 2}return {artifact.record_name}(")
            lines.extend(f"{INDENT * 3}{slot.field.name}={slot.extraction}," for slot in artifact.slots)
            lines.append(f"{INDENT * 2})")
        else:
            lines.append(f"{INDENT * 2}return {artifact.record_name}()")
        lines.append("")
        return "\n".join(lines)

    def _generate_repr(self, artifact: BuilderArtifact) -> str:
        # Private fields (leading underscore) are left out
        public = [s for s in artifact.slots if s.field.visibility == Visibility.PUBLIC]
        return "\n".join([
            f"{INDENT}def __repr__(self) -> str:",
            f"{INDENT * 2}slots = {self._slot_pairs(public)}",
            f'{INDENT * 2}fields = ", ".join(name + "=" + repr(value) for name, value in slots)',
            f'{INDENT * 2}return "{artifact.builder_name}(" + fields + ")"',
            "",
        ])

    def _generate_factory(self, artifact: BuilderArtifact) -> str:
        """Attach ``Record.builder()`` returning a fresh builder."""
        function = f"_{camel_to_snake(artifact.record_name)}_{artifact.factory_name}"
        return "\n".join([
            f"def {function}(cls) -> {artifact.builder_name}:",
            f'{INDENT}"""Return a new {artifact.builder_name} with every slot at its initial value."""',
            f"{INDENT}return {artifact.builder_name}()",
            "",
            "",
            f"{artifact.record_name}.{artifact.factory_name} = classmethod({function})",
            "",
        ])

    def _generate_diagnostic(self, outcome: RecordOutcome) -> str:
        """Emit the diagnostic in place of the builder the record would have had."""
        return "\n".join([
            f"# {outcome.diagnostic}",
            f"# No builder was generated for {outcome.record_name}.",
            "",
        ])
