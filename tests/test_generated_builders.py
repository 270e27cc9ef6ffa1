"""
End-to-end tests: generate builders for a record module, import them, use them.

Validates:
- Required-only records build iff every setter was called
- An unset Optional field builds as None
- N accumulator calls give N elements in call order; zero gives []
- Declaration order is kept in the slots and the constructed record
- build() is repeatable and does not consume the builder
- Record.builder() returns a fresh builder each time
- missing_fields() names the unset required fields
- Generation failures produce no output
- Commented multi-line Annotated[...] keeps its builder(...) configuration
- Fields may reuse names the generated module relies on
- Setter, slot, method and factory name clashes abort the run
"""

import dataclasses

import pytest

from buildergen.errors import (
    DuplicateDefinitionError,
    MisappliedAccumulatorError,
    UnsupportedShapeError,
)
from buildergen.generator import generate_file


COMMAND_RECORDS = """
from dataclasses import dataclass
from typing import Annotated, Optional

from buildergen import builder, derive_builder


@derive_builder
@dataclass(frozen=True)
class Command:
    name: str
    id: Optional[int]
    tags: Annotated[list[str], builder(each="tag")]
"""


@pytest.fixture
def command(load_builders):
    records, builders, _ = load_builders(COMMAND_RECORDS)
    return records.Command, builders.CommandBuilder


# ---------------------------------------------------------------------------
# Concrete scenario
# ---------------------------------------------------------------------------


def test_missing_required_field_fails(command):
    Command, _ = command
    assert Command.builder().tag("x").tag("y").build() is None


def test_complete_builder_succeeds(command):
    Command, _ = command
    built = Command.builder().name("Bob").tag("x").tag("y").build()
    assert built == Command(name="Bob", id=None, tags=["x", "y"])


def test_factory_returns_builder_instances(command):
    Command, CommandBuilder = command
    first = Command.builder()
    second = Command.builder()
    assert isinstance(first, CommandBuilder)
    assert first is not second


# ---------------------------------------------------------------------------
# Strategies
# ---------------------------------------------------------------------------


def test_optional_set_value(command):
    Command, _ = command
    assert Command.builder().name("Bob").id(7).build().id == 7


def test_accumulator_never_called_gives_empty_list(command):
    Command, _ = command
    assert Command.builder().name("Bob").build().tags == []


@pytest.mark.parametrize("count", [1, 3, 10])
def test_accumulator_keeps_call_order(command, count):
    Command, _ = command
    b = Command.builder().name("Bob")
    for i in range(count):
        b.tag(f"t{i}")
    assert b.build().tags == [f"t{i}" for i in range(count)]


def test_no_whole_collection_setter(command):
    _, CommandBuilder = command
    assert not hasattr(CommandBuilder, "tags")


def test_required_accepts_none_as_a_value(load_builders):
    records, _, _ = load_builders(
        """
        from dataclasses import dataclass
        from buildergen import derive_builder

        @derive_builder
        @dataclass
        class Box:
            content: object
        """
    )
    assert records.Box.builder().build() is None
    assert records.Box.builder().content(None).build() == records.Box(content=None)


def test_required_only_record_builds_iff_all_set(load_builders):
    records, _, _ = load_builders(
        """
        from dataclasses import dataclass
        from buildergen import derive_builder

        @derive_builder
        @dataclass
        class Point:
            x: int
            y: int
            z: int
        """
    )
    Point = records.Point
    setters = ["x", "y", "z"]
    for mask in range(8):
        b = Point.builder()
        for bit, name in enumerate(setters):
            if mask & (1 << bit):
                getattr(b, name)(bit)
        built = b.build()
        if mask == 7:
            assert built == Point(x=0, y=1, z=2)
        else:
            assert built is None


def test_optional_list_with_each_is_plain_optional(load_builders):
    records, builders, _ = load_builders(
        """
        from dataclasses import dataclass
        from typing import Annotated, Optional
        from buildergen import builder, derive_builder

        @derive_builder
        @dataclass
        class Job:
            labels: Annotated[Optional[list[str]], builder(each="label")]
        """
    )
    assert not hasattr(builders.JobBuilder, "label")
    assert records.Job.builder().build().labels is None
    assert records.Job.builder().labels(["a", "b"]).build().labels == ["a", "b"]


def test_commented_multiline_annotation_keeps_accumulator(load_builders):
    records, builders, result = load_builders(
        """
        from dataclasses import dataclass
        from typing import Annotated
        from buildergen import builder, derive_builder

        @derive_builder
        @dataclass
        class Command:
            name: str
            tags: Annotated[
                list[str],  # one per call, don't pass a list
                builder(each="tag"),
            ]
        """
    )
    assert result.ok
    assert hasattr(builders.CommandBuilder, "tag")
    assert not hasattr(builders.CommandBuilder, "tags")
    built = records.Command.builder().name("Bob").tag("x").tag("y").build()
    assert built.tags == ["x", "y"]


# ---------------------------------------------------------------------------
# Field names that match generated module names
# ---------------------------------------------------------------------------


def test_field_named_like_module_helpers(load_builders):
    records, _, _ = load_builders(
        """
        from dataclasses import dataclass
        from buildergen import derive_builder

        @derive_builder
        @dataclass
        class Cfg:
            _copy: bool
            _UNSET: int
            value: str
        """
    )
    built = records.Cfg.builder()._copy(True)._UNSET(0).value("v").build()
    assert built == records.Cfg(_copy=True, _UNSET=0, value="v")
    assert records.Cfg.builder()._copy(True).build() is None


def test_field_named_after_its_record(load_builders):
    records, _, _ = load_builders(
        """
        from dataclasses import dataclass
        from buildergen import derive_builder

        @derive_builder
        @dataclass
        class Node:
            Node: str
        """
    )
    built = records.Node.builder().Node("x").build()
    assert isinstance(built, records.Node)
    assert built.Node == "x"


# ---------------------------------------------------------------------------
# Order, repeatability, diagnostics
# ---------------------------------------------------------------------------


def test_declaration_order_preserved(load_builders):
    records, builders, _ = load_builders(
        """
        from dataclasses import dataclass
        from typing import Optional
        from buildergen import derive_builder

        @derive_builder
        @dataclass
        class Ordered:
            zeta: int
            alpha: Optional[str]
            mid: float
        """
    )
    assert builders.OrderedBuilder.__slots__ == ("_zeta", "_alpha", "_mid")
    built = records.Ordered.builder().mid(1.5).zeta(3).build()
    assert [f.name for f in dataclasses.fields(built)] == ["zeta", "alpha", "mid"]
    assert dataclasses.astuple(built) == (3, None, 1.5)


def test_build_is_repeatable_and_independent(command):
    Command, _ = command
    b = Command.builder().name("Bob").tag("x")
    first = b.build()
    b.tag("y")
    second = b.build()
    assert first.tags == ["x"]
    assert second.tags == ["x", "y"]


def test_build_can_be_retried_after_failure(command):
    Command, _ = command
    b = Command.builder()
    assert b.build() is None
    b.name("Ann")
    assert b.build().name == "Ann"


def test_missing_fields(command):
    Command, _ = command
    b = Command.builder()
    assert b.missing_fields() == ("name",)
    b.name("Bob")
    assert b.missing_fields() == ()


def test_repr_shows_slot_state(command):
    Command, _ = command
    assert repr(Command.builder().tag("x")) == "CommandBuilder(name=<unset>, id=None, tags=['x'])"


def test_private_field_setter(load_builders):
    records, _, _ = load_builders(
        """
        from dataclasses import dataclass
        from buildergen import derive_builder

        @derive_builder
        @dataclass
        class Session:
            user: str
            _token: str
        """
    )
    b = records.Session.builder().user("ann")
    assert b.build() is None
    assert b._token("t0k").build() == records.Session(user="ann", _token="t0k")
    assert "t0k" not in repr(b)


def test_explicit_target_without_decorator(load_builders):
    records, builders, _ = load_builders(
        """
        from dataclasses import dataclass

        @dataclass
        class Plain:
            value: int
        """,
        targets=["Plain"],
    )
    assert records.Plain.builder().value(1).build() == records.Plain(value=1)


def test_attribute_error_skips_only_that_record(load_builders):
    records, builders, result = load_builders(
        """
        from dataclasses import dataclass
        from typing import Annotated
        from buildergen import derive_builder

        def builder(**kwargs):
            return kwargs

        @derive_builder
        @dataclass
        class Broken:
            tags: Annotated[list[str], builder(eachh="tag")]

        @derive_builder
        @dataclass
        class Fine:
            name: str
        """
    )
    assert not result.ok
    assert [str(d.message) for d in result.diagnostics] == ["Unknown field: `eachh`"]
    assert not hasattr(builders, "BrokenBuilder")
    assert records.Fine.builder().name("ok").build() == records.Fine(name="ok")


# ---------------------------------------------------------------------------
# Fatal errors
# ---------------------------------------------------------------------------


def test_each_on_non_list_aborts(write_records):
    source_path = write_records(
        """
        from dataclasses import dataclass
        from typing import Annotated
        from buildergen import builder, derive_builder

        @derive_builder
        @dataclass
        class Fine:
            name: str

        @derive_builder
        @dataclass
        class Wrong:
            tag: Annotated[str, builder(each="tag")]
        """
    )
    with pytest.raises(MisappliedAccumulatorError):
        generate_file(source_path)


def test_enum_target_aborts(write_records):
    source_path = write_records(
        """
        import enum
        from buildergen import derive_builder

        @derive_builder
        class Shape(enum.Enum):
            CIRCLE = 1
            SQUARE = 2
        """
    )
    with pytest.raises(UnsupportedShapeError):
        generate_file(source_path)


@pytest.mark.parametrize(
    "fields, clash",
    [
        (["build: int"], "build"),
        (["missing_fields: str"], "missing_fields"),
        (['items: Annotated[list[str], builder(each="name")]', "name: str"], "name"),
        (
            [
                'left: Annotated[list[int], builder(each="add")]',
                'right: Annotated[list[int], builder(each="add")]',
            ],
            "add",
        ),
        (["x: int", "_x: int"], "_x"),
        (["builder: str"], "builder"),
    ],
)
def test_clashing_member_names_abort(write_records, fields, clash):
    body = "\n".join(f"    {field}" for field in fields)
    source_path = write_records(
        "from typing import Annotated\n"
        "from buildergen import builder, derive_builder\n"
        "\n"
        "@derive_builder\n"
        "class Job:\n"
        f"{body}\n"
    )
    with pytest.raises(DuplicateDefinitionError, match=f"duplicate definitions of '{clash}'"):
        generate_file(source_path)
