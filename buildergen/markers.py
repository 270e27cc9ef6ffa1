"""
Runtime markers for record modules.

The generator reads these from source text only. At runtime they do
nothing, so that a record module (and the generated builders importing it)
stays importable:

    from typing import Annotated, Optional
    from buildergen import builder, derive_builder

    @derive_builder
    @dataclass
    class Command:
        name: str
        id: Optional[int]
        tags: Annotated[list[str], builder(each="tag")]
"""

from .models import FieldAttributes


def derive_builder(cls=None):
    """Mark a record class as a builder target. Usable with or without ()."""
    if cls is None:
        return lambda inner: inner
    return cls


def builder(*, each: str | None = None) -> FieldAttributes:
    """Field configuration carried as ``Annotated`` metadata."""
    return FieldAttributes(each=each)
