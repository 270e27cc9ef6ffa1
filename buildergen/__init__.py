"""
buildergen: builder classes for Python record types.

Reads a module's source with tree-sitter, classifies each field of the
classes marked @derive_builder, and writes a companion module with one
``<Record>Builder`` per record plus a ``<Record>.builder()`` factory.
"""

from .errors import (
    AttributeParseError,
    ConfigError,
    DuplicateDefinitionError,
    GenerationError,
    MisappliedAccumulatorError,
    ParseError,
    RecordNotFoundError,
    UnsupportedShapeError,
)
from .generator import GenerationResult, generate_builders, generate_file
from .markers import builder, derive_builder

__version__ = "0.1.0"

__all__ = [
    "AttributeParseError",
    "ConfigError",
    "DuplicateDefinitionError",
    "GenerationError",
    "GenerationResult",
    "MisappliedAccumulatorError",
    "ParseError",
    "RecordNotFoundError",
    "UnsupportedShapeError",
    "builder",
    "derive_builder",
    "generate_builders",
    "generate_file",
]
