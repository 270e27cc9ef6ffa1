"""
Builder Generator Error Types

Two tiers:

- GenerationError and its subclasses are fatal. They abort the whole
  generation run for an input file and nothing is written.
- AttributeParseError is recoverable. It is reported as a Diagnostic in
  place of the one record whose field configuration could not be parsed.
"""


class GenerationError(Exception):
    """Base class for errors that abort a generation run."""


class ParseError(GenerationError):
    """Raised when the source module cannot be read or parsed."""


class RecordNotFoundError(GenerationError):
    """Raised when a requested record name is not defined in the module."""

    def __init__(self, record_name: str, source: str):
        self.record_name = record_name
        self.source = source
        super().__init__(f"No definition named '{record_name}' in {source}")


class UnsupportedShapeError(GenerationError):
    """Raised when a builder target is not a single-variant record class."""

    def __init__(self, record_name: str, shape: str):
        self.record_name = record_name
        self.shape = shape
        super().__init__(
            f"Cannot derive a builder for '{record_name}': it is {shape}, "
            f"only record classes with annotated fields are supported"
        )


class MisappliedAccumulatorError(GenerationError):
    """Raised when ``builder(each=...)`` is used on a non-list field."""

    def __init__(self, record_name: str, field_name: str, declared_type: str):
        self.record_name = record_name
        self.field_name = field_name
        self.declared_type = declared_type
        super().__init__(
            f"each attribute only works on list fields: "
            f"{record_name}.{field_name} is declared as '{declared_type}'"
        )


class DuplicateDefinitionError(GenerationError):
    """Raised when two members of a generated builder would share one name."""

    def __init__(self, record_name: str, name: str, first: str, second: str):
        self.record_name = record_name
        self.name = name
        super().__init__(
            f"Cannot derive a builder for '{record_name}': duplicate definitions "
            f"of '{name}' ({first} and {second})"
        )


class AttributeParseError(ValueError):
    """Raised by the attribute parser for malformed ``builder(...)`` metadata."""

    def __init__(self, message: str, text: str | None = None):
        self.message = message
        self.text = text
        super().__init__(message)


class ConfigError(ValueError):
    """Raised when .buildergen.yaml contains an invalid setting."""
