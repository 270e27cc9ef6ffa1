"""
Field Classifier

Assigns every FieldSpec exactly one population strategy. Rules apply in order:

1. ``Optional[T]``                       → OPTIONAL_WRAPPED (setter takes T)
2. ``builder(each=m)`` on ``list[T]``    → ACCUMULATING (setter ``m`` takes T)
   ``builder(each=m)`` on anything else  → MisappliedAccumulatorError (fatal)
3. everything else                       → REQUIRED (setter takes the declared type)

Rule 1 wins over rule 2. So ``Optional[list[T]]`` with ``each`` is a plain
optional: the whole list is replaced and the ``each`` setting is not used.
"""

from .errors import MisappliedAccumulatorError
from .models import ClassifiedField, FieldSpec, GeneratorConfig, RecordInfo, StrategyKind
from .types import wrapped_argument


def classify_field(
    field: FieldSpec,
    record_name: str,
    config: GeneratorConfig | None = None,
) -> ClassifiedField:
    """Classify a single field into REQUIRED, OPTIONAL_WRAPPED or ACCUMULATING."""
    config = config or GeneratorConfig()

    inner = wrapped_argument(field.declared_type, config.optional_wrappers)
    if inner is not None:
        return ClassifiedField(field, StrategyKind.OPTIONAL_WRAPPED, inner, field.name)

    each = field.attributes.each
    if each is not None:
        element = wrapped_argument(field.declared_type, config.collection_wrappers)
        if element is None:
            raise MisappliedAccumulatorError(record_name, field.name, str(field.declared_type))
        # Used verbatim: an invalid identifier yields invalid generated code
        return ClassifiedField(field, StrategyKind.ACCUMULATING, element, each)

    return ClassifiedField(field, StrategyKind.REQUIRED, field.declared_type, field.name)


def classify_record(record: RecordInfo, config: GeneratorConfig | None = None) -> list[ClassifiedField]:
    """Classify all fields of ``record`` in declaration order.

    Fields carrying an attribute_error must be handled by the caller first;
    this function only looks at the parsed configuration.
    """
    return [classify_field(field, record.record_name, config) for field in record.fields]
