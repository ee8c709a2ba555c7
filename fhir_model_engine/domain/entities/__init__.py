"""Domain entities.

Schema model (FieldDescriptor, ChoiceGroup, RecordSchema), primitive types,
record instances and validation findings.
"""

from .element import (
    CHOICE_MARKER,
    UNBOUNDED,
    Binding,
    BindingStrength,
    ChoiceGroup,
    FieldDescriptor,
    RecordSchema,
    SchemaEntry,
    TypeKind,
    choice_suffix,
)
from .findings import (
    Finding,
    IssueCategory,
    IssueCode,
    Severity,
    ValidationResult,
    format_validation_report,
    join_path,
)
from .instance import Choice, Instance
from .primitives import PRIMITIVE_TYPES, PrimitiveType, get_primitive, is_primitive

__all__ = [
    # Schema model
    "UNBOUNDED",
    "CHOICE_MARKER",
    "Binding",
    "BindingStrength",
    "ChoiceGroup",
    "FieldDescriptor",
    "RecordSchema",
    "SchemaEntry",
    "TypeKind",
    "choice_suffix",
    # Primitives
    "PRIMITIVE_TYPES",
    "PrimitiveType",
    "get_primitive",
    "is_primitive",
    # Instances
    "Choice",
    "Instance",
    # Findings
    "Finding",
    "IssueCategory",
    "IssueCode",
    "Severity",
    "ValidationResult",
    "format_validation_report",
    "join_path",
]
