"""FHIR model engine package.

Metadata-driven validation and serialization for FHIR R4 records. Record
types are data (``RecordSchema`` values loaded from the packaged catalog),
and a small set of generic services operates on them:

- choice (``value[x]``) resolution with at-most-one-variant enforcement
- validation of cardinality, coded-value bindings, primitive formats and
  reference targets, recursing into nested structures
- lossless encoding to and from JSON and FHIR XML
"""

from functools import lru_cache
from importlib.metadata import PackageNotFoundError, version
from typing import Any

try:  # pragma: no cover
    __version__ = version("fhir-model-engine")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

# Core exports
from fhir_model_engine.application.model_engine import ModelEngine
from fhir_model_engine.config import ConfigLoader, EngineConfig
from fhir_model_engine.domain.entities.element import (
    UNBOUNDED,
    Binding,
    BindingStrength,
    ChoiceGroup,
    FieldDescriptor,
    RecordSchema,
    TypeKind,
)
from fhir_model_engine.domain.entities.findings import (
    Finding,
    Severity,
    ValidationResult,
    format_validation_report,
)
from fhir_model_engine.domain.entities.instance import Choice, Instance
from fhir_model_engine.domain.errors import (
    AmbiguousChoiceError,
    CatalogError,
    DecodeError,
    EncodeError,
    ModelEngineError,
    RegistrySealedError,
    SchemaConflictError,
    SchemaError,
    UnknownChoiceTypeError,
    UnknownTypeError,
)
from fhir_model_engine.domain.services.schema_registry import SchemaRegistry
from fhir_model_engine.infrastructure.container import (
    EngineContainer,
    create_default_container,
)


@lru_cache(maxsize=1)
def get_default_engine() -> ModelEngine:
    """Engine over the packaged catalog, built on first use."""
    return create_default_container().create_engine()


def lookup(type_name: str) -> RecordSchema:
    return get_default_engine().lookup(type_name)


def validate(instance: Instance, schema: RecordSchema | str | None = None) -> ValidationResult:
    return get_default_engine().validate(instance, schema)


def encode(instance: Instance, schema: RecordSchema | str | None = None) -> dict[str, Any]:
    return get_default_engine().encode(instance, schema)


def decode(node: Any, schema: RecordSchema | str | None = None) -> Instance:
    return get_default_engine().decode(node, schema)


__all__ = [
    "__version__",
    # Engine
    "ModelEngine",
    "EngineContainer",
    "create_default_container",
    "get_default_engine",
    "lookup",
    "validate",
    "encode",
    "decode",
    # Configuration
    "ConfigLoader",
    "EngineConfig",
    # Schema model
    "UNBOUNDED",
    "Binding",
    "BindingStrength",
    "ChoiceGroup",
    "FieldDescriptor",
    "RecordSchema",
    "SchemaRegistry",
    "TypeKind",
    # Instances and findings
    "Choice",
    "Instance",
    "Finding",
    "Severity",
    "ValidationResult",
    "format_validation_report",
    # Errors
    "ModelEngineError",
    "SchemaError",
    "UnknownTypeError",
    "SchemaConflictError",
    "RegistrySealedError",
    "AmbiguousChoiceError",
    "DecodeError",
    "UnknownChoiceTypeError",
    "EncodeError",
    "CatalogError",
]
