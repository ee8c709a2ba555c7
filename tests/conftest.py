"""Shared fixtures: a small hand-built schema set and the services over it.

``Sample`` is a resource with one element of each shape the engine cares
about: a required coded field, a repeating coded field, a choice group
(``value[x]``), a repeating backbone (``constraint``) and a typed reference.
``Extension`` refers to itself.
"""

from __future__ import annotations

import pytest

from fhir_model_engine.application.model_engine import ModelEngine
from fhir_model_engine.domain.entities.element import (
    UNBOUNDED,
    Binding,
    BindingStrength,
    ChoiceGroup,
    FieldDescriptor,
    RecordSchema,
    TypeKind,
)
from fhir_model_engine.domain.services.codec import TreeCodec
from fhir_model_engine.domain.services.schema_registry import SchemaRegistry
from fhir_model_engine.domain.services.validator import Validator

STATUS_SYSTEM = "http://example.org/sample-status"
SEVERITY_SYSTEM = "http://hl7.org/fhir/constraint-severity"
CATEGORY_SYSTEM = "http://example.org/sample-category"
PATIENT_PROFILE = "http://hl7.org/fhir/StructureDefinition/Patient"


def variant(logical: str, type_code: str) -> FieldDescriptor:
    name = f"{logical}{type_code[:1].upper()}{type_code[1:]}"
    return FieldDescriptor(name=name, type_code=type_code, choice_group=logical)


def value_group(*type_codes: str, logical: str = "value", min: int = 0) -> ChoiceGroup:
    return ChoiceGroup(
        logical_name=logical,
        variants=tuple(variant(logical, code) for code in type_codes),
        min=min,
    )


def status_binding(strength: BindingStrength = BindingStrength.REQUIRED) -> Binding:
    return Binding(
        strength=strength,
        value_set="http://example.org/ValueSet/sample-status",
        allowed_codes={STATUS_SYSTEM: {"final", "preliminary"}},
    )


def build_schemas() -> list[RecordSchema]:
    coding = RecordSchema(
        "Coding",
        (
            FieldDescriptor("system", "uri"),
            FieldDescriptor("code", "code"),
            FieldDescriptor("display", "string"),
        ),
    )
    concept = RecordSchema(
        "CodeableConcept",
        (
            FieldDescriptor("coding", "Coding", max=UNBOUNDED),
            FieldDescriptor("text", "string"),
        ),
    )
    period = RecordSchema(
        "Period",
        (FieldDescriptor("start", "dateTime"), FieldDescriptor("end", "dateTime")),
    )
    duration = RecordSchema(
        "Duration",
        (FieldDescriptor("value", "decimal"), FieldDescriptor("unit", "string")),
    )
    reference = RecordSchema(
        "Reference",
        (FieldDescriptor("reference", "string"), FieldDescriptor("display", "string")),
    )
    extension = RecordSchema(
        "Extension",
        (
            FieldDescriptor("extension", "Extension", max=UNBOUNDED),
            FieldDescriptor("url", "uri", min=1),
            value_group("string", "boolean"),
        ),
    )
    constraint = RecordSchema(
        "Sample.constraint",
        (
            FieldDescriptor("key", "id", min=1),
            FieldDescriptor(
                "severity",
                "code",
                min=1,
                binding=Binding(
                    BindingStrength.REQUIRED,
                    "http://hl7.org/fhir/ValueSet/constraint-severity",
                    {SEVERITY_SYSTEM: {"error", "warning"}},
                ),
            ),
            FieldDescriptor("human", "string"),
        ),
        kind=TypeKind.BACKBONE_ELEMENT,
    )
    sample = RecordSchema(
        "Sample",
        (
            FieldDescriptor("id", "id"),
            FieldDescriptor("extension", "Extension", max=UNBOUNDED),
            FieldDescriptor("status", "code", min=1, binding=status_binding()),
            FieldDescriptor(
                "category",
                "CodeableConcept",
                max=UNBOUNDED,
                binding=Binding(
                    BindingStrength.EXTENSIBLE,
                    "http://example.org/ValueSet/sample-category",
                    {CATEGORY_SYSTEM: {"lab", "vital"}},
                ),
            ),
            value_group("dateTime", "Duration", "Period"),
            FieldDescriptor("note", "string", max=UNBOUNDED),
            FieldDescriptor("subject", "Reference", type_profiles=(PATIENT_PROFILE,)),
            FieldDescriptor("constraint", "Sample.constraint", max=UNBOUNDED),
            FieldDescriptor("contained", "Resource", max=UNBOUNDED),
        ),
        kind=TypeKind.RESOURCE,
    )
    return [coding, concept, period, duration, reference, extension, constraint, sample]


@pytest.fixture
def registry() -> SchemaRegistry:
    registry = SchemaRegistry()
    registry.register_all(build_schemas())
    registry.seal()
    return registry


@pytest.fixture
def sample_schema(registry: SchemaRegistry) -> RecordSchema:
    return registry.lookup("Sample")


@pytest.fixture
def validator(registry: SchemaRegistry) -> Validator:
    return Validator(registry)


@pytest.fixture
def codec(registry: SchemaRegistry) -> TreeCodec:
    return TreeCodec(registry)


@pytest.fixture
def engine(registry: SchemaRegistry) -> ModelEngine:
    return ModelEngine(registry)
