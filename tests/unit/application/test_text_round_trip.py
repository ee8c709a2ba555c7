"""Property-based round trips through the JSON and XML text formats."""

from __future__ import annotations

import string

from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st
import pytest

from fhir_model_engine.application.model_engine import ModelEngine
from fhir_model_engine.constants import Xml
from fhir_model_engine.domain.entities.element import FieldDescriptor, RecordSchema, TypeKind
from fhir_model_engine.domain.entities.instance import Instance
from fhir_model_engine.domain.services.schema_registry import SchemaRegistry

ROUND_TRIP_SETTINGS = settings(
    max_examples=25,
    derandomize=True,
    deadline=None,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
)

texts = st.text(alphabet=string.ascii_letters + string.digits + "-.", min_size=1, max_size=12)
decimals = st.one_of(
    st.integers(min_value=-10_000, max_value=10_000),
    st.decimals(
        min_value=-(10**6), max_value=10**6, places=2, allow_nan=False, allow_infinity=False
    ),
)
paragraphs = st.text(alphabet=string.ascii_letters + " ", min_size=1, max_size=40)


@st.composite
def durations(draw):
    duration = Instance("Duration")
    if draw(st.booleans()):
        duration["value"] = draw(decimals)
    if draw(st.booleans()):
        duration["unit"] = draw(texts)
    return duration


@st.composite
def periods(draw):
    period = Instance("Period")
    for key in ("start", "end"):
        if draw(st.booleans()):
            period[key] = draw(texts)
    return period


@st.composite
def samples(draw):
    sample = Instance("Sample", status=draw(st.sampled_from(["final", "preliminary"])))
    if draw(st.booleans()):
        sample["id"] = draw(texts)
    variant = draw(st.sampled_from([None, "valueDateTime", "valueDuration", "valuePeriod"]))
    if variant == "valueDateTime":
        sample[variant] = draw(texts)
    elif variant == "valueDuration":
        sample[variant] = draw(durations())
    elif variant == "valuePeriod":
        sample[variant] = draw(periods())
    notes = draw(st.lists(texts, max_size=3))
    if notes:
        sample["note"] = notes
    return sample


@st.composite
def narratives(draw):
    body = draw(st.lists(paragraphs, min_size=1, max_size=3))
    paragraphs_xml = "".join(f"<p>{text}</p>" for text in body)
    return Instance(
        "Note",
        text=Instance(
            "Narrative",
            status=draw(st.sampled_from(["generated", "additional"])),
            div=f'<div xmlns="{Xml.XHTML_NAMESPACE}">{paragraphs_xml}</div>',
        ),
    )


@pytest.fixture
def narrative_engine() -> ModelEngine:
    registry = SchemaRegistry()
    registry.register_all(
        [
            RecordSchema(
                "Narrative",
                (FieldDescriptor("status", "code", min=1), FieldDescriptor("div", "xhtml", min=1)),
            ),
            RecordSchema("Note", (FieldDescriptor("text", "Narrative"),), kind=TypeKind.RESOURCE),
        ]
    )
    registry.seal()
    return ModelEngine(registry)


class TestJsonRoundTrip:
    """from_json(to_json(x)) == x."""

    @given(sample=samples())
    @ROUND_TRIP_SETTINGS
    def test_sample(self, engine, sample):
        """Instances survive JSON text, decimals included."""
        assert engine.from_json(engine.to_json(sample)) == sample

    @given(sample=samples())
    @ROUND_TRIP_SETTINGS
    def test_decimal_digits_kept(self, engine, sample):
        """Decimal values keep their exact digits through JSON text."""
        decoded = engine.from_json(engine.to_json(sample, indent=2))
        duration = sample.get("valueDuration")
        if duration is not None and "value" in duration.populated():
            assert str(decoded["valueDuration"]["value"]) == str(duration["value"])

    @given(note=narratives())
    @ROUND_TRIP_SETTINGS
    def test_narrative(self, narrative_engine, note):
        """xhtml content is carried as a string."""
        assert narrative_engine.from_json(narrative_engine.to_json(note)) == note


class TestXmlRoundTrip:
    """from_xml(to_xml(x)) == x."""

    @given(sample=samples(), indent=st.booleans())
    @ROUND_TRIP_SETTINGS
    def test_sample(self, engine, sample, indent):
        """Instances survive XML text, decimals included."""
        assert engine.from_xml(engine.to_xml(sample, indent=indent)) == sample

    @given(note=narratives(), indent=st.booleans())
    @ROUND_TRIP_SETTINGS
    def test_narrative(self, narrative_engine, note, indent):
        """The div reads back exactly as it was written."""
        assert narrative_engine.from_xml(narrative_engine.to_xml(note, indent=indent)) == note
