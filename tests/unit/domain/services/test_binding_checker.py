"""Tests for binding strength handling."""

from __future__ import annotations

import pytest

from fhir_model_engine.domain.entities.element import Binding, BindingStrength, FieldDescriptor
from fhir_model_engine.domain.entities.findings import IssueCode, Severity
from fhir_model_engine.domain.entities.instance import Instance
from fhir_model_engine.domain.services.binding_checker import (
    BindingChecker,
    CodedValue,
    extract_codes,
)

SYSTEM = "http://example.org/codes"


def _concept_field(strength: BindingStrength) -> FieldDescriptor:
    return FieldDescriptor(
        "category",
        "CodeableConcept",
        binding=Binding(strength, "http://example.org/vs", {SYSTEM: {"a", "b"}}),
    )


def _concept(*codes: str, text: str | None = None) -> Instance:
    concept = Instance("CodeableConcept")
    if codes:
        concept["coding"] = [Instance("Coding", system=SYSTEM, code=c) for c in codes]
    if text:
        concept["text"] = text
    return concept


class TestExtractCodes:
    """Tests for extract_codes."""

    def test_code_primitive(self):
        """A bare code has no system."""
        assert extract_codes("code", "final") == [CodedValue("final")]

    def test_codeable_concept(self):
        """Every coding with a code is returned."""
        concept = _concept("a", "z")

        assert [str(c) for c in extract_codes("CodeableConcept", concept)] == [
            f"{SYSTEM}#a",
            f"{SYSTEM}#z",
        ]

    def test_text_only_concept(self):
        """Text-only concepts have no codes but are still coded types."""
        assert extract_codes("CodeableConcept", _concept(text="free text")) == []

    def test_quantity_code(self):
        """Quantities carry their unit code."""
        quantity = Instance("Quantity", value=1, system="http://unitsofmeasure.org", code="mg")

        assert extract_codes("Quantity", quantity) == [
            CodedValue("mg", "http://unitsofmeasure.org")
        ]

    def test_uncoded_type(self):
        """Types with no coded content return None."""
        assert extract_codes("Period", Instance("Period")) is None
        assert extract_codes("boolean", True) is None


class TestBindingGradient:
    """The same off-list code under each strength."""

    @pytest.mark.parametrize(
        ("strength", "severity"),
        [
            (BindingStrength.REQUIRED, Severity.ERROR),
            (BindingStrength.EXTENSIBLE, Severity.WARNING),
            (BindingStrength.PREFERRED, Severity.INFORMATION),
            (BindingStrength.EXAMPLE, Severity.INFORMATION),
        ],
    )
    def test_off_list_code(self, strength, severity):
        """Severity follows binding strength."""
        finding = BindingChecker().check(_concept_field(strength), _concept("zzz"), "category")

        assert finding is not None
        assert finding.severity == severity
        assert finding.code == IssueCode.CODE_NOT_IN_VALUE_SET
        assert finding.path == "category"

    @pytest.mark.parametrize("strength", list(BindingStrength))
    def test_listed_code_passes(self, strength):
        """A member code passes under every strength."""
        assert BindingChecker().check(_concept_field(strength), _concept("zzz", "b"), "x") is None

    def test_system_must_match(self):
        """A listed code under another system is not a member."""
        concept = Instance(
            "CodeableConcept", coding=[Instance("Coding", system="urn:other", code="a")]
        )

        finding = BindingChecker().check(
            _concept_field(BindingStrength.REQUIRED), concept, "category"
        )

        assert finding is not None

    def test_extensible_text_only_passes(self):
        """Extensible bindings accept free text."""
        field = _concept_field(BindingStrength.EXTENSIBLE)

        assert BindingChecker().check(field, _concept(text="something else"), "c") is None

    def test_required_text_only_is_missing_code(self):
        """Required bindings need a code."""
        field = _concept_field(BindingStrength.REQUIRED)

        finding = BindingChecker().check(field, _concept(text="something else"), "c")

        assert finding.code == IssueCode.CODE_MISSING
        assert finding.severity == Severity.ERROR

    def test_unenumerated_binding_is_not_checked(self):
        """No enumerated codes means nothing to compare against."""
        field = FieldDescriptor(
            "code", "code", binding=Binding(BindingStrength.REQUIRED, "http://x/vs")
        )

        assert BindingChecker().check(field, "anything", "code") is None

    def test_unbound_field(self):
        """Fields without a binding are skipped."""
        assert BindingChecker().check(FieldDescriptor("x", "code"), "y", "x") is None


class TestAdvisoryToggles:
    """Tests for report_advisory and strict_advisory."""

    def test_suppressed_advisory(self):
        """Advisory mismatches can be silenced."""
        checker = BindingChecker(report_advisory=False)

        assert checker.severity_for(BindingStrength.PREFERRED) is None
        assert checker.check(_concept_field(BindingStrength.EXAMPLE), _concept("z"), "c") is None
        assert checker.severity_for(BindingStrength.EXTENSIBLE) == Severity.WARNING

    def test_strict_advisory(self):
        """Strict mode elevates advisory mismatches to errors."""
        checker = BindingChecker(strict_advisory=True)

        finding = checker.check(_concept_field(BindingStrength.PREFERRED), _concept("z"), "c")

        assert finding.severity == Severity.ERROR
        assert checker.severity_for(BindingStrength.EXTENSIBLE) == Severity.WARNING
