"""Coded-value binding checks.

Binding strength decides the severity of a mismatch:

- ``required``: error
- ``extensible``: warning; a CodeableConcept with text and no coding passes
- ``preferred`` / ``example``: information, never blocking

Membership is purely syntactic: the code must be listed for its system in
the binding's enumerated codes. Value sets that are not enumerated locally
are not checked.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from ..entities.element import Binding, BindingStrength, FieldDescriptor
from ..entities.findings import Finding, IssueCategory, IssueCode, Severity
from ..entities.instance import Instance

CODE_LIKE_PRIMITIVES = frozenset({"code", "string", "uri", "canonical"})
QUANTITY_TYPES = frozenset({"Quantity", "Duration", "Age", "Distance", "Count", "SimpleQuantity"})


@dataclass(frozen=True, slots=True)
class CodedValue:
    code: str
    system: str | None = None

    def __str__(self) -> str:
        return f"{self.system}#{self.code}" if self.system else self.code


def _coding(value: Instance) -> CodedValue | None:
    code = value.get("code")
    if not isinstance(code, str) or not code:
        return None
    system = value.get("system")
    return CodedValue(code, system if isinstance(system, str) else None)


def extract_codes(type_code: str, value: Any) -> list[CodedValue] | None:
    """Return the coded elements of ``value``.

    ``None`` means the type carries no coded content at all; an empty list
    means it could, but none is populated (text-only CodeableConcept).
    """
    if type_code in CODE_LIKE_PRIMITIVES:
        return [CodedValue(value)] if isinstance(value, str) else None
    if not isinstance(value, Instance):
        return None
    if type_code == "Coding" or type_code in QUANTITY_TYPES:
        coding = _coding(value)
        return [coding] if coding else []
    if type_code == "CodeableConcept":
        codings = value.get("coding") or []
        if isinstance(codings, Instance):
            codings = [codings]
        found = [_coding(c) for c in codings if isinstance(c, Instance)]
        return [c for c in found if c is not None]
    return None


def _is_member(binding: Binding, codes: Iterable[CodedValue]) -> bool:
    return any(binding.contains(c.code, c.system) for c in codes)


class BindingChecker:
    def __init__(
        self,
        *,
        report_advisory: bool = True,
        strict_advisory: bool = False,
    ) -> None:
        super().__init__()
        self.report_advisory = report_advisory
        self.strict_advisory = strict_advisory

    def severity_for(self, strength: BindingStrength) -> Severity | None:
        """Severity of a mismatch, or ``None`` when it is not reported.

        required is an error and extensible a warning. preferred and example
        are reported one level lower, as information, unless strict.
        """
        match strength:
            case BindingStrength.REQUIRED:
                return Severity.ERROR
            case BindingStrength.EXTENSIBLE:
                return Severity.WARNING
            case _:
                if self.strict_advisory:
                    return Severity.ERROR
                if not self.report_advisory:
                    return None
                return Severity.INFORMATION

    def check(self, descriptor: FieldDescriptor, value: Any, path: str) -> Finding | None:
        binding = descriptor.binding
        if binding is None or not binding.is_enumerated:
            return None
        codes = extract_codes(descriptor.type_code, value)
        if codes is None:
            return None

        if not codes:
            # Text-only content carries no code to check
            if binding.strength != BindingStrength.REQUIRED:
                return None
            return Finding(
                path=path,
                severity=Severity.ERROR,
                message=f"No coded value present for required binding {_describe(binding)}",
                code=IssueCode.CODE_MISSING,
                category=IssueCategory.BINDING,
                details={"strength": binding.strength.value, "value_set": binding.value_set},
            )

        if _is_member(binding, codes):
            return None
        severity = self.severity_for(binding.strength)
        if severity is None:
            return None
        shown = ", ".join(str(c) for c in codes)
        return Finding(
            path=path,
            severity=severity,
            message=(
                f"Code '{shown}' is not in the {binding.strength.value} "
                f"value set {_describe(binding)}"
            ),
            code=IssueCode.CODE_NOT_IN_VALUE_SET,
            category=IssueCategory.BINDING,
            details={
                "strength": binding.strength.value,
                "value_set": binding.value_set,
                "codes": [str(c) for c in codes],
            },
        )


def _describe(binding: Binding) -> str:
    return binding.value_set or "(inline codes)"
