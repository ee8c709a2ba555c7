"""Instance validation against record schemas.

``Validator.validate`` walks an instance once and collects every finding;
data-shape problems never raise. Unregistered nested types do raise
(``UnknownTypeError``) because they mean the schema catalog is incomplete.

Paths in findings are dotted and relative to the validated instance.
Repeating elements are always indexed (``constraint[0].severity``) and
choice values are reported under their concrete property name
(``valueQuantity.code``).
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..entities.element import ChoiceGroup, FieldDescriptor, RecordSchema
from ..entities.findings import (
    Finding,
    IssueCategory,
    IssueCode,
    Severity,
    ValidationResult,
    join_path,
)
from ..entities.instance import Instance
from ..entities.primitives import get_primitive
from ..errors import AmbiguousChoiceError
from .binding_checker import BindingChecker
from .choice_resolver import ChoiceResolver
from .schema_registry import ABSTRACT_RESOURCE

if TYPE_CHECKING:
    from .schema_registry import SchemaRegistry

REFERENCE_TYPE = "Reference"


def occurrences(value: Any) -> int:
    if value is None:
        return 0
    if isinstance(value, list):
        return len(value)
    return 1


def reference_target_type(reference: str) -> str | None:
    """Resource type named by a literal reference, or ``None`` if not checkable.

    Handles ``Patient/123``, ``Patient/123/_history/2`` and absolute URLs.
    Contained (``#id``) and ``urn:`` references name no type.
    """
    if not reference or reference.startswith("#") or reference.startswith("urn:"):
        return None
    parts = [p for p in reference.split("/") if p]
    if "_history" in parts:
        parts = parts[: parts.index("_history")]
    if len(parts) < 2:
        return None
    return parts[-2]


def profile_type_names(type_profiles: tuple[str, ...]) -> set[str]:
    return {profile.rsplit("/", 1)[-1] for profile in type_profiles}


class Validator:
    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        resolver: ChoiceResolver | None = None,
        binding_checker: BindingChecker | None = None,
        check_primitive_formats: bool = True,
        check_reference_targets: bool = True,
    ) -> None:
        super().__init__()
        self.registry = registry
        self.resolver = resolver or ChoiceResolver()
        self.binding_checker = binding_checker or BindingChecker()
        self.check_primitive_formats = check_primitive_formats
        self.check_reference_targets = check_reference_targets

    def validate(self, instance: Instance, schema: RecordSchema) -> ValidationResult:
        findings: list[Finding] = []
        if instance.type_name != schema.type_name:
            findings.append(
                _finding(
                    "",
                    f"Instance of '{instance.type_name}' validated against '{schema.type_name}'",
                    IssueCode.INVALID_TYPE,
                    IssueCategory.STRUCTURE,
                )
            )
        findings.extend(self._validate_instance(instance, schema))
        return ValidationResult(schema.type_name, tuple(findings))

    def _validate_instance(self, instance: Instance, schema: RecordSchema) -> list[Finding]:
        populated = instance.populated()
        consumed: set[str] = set()
        findings: list[Finding] = []

        for entry in schema.entries:
            if isinstance(entry, ChoiceGroup):
                consumed.update(entry.property_names())
                findings.extend(self._check_choice(entry, populated))
            else:
                consumed.add(entry.name)
                findings.extend(
                    self._check_field(entry, populated.get(entry.name), entry.name)
                )

        for key in populated:
            if key in consumed:
                continue
            group = schema.group_claiming(key)
            if group is not None:
                message = (
                    f"'{key}' is not a declared variant of '{group.logical_name}[x]' "
                    f"(allowed: {', '.join(group.property_names())})"
                )
            else:
                message = f"Unknown element '{key}' for type '{schema.type_name}'"
            findings.append(
                _finding(key, message, IssueCode.UNKNOWN_ELEMENT, IssueCategory.STRUCTURE)
            )
        return findings

    def _check_choice(self, group: ChoiceGroup, populated: dict[str, Any]) -> list[Finding]:
        candidates = {k: v for k, v in populated.items() if group.variant_for(k) is not None}
        try:
            choice = self.resolver.bind(group, candidates)
        except AmbiguousChoiceError as exc:
            return [
                _finding(
                    f"{group.logical_name}[x]",
                    str(exc),
                    IssueCode.CHOICE_AMBIGUOUS,
                    IssueCategory.CHOICE,
                    details={"properties": exc.properties},
                )
            ]

        if choice is None:
            if group.min > 0:
                return [
                    _finding(
                        f"{group.logical_name}[x]",
                        f"Minimum cardinality {group.min} not met: no variant of "
                        f"'{group.logical_name}[x]' is populated",
                        IssueCode.MIN_OCCURS,
                        IssueCategory.CARDINALITY,
                    )
                ]
            return []

        variant = group.variant_of_type(choice.type_code)
        assert variant is not None
        return self._check_field(variant, choice.value, variant.name)

    def _check_field(self, descriptor: FieldDescriptor, value: Any, path: str) -> list[Finding]:
        findings: list[Finding] = []
        count = occurrences(value)
        if count < descriptor.min:
            findings.append(
                _finding(
                    path,
                    f"Minimum cardinality {descriptor.min} not met: found {count} "
                    f"(expected {descriptor.cardinality()})",
                    IssueCode.MIN_OCCURS,
                    IssueCategory.CARDINALITY,
                    details={"count": count, "min": descriptor.min},
                )
            )
        if count > descriptor.max:
            findings.append(
                _finding(
                    path,
                    f"Maximum cardinality {descriptor.cardinality().split('..')[1]} "
                    f"exceeded: found {count}",
                    IssueCode.MAX_OCCURS,
                    IssueCategory.CARDINALITY,
                    details={"count": count, "max": descriptor.max},
                )
            )
        if count == 0:
            return findings

        if not descriptor.is_repeating:
            if isinstance(value, list):
                if count == 1:
                    findings.append(
                        _finding(
                            path,
                            "Expected a single value, found a list",
                            IssueCode.INVALID_TYPE,
                            IssueCategory.STRUCTURE,
                        )
                    )
                return findings
            findings.extend(self._check_value(descriptor, value, path))
            return findings

        if not isinstance(value, list):
            findings.append(
                _finding(
                    path,
                    f"Expected a list for repeating element ({descriptor.cardinality()}), "
                    "found a single value",
                    IssueCode.INVALID_TYPE,
                    IssueCategory.STRUCTURE,
                )
            )
            return findings
        for index, item in enumerate(value):
            findings.extend(self._check_value(descriptor, item, f"{path}[{index}]"))
        return findings

    def _check_value(self, descriptor: FieldDescriptor, value: Any, path: str) -> list[Finding]:
        if value is None:
            return [
                _finding(path, "Null entry in list", IssueCode.INVALID_TYPE, IssueCategory.STRUCTURE)
            ]

        primitive = get_primitive(descriptor.type_code)
        if primitive is not None:
            if not primitive.accepts_python_value(value):
                return [
                    _finding(
                        path,
                        f"Expected {descriptor.type_code}, found {type(value).__name__}",
                        IssueCode.INVALID_TYPE,
                        IssueCategory.STRUCTURE,
                    )
                ]
            if self.check_primitive_formats and not primitive.matches_format(value):
                return [
                    _finding(
                        path,
                        f"'{primitive.lexical_form(value)}' is not a valid {descriptor.type_code}",
                        IssueCode.INVALID_FORMAT,
                        IssueCategory.FORMAT,
                    )
                ]
            return self._check_binding(descriptor, value, path)

        if not isinstance(value, Instance):
            return [
                _finding(
                    path,
                    f"Expected {descriptor.type_code}, found {type(value).__name__}",
                    IssueCode.INVALID_TYPE,
                    IssueCategory.STRUCTURE,
                )
            ]
        if descriptor.type_code == ABSTRACT_RESOURCE:
            schema = self.registry.lookup(value.type_name)
            if not schema.is_resource:
                return [
                    _finding(
                        path,
                        f"Expected a resource, found {value.type_name}",
                        IssueCode.INVALID_TYPE,
                        IssueCategory.STRUCTURE,
                    )
                ]
        elif value.type_name != descriptor.type_code:
            return [
                _finding(
                    path,
                    f"Expected {descriptor.type_code}, found {value.type_name}",
                    IssueCode.INVALID_TYPE,
                    IssueCategory.STRUCTURE,
                )
            ]
        else:
            schema = self.registry.lookup(descriptor.type_code)

        findings = [f.with_prefix(path) for f in self._validate_instance(value, schema)]
        findings.extend(self._check_binding(descriptor, value, path))
        if self.check_reference_targets and descriptor.type_code == REFERENCE_TYPE:
            findings.extend(self._check_reference(descriptor, value, path))
        return findings

    def _check_binding(self, descriptor: FieldDescriptor, value: Any, path: str) -> list[Finding]:
        finding = self.binding_checker.check(descriptor, value, path)
        return [finding] if finding else []

    def _check_reference(
        self, descriptor: FieldDescriptor, value: Instance, path: str
    ) -> list[Finding]:
        if not descriptor.type_profiles:
            return []
        reference = value.get("reference")
        if not isinstance(reference, str):
            return []
        target = reference_target_type(reference)
        allowed = profile_type_names(descriptor.type_profiles)
        if target is None or ABSTRACT_RESOURCE in allowed or target in allowed:
            return []
        return [
            Finding(
                path=join_path(path, "reference"),
                severity=Severity.WARNING,
                message=(
                    f"Reference to '{target}' is not an allowed target "
                    f"(allowed: {', '.join(sorted(allowed))})"
                ),
                code=IssueCode.REFERENCE_TARGET,
                category=IssueCategory.REFERENCE,
                details={"target": target, "allowed": sorted(allowed)},
            )
        ]


def _finding(
    path: str,
    message: str,
    code: IssueCode,
    category: IssueCategory,
    *,
    details: dict[str, Any] | None = None,
) -> Finding:
    return Finding(
        path=path,
        severity=Severity.ERROR,
        message=message,
        code=code,
        category=category,
        details=details or {},
    )
