"""Validation findings and results."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, overload

import pandas as pd


class Severity(str, Enum):
    ERROR = "error"  # Blocks acceptance
    WARNING = "warning"  # Should be reviewed
    INFORMATION = "information"  # Advisory only


class IssueCategory(str, Enum):
    CARDINALITY = "Cardinality"
    BINDING = "Binding"
    CHOICE = "Choice"
    STRUCTURE = "Structure"
    FORMAT = "Format"
    REFERENCE = "Reference"


class IssueCode(str, Enum):
    MIN_OCCURS = "min-occurs"
    MAX_OCCURS = "max-occurs"
    CODE_NOT_IN_VALUE_SET = "code-not-in-value-set"
    CODE_MISSING = "code-missing"
    CHOICE_AMBIGUOUS = "choice-ambiguous"
    UNKNOWN_ELEMENT = "unknown-element"
    INVALID_TYPE = "invalid-type"
    INVALID_FORMAT = "invalid-format"
    REFERENCE_TARGET = "reference-target"


FRAME_COLUMNS = ["path", "severity", "category", "code", "message"]


def join_path(prefix: str, name: str) -> str:
    return f"{prefix}.{name}" if prefix else name


@dataclass(frozen=True, slots=True)
class Finding:
    path: str
    severity: Severity
    message: str
    code: IssueCode
    category: IssueCategory
    details: dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def field(self) -> str:
        return self.path

    def with_prefix(self, prefix: str) -> Finding:
        if not prefix:
            return self
        return Finding(
            path=join_path(prefix, self.path) if self.path else prefix,
            severity=self.severity,
            message=self.message,
            code=self.code,
            category=self.category,
            details=self.details,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "path": self.path,
            "severity": self.severity.value,
            "category": self.category.value,
            "code": self.code.value,
            "message": self.message,
        }

    def __str__(self) -> str:
        location = self.path or "<root>"
        return f"[{self.code.value}] {self.severity.value}: {location}: {self.message}"


@dataclass(frozen=True, slots=True)
class ValidationResult:
    type_name: str
    findings: tuple[Finding, ...] = ()

    def __iter__(self) -> Iterator[Finding]:
        return iter(self.findings)

    def __len__(self) -> int:
        return len(self.findings)

    @overload
    def __getitem__(self, index: int) -> Finding: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Finding, ...]: ...

    def __getitem__(self, index: int | slice) -> Finding | tuple[Finding, ...]:
        return self.findings[index]

    def _with_severity(self, severity: Severity) -> list[Finding]:
        return [f for f in self.findings if f.severity == severity]

    def errors(self) -> list[Finding]:
        return self._with_severity(Severity.ERROR)

    def warnings(self) -> list[Finding]:
        return self._with_severity(Severity.WARNING)

    def information(self) -> list[Finding]:
        return self._with_severity(Severity.INFORMATION)

    def has_errors(self) -> bool:
        return any(f.severity == Severity.ERROR for f in self.findings)

    @property
    def is_valid(self) -> bool:
        return not self.has_errors()

    def at(self, path: str) -> list[Finding]:
        return [f for f in self.findings if f.path == path]

    def to_dict(self) -> dict[str, object]:
        return {
            "type": self.type_name,
            "error_count": len(self.errors()),
            "warning_count": len(self.warnings()),
            "information_count": len(self.information()),
            "findings": [f.to_dict() for f in self.findings],
        }

    def to_frame(self) -> pd.DataFrame:
        """Return findings as a DataFrame with one row per finding."""
        rows = [f.to_dict() for f in self.findings]
        return pd.DataFrame(rows, columns=FRAME_COLUMNS)


def format_validation_report(result: ValidationResult) -> str:
    """Format validation findings into a readable report."""
    errors = result.errors()
    warnings = result.warnings()
    information = result.information()

    lines = ["=" * 80, f"VALIDATION REPORT: {result.type_name}", "=" * 80, ""]
    lines.append(
        f"Total Findings: {len(errors)} errors, {len(warnings)} warnings, "
        f"{len(information)} information"
    )

    for title, group in (
        ("Errors", errors),
        ("Warnings", warnings),
        ("Information", information),
    ):
        if not group:
            continue
        lines.append(f"\n{title} ({len(group)}):")
        for finding in group:
            lines.append(f"  {finding}")

    lines.append("\n" + "=" * 80)
    return "\n".join(lines)
