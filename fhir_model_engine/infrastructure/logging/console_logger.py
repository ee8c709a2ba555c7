from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from typing import TYPE_CHECKING, override

from rich.console import Console
from rich.markup import escape

from ...application.ports.services import LoggerPort

if TYPE_CHECKING:
    from pathlib import Path

    from ...domain.entities.findings import ValidationResult

_STAT_KEYS = (
    "types_loaded",
    "records_decoded",
    "records_encoded",
    "records_validated",
    "findings",
    "warnings",
    "errors",
)

_OPERATION_STATS = {
    "decode": "records_decoded",
    "encode": "records_encoded",
    "validate": "records_validated",
}


class LogLevel(IntEnum):
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2


@dataclass(slots=True)
class LogContext:
    type_name: str = ""
    operation: str = ""
    start_time: datetime = field(default_factory=datetime.now)

    def elapsed_ms(self) -> float:
        return (datetime.now() - self.start_time).total_seconds() * 1000


class ConsoleLogger(LoggerPort):
    pass

    def __init__(self, console: Console | None = None, verbosity: int = 0) -> None:
        super().__init__()
        self.console = console or Console()
        self.verbosity = verbosity
        self._context: LogContext | None = None
        self._stats: dict[str, int] = dict.fromkeys(_STAT_KEYS, 0)

    def set_context(self, **kwargs: str) -> None:
        if self._context is None:
            self._context = LogContext()
        for key, value in kwargs.items():
            if hasattr(self._context, key):
                setattr(self._context, key, value)

    def clear_context(self) -> None:
        self._context = None

    @override
    def info(self, message: str, *, level: int = LogLevel.NORMAL) -> None:
        if self.verbosity >= level:
            self.console.print(f"{self._get_prefix()}{message}")

    @override
    def verbose(self, message: str) -> None:
        if self.verbosity >= LogLevel.VERBOSE:
            self.console.print(f"[dim]{self._get_prefix()}{message}[/dim]")

    @override
    def debug(self, message: str) -> None:
        if self.verbosity >= LogLevel.DEBUG:
            self.console.print(f"[dim cyan]{self._get_prefix()}{message}[/dim cyan]")

    @override
    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    @override
    def warning(self, message: str) -> None:
        self._stats["warnings"] += 1
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    @override
    def error(self, message: str) -> None:
        self._stats["errors"] += 1
        self.console.print(f"[red]✗[/red] {message}")

    @override
    def log_catalog_loaded(
        self,
        *,
        source: Path | str,
        type_count: int,
        element_count: int,
        value_set_count: int,
    ) -> None:
        self._stats["types_loaded"] += type_count
        self.verbose(f"Catalog: {source}")
        self.verbose(
            f"Loaded {type_count} types ({element_count} elements, "
            f"{value_set_count} value sets)"
        )

    @override
    def log_record_processed(self, operation: str, type_name: str) -> None:
        stat = _OPERATION_STATS.get(operation)
        if stat is not None:
            self._stats[stat] += 1
        self.set_context(type_name=type_name, operation=operation)
        self.debug(f"{operation.capitalize()}d {type_name}")

    @override
    def log_validation_result(self, result: ValidationResult) -> None:
        self._stats["findings"] += len(result)
        errors = len(result.errors())
        warnings = len(result.warnings())
        if errors:
            self.verbose(
                f"{result.type_name}: {errors} error(s), {warnings} warning(s)"
            )
        elif warnings:
            self.verbose(f"{result.type_name}: valid with {warnings} warning(s)")
        else:
            self.debug(f"{result.type_name}: valid")
        if self.verbosity >= LogLevel.DEBUG:
            for finding in result:
                self.debug(f"  {escape(str(finding))}")

    @override
    def log_final_stats(self) -> None:
        if self.verbosity < LogLevel.VERBOSE:
            return
        self.console.print()
        self.console.print("[dim]Engine Statistics:[/dim]")
        self.console.print(f"[dim]  Types loaded: {self._stats['types_loaded']}[/dim]")
        self.console.print(f"[dim]  Records decoded: {self._stats['records_decoded']:,}[/dim]")
        self.console.print(f"[dim]  Records encoded: {self._stats['records_encoded']:,}[/dim]")
        self.console.print(
            f"[dim]  Records validated: {self._stats['records_validated']:,}[/dim]"
        )
        self.console.print(f"[dim]  Findings: {self._stats['findings']:,}[/dim]")
        if self._stats["warnings"] > 0:
            self.console.print(f"[dim yellow]  Warnings: {self._stats['warnings']}[/dim yellow]")
        if self._stats["errors"] > 0:
            self.console.print(f"[dim red]  Errors: {self._stats['errors']}[/dim red]")

    def get_stats(self) -> dict[str, int]:
        return self._stats.copy()

    def reset_stats(self) -> None:
        self._stats = dict.fromkeys(_STAT_KEYS, 0)

    def _get_prefix(self) -> str:
        if self._context is None or self.verbosity < LogLevel.DEBUG:
            return ""
        parts = [p for p in (self._context.operation, self._context.type_name) if p]
        return escape(f"[{':'.join(parts)}] ") if parts else ""
