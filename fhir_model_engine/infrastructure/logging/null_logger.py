from __future__ import annotations

from typing import TYPE_CHECKING, override

from ...application.ports.services import LoggerPort

if TYPE_CHECKING:
    from pathlib import Path

    from ...domain.entities.findings import ValidationResult


class NullLogger(LoggerPort):
    pass

    @override
    def info(self, message: str) -> None:
        return

    @override
    def success(self, message: str) -> None:
        return

    @override
    def warning(self, message: str) -> None:
        return

    @override
    def error(self, message: str) -> None:
        return

    @override
    def debug(self, message: str) -> None:
        return

    @override
    def verbose(self, message: str) -> None:
        return

    @override
    def log_catalog_loaded(
        self,
        *,
        source: Path | str,
        type_count: int,
        element_count: int,
        value_set_count: int,
    ) -> None:
        return None

    @override
    def log_record_processed(self, operation: str, type_name: str) -> None:
        return None

    @override
    def log_validation_result(self, result: ValidationResult) -> None:
        return None

    @override
    def log_final_stats(self) -> None:
        return None
