from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    from ...domain.entities.findings import ValidationResult


@runtime_checkable
class LoggerPort(Protocol):
    pass

    def info(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def warning(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def verbose(self, message: str) -> None: ...

    def log_catalog_loaded(
        self,
        *,
        source: Path | str,
        type_count: int,
        element_count: int,
        value_set_count: int,
    ) -> None: ...

    def log_record_processed(self, operation: str, type_name: str) -> None: ...

    def log_validation_result(self, result: ValidationResult) -> None: ...

    def log_final_stats(self) -> None: ...
