"""Catalog loading: CSV tables -> validated rows -> schemas -> registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, ValidationError

from ...constants import CatalogFiles
from ...domain.errors import CatalogError
from .rows import ElementRow, TypeRow, ValueSetRow
from .schema_builder import build_schemas, collect_value_sets

if TYPE_CHECKING:
    import pandas as pd

    from ...application.ports.repositories import CatalogRepositoryPort
    from ...application.ports.services import LoggerPort
    from ...domain.entities.element import RecordSchema
    from ...domain.services.schema_registry import SchemaRegistry


def parse_rows[M: BaseModel](frame: pd.DataFrame, model: type[M], filename: str) -> list[M]:
    rows: list[M] = []
    for index, record in enumerate(frame.to_dict(orient="records")):
        try:
            rows.append(model.model_validate(record))
        except ValidationError as exc:
            # 1-based, after the header row
            problems = "; ".join(
                f"{'.'.join(str(loc) for loc in err['loc']) or 'row'}: {err['msg']}"
                for err in exc.errors()
            )
            raise CatalogError(f"{filename} line {index + 2}: {problems}") from exc
    return rows


class CatalogLoader:
    def __init__(self, repository: CatalogRepositoryPort, logger: LoggerPort | None = None) -> None:
        super().__init__()
        self.repository = repository
        self.logger = logger

    def load_schemas(self) -> list[RecordSchema]:
        types = parse_rows(self.repository.read_types(), TypeRow, CatalogFiles.TYPES)
        elements = parse_rows(self.repository.read_elements(), ElementRow, CatalogFiles.ELEMENTS)
        value_set_rows = parse_rows(
            self.repository.read_value_sets(), ValueSetRow, CatalogFiles.VALUE_SETS
        )
        value_sets = collect_value_sets(value_set_rows)
        schemas = build_schemas(types, elements, value_sets)
        if self.logger is not None:
            self.logger.log_catalog_loaded(
                source=self.repository.catalog_dir,
                type_count=len(schemas),
                element_count=len(elements),
                value_set_count=len(value_sets),
            )
        return schemas

    def load_into(self, registry: SchemaRegistry, *, seal: bool = True) -> int:
        """Register every catalog schema; seal the registry afterwards by default."""
        count = registry.register_all(self.load_schemas())
        unresolved = registry.unresolved_types()
        if unresolved:
            raise CatalogError(
                f"Catalog references unregistered types: {', '.join(sorted(unresolved))}"
            )
        if seal:
            registry.seal()
        return count


def load_catalog(
    registry: SchemaRegistry,
    repository: CatalogRepositoryPort,
    logger: LoggerPort | None = None,
    *,
    seal: bool = True,
) -> int:
    return CatalogLoader(repository, logger).load_into(registry, seal=seal)
