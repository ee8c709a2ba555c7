"""Tests for loading a catalog from CSV tables."""

from __future__ import annotations

from pathlib import Path

import pandas as pd
import pytest

from fhir_model_engine.config import EngineConfig
from fhir_model_engine.domain.entities.element import ChoiceGroup, RecordSchema
from fhir_model_engine.domain.errors import CatalogError, RegistrySealedError
from fhir_model_engine.domain.services.schema_registry import SchemaRegistry
from fhir_model_engine.infrastructure.catalog.loader import (
    CatalogLoader,
    load_catalog,
    parse_rows,
)
from fhir_model_engine.infrastructure.catalog.rows import TypeRow
from fhir_model_engine.infrastructure.logging.null_logger import NullLogger
from fhir_model_engine.infrastructure.repositories.catalog_repository import CatalogRepository

TYPES = """Type Name,Kind,Description
Coding,complex-type,A code
Sample,resource,A sample resource
"""

ELEMENTS = """Type Name,Element Order,Element Name,Path,Type,Min,Max,Choice Types,Binding Strength,Binding Value Set,Type Profiles,Short
Coding,1,system,Coding.system,uri,0,1,,,,,
Coding,2,code,Coding.code,code,0,1,,,,,
Sample,2,status,Sample.status,code,1,1,,required,http://x/ValueSet/status,,
Sample,1,id,Sample.id,id,0,1,,,,,
Sample,3,value[x],Sample.value[x],,0,1,Coding;string,,,,
Sample,4,note,Sample.note,string,0,*,,,,,
"""

VALUE_SETS = """Value Set URI,System,Code,Display
http://x/ValueSet/status,http://x/status,final,Final
http://x/ValueSet/status,http://x/status,draft,Draft
"""


def _write_catalog(directory: Path, *, types=TYPES, elements=ELEMENTS, value_sets=VALUE_SETS) -> Path:
    directory.mkdir(parents=True, exist_ok=True)
    (directory / "Types.csv").write_text(types, encoding="utf-8")
    (directory / "Elements.csv").write_text(elements, encoding="utf-8")
    if value_sets is not None:
        (directory / "ValueSets.csv").write_text(value_sets, encoding="utf-8")
    return directory


def _repository(directory: Path) -> CatalogRepository:
    return CatalogRepository(EngineConfig(catalog_dir=directory))


class RecordingLogger(NullLogger):
    def __init__(self) -> None:
        super().__init__()
        self.catalog_events: list[dict] = []

    def log_catalog_loaded(self, **kwargs) -> None:
        self.catalog_events.append(kwargs)


class TestParseRows:
    """Tests for parse_rows."""

    def test_reports_file_and_line(self):
        """Failures name the CSV line (header is line 1)."""
        frame = pd.DataFrame(
            [{"Type Name": "A", "Kind": "resource"}, {"Type Name": "B", "Kind": "bogus"}]
        )

        with pytest.raises(CatalogError, match="Types.csv line 3: Kind"):
            parse_rows(frame, TypeRow, "Types.csv")

    def test_parses_every_row(self):
        """Valid frames become models in order."""
        frame = pd.DataFrame([{"Type Name": "A", "Kind": "resource"}])

        assert [r.type_name for r in parse_rows(frame, TypeRow, "Types.csv")] == ["A"]


class TestCatalogLoader:
    """Tests for CatalogLoader."""

    def test_load_schemas(self, tmp_path):
        """Rows become schemas with bindings and choice groups."""
        loader = CatalogLoader(_repository(_write_catalog(tmp_path)))

        schemas = {s.type_name: s for s in loader.load_schemas()}

        sample = schemas["Sample"]
        assert sample.element_names() == ("id", "status", "value", "note")
        assert isinstance(sample.element("value"), ChoiceGroup)
        assert sample.get_field("status").binding.contains("final", "http://x/status")
        assert sample.get_field("note").is_repeating

    def test_load_into_registers_and_seals(self, tmp_path):
        """The registry is sealed after loading."""
        registry = SchemaRegistry()

        count = load_catalog(registry, _repository(_write_catalog(tmp_path)))

        assert count == 2
        assert registry.sealed
        assert registry.resource_types() == ["Sample"]
        with pytest.raises(RegistrySealedError):
            registry.register("Other", RecordSchema("Other", ()))

    def test_load_without_sealing(self, tmp_path):
        """seal=False leaves the registry open."""
        registry = SchemaRegistry()

        CatalogLoader(_repository(_write_catalog(tmp_path))).load_into(registry, seal=False)

        assert not registry.sealed

    def test_logs_catalog_summary(self, tmp_path):
        """The logger receives counts and the source directory."""
        logger = RecordingLogger()

        CatalogLoader(_repository(_write_catalog(tmp_path)), logger).load_schemas()

        assert logger.catalog_events == [
            {"source": tmp_path, "type_count": 2, "element_count": 6, "value_set_count": 1}
        ]

    def test_value_sets_are_optional(self, tmp_path):
        """Without ValueSets.csv, bindings are unenumerated."""
        loader = CatalogLoader(_repository(_write_catalog(tmp_path, value_sets=None)))

        sample = {s.type_name: s for s in loader.load_schemas()}["Sample"]

        assert not sample.get_field("status").binding.is_enumerated

    def test_unresolved_types_rejected(self, tmp_path):
        """Every referenced complex type must be in the catalog."""
        elements = ELEMENTS + "Sample,5,amount,Sample.amount,Quantity,0,1,,,,,\n"
        registry = SchemaRegistry()

        with pytest.raises(CatalogError, match="unregistered types: Quantity"):
            load_catalog(registry, _repository(_write_catalog(tmp_path, elements=elements)))

        assert not registry.sealed

    def test_bad_element_row(self, tmp_path):
        """A malformed element row names its line."""
        elements = ELEMENTS + "Sample,5,broken,Sample.broken,string,0,x,,,,,\n"

        with pytest.raises(CatalogError, match="Elements.csv line 8"):
            load_catalog(
                SchemaRegistry(), _repository(_write_catalog(tmp_path, elements=elements))
            )
