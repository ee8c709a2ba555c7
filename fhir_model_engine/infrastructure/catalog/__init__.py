"""Schema catalog: CSV row models, schema building and loading."""

from .loader import CatalogLoader, load_catalog, parse_rows
from .rows import ElementRow, TypeRow, ValueSetRow
from .schema_builder import build_entry, build_schema, build_schemas, collect_value_sets

__all__ = [
    "CatalogLoader",
    "load_catalog",
    "parse_rows",
    "ElementRow",
    "TypeRow",
    "ValueSetRow",
    "build_entry",
    "build_schema",
    "build_schemas",
    "collect_value_sets",
]
