"""Build ``RecordSchema`` values from validated catalog rows."""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Iterable, Mapping

from ...domain.entities.element import (
    Binding,
    ChoiceGroup,
    FieldDescriptor,
    RecordSchema,
    SchemaEntry,
    choice_suffix,
)
from ...domain.errors import CatalogError
from .rows import ElementRow, TypeRow, ValueSetRow

ValueSetCodes = dict[str, dict[str, set[str]]]


def collect_value_sets(rows: Iterable[ValueSetRow]) -> ValueSetCodes:
    """Group value set rows into ``{value set uri: {system: {codes}}}``."""
    value_sets: ValueSetCodes = defaultdict(lambda: defaultdict(set))
    for row in rows:
        value_sets[row.value_set][row.system].add(row.code)
    return {uri: dict(systems) for uri, systems in value_sets.items()}


def build_binding(row: ElementRow, value_sets: Mapping[str, Mapping[str, set[str]]]) -> Binding | None:
    if row.binding_strength is None:
        return None
    codes = value_sets.get(row.binding_value_set or "", {})
    return Binding(
        strength=row.binding_strength,
        value_set=row.binding_value_set,
        allowed_codes={system: frozenset(values) for system, values in codes.items()},
    )


def _element_path(row: ElementRow) -> str:
    return row.path or f"{row.type_name}.{row.element_name}"


def build_entry(row: ElementRow, value_sets: Mapping[str, Mapping[str, set[str]]]) -> SchemaEntry:
    binding = build_binding(row, value_sets)
    path = _element_path(row)
    try:
        if not row.is_choice:
            return FieldDescriptor(
                name=row.element_name,
                type_code=row.type_code,
                min=row.min,
                max=row.max,
                path=path,
                binding=binding,
                type_profiles=row.type_profiles,
            )
        if row.max != 1:
            raise ValueError(f"choice elements must have max 1, got {row.max}")
        logical = row.logical_name
        variants = tuple(
            FieldDescriptor(
                name=f"{logical}{choice_suffix(type_code)}",
                type_code=type_code,
                min=0,
                max=1,
                path=path.removesuffix("[x]") + choice_suffix(type_code),
                binding=binding,
                type_profiles=row.type_profiles if type_code == "Reference" else (),
                choice_group=logical,
            )
            for type_code in row.choice_types
        )
        return ChoiceGroup(
            logical_name=logical,
            variants=variants,
            min=row.min,
            max=1,
            path=path,
        )
    except ValueError as exc:
        raise CatalogError(f"{path}: {exc}") from exc


def build_schema(
    type_row: TypeRow,
    element_rows: Iterable[ElementRow],
    value_sets: Mapping[str, Mapping[str, set[str]]],
) -> RecordSchema:
    ordered = sorted(element_rows, key=lambda row: row.order)
    entries = [build_entry(row, value_sets) for row in ordered]
    try:
        return RecordSchema(type_name=type_row.type_name, entries=tuple(entries), kind=type_row.kind)
    except ValueError as exc:
        raise CatalogError(str(exc)) from exc


def build_schemas(
    types: Iterable[TypeRow],
    elements: Iterable[ElementRow],
    value_sets: Mapping[str, Mapping[str, set[str]]],
) -> list[RecordSchema]:
    """Build one schema per type row, in type-table order."""
    type_rows = list(types)
    counts = Counter(row.type_name for row in type_rows)
    duplicates = sorted(name for name, count in counts.items() if count > 1)
    if duplicates:
        raise CatalogError(f"Duplicate type rows: {', '.join(duplicates)}")

    declared = set(counts)
    by_type: dict[str, list[ElementRow]] = defaultdict(list)
    for row in elements:
        if row.type_name not in declared:
            raise CatalogError(
                f"Element '{row.element_name}' belongs to undeclared type '{row.type_name}'"
            )
        by_type[row.type_name].append(row)

    return [build_schema(row, by_type.get(row.type_name, []), value_sets) for row in type_rows]
