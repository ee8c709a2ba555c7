"""Schema model: field descriptors, choice groups and record schemas.

A record type is plain data: an ordered tuple of ``FieldDescriptor`` and
``ChoiceGroup`` entries. Nested structured types are referenced by name
(``type_code``) and resolved through the registry when needed, so a schema
may refer to itself (``Extension.extension``).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
import math
from types import MappingProxyType

UNBOUNDED = math.inf
CHOICE_MARKER = "[x]"


class BindingStrength(str, Enum):
    REQUIRED = "required"
    EXTENSIBLE = "extensible"
    PREFERRED = "preferred"
    EXAMPLE = "example"

    @property
    def is_advisory(self) -> bool:
        return self in (BindingStrength.PREFERRED, BindingStrength.EXAMPLE)


class TypeKind(str, Enum):
    RESOURCE = "resource"
    COMPLEX_TYPE = "complex-type"
    BACKBONE_ELEMENT = "backbone-element"


def _freeze_codes(
    codes: Mapping[str, frozenset[str] | set[str] | tuple[str, ...]],
) -> Mapping[str, frozenset[str]]:
    return MappingProxyType({system: frozenset(values) for system, values in codes.items()})


@dataclass(frozen=True, slots=True)
class Binding:
    strength: BindingStrength
    value_set: str | None = None
    allowed_codes: Mapping[str, frozenset[str]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "strength", BindingStrength(self.strength))
        object.__setattr__(self, "allowed_codes", _freeze_codes(self.allowed_codes))

    @property
    def is_enumerated(self) -> bool:
        return any(self.allowed_codes.values())

    def contains(self, code: str, system: str | None = None) -> bool:
        """Syntactic membership: ``code`` in ``system``, or in any system when unknown."""
        if system is not None:
            return code in self.allowed_codes.get(system, frozenset())
        return any(code in codes for codes in self.allowed_codes.values())


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    name: str
    type_code: str
    min: int = 0
    max: int | float = 1
    path: str = ""
    binding: Binding | None = None
    type_profiles: tuple[str, ...] = ()
    choice_group: str | None = None

    def __post_init__(self) -> None:
        if self.min < 0:
            raise ValueError(f"{self.name}: min must be non-negative, got {self.min}")
        if self.max != UNBOUNDED and (self.max < 1 or self.max != int(self.max)):
            raise ValueError(f"{self.name}: max must be a positive integer or UNBOUNDED")
        if self.min > self.max:
            raise ValueError(f"{self.name}: min {self.min} exceeds max {self.max}")
        object.__setattr__(self, "type_profiles", tuple(self.type_profiles))

    @property
    def is_repeating(self) -> bool:
        return self.max > 1

    @property
    def is_required(self) -> bool:
        return self.min > 0

    def cardinality(self) -> str:
        upper = "*" if self.max == UNBOUNDED else str(int(self.max))
        return f"{self.min}..{upper}"


def choice_suffix(type_code: str) -> str:
    """Return the property suffix for a variant type (``dateTime`` -> ``DateTime``)."""
    return type_code[:1].upper() + type_code[1:]


@dataclass(frozen=True, slots=True)
class ChoiceGroup:
    logical_name: str
    variants: tuple[FieldDescriptor, ...]
    min: int = 0
    max: int = 1
    path: str = ""
    _by_property: Mapping[str, FieldDescriptor] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        if not self.variants:
            raise ValueError(f"Choice group '{self.logical_name}' declares no variants")
        if self.min not in (0, 1) or self.max != 1:
            raise ValueError(
                f"Choice group '{self.logical_name}' must be 0..1 or 1..1"
            )
        index: dict[str, FieldDescriptor] = {}
        for variant in self.variants:
            expected = self.property_name(variant.type_code)
            if variant.name != expected:
                raise ValueError(
                    f"Variant '{variant.name}' of '{self.logical_name}' must be named '{expected}'"
                )
            if expected in index:
                raise ValueError(f"Duplicate variant '{expected}' in '{self.logical_name}'")
            index[expected] = variant
        object.__setattr__(self, "variants", tuple(self.variants))
        object.__setattr__(self, "_by_property", MappingProxyType(index))

    @property
    def name(self) -> str:
        return self.logical_name

    @property
    def type_codes(self) -> tuple[str, ...]:
        return tuple(variant.type_code for variant in self.variants)

    def property_name(self, type_code: str) -> str:
        return f"{self.logical_name}{choice_suffix(type_code)}"

    def claims(self, property_name: str) -> bool:
        """True when ``property_name`` is shaped like a variant of this group.

        The remainder after the logical name must start with an upper-case
        letter; ``values`` is not a ``value[x]`` candidate. Exact element
        names are matched by callers before any group is consulted.
        """
        if not property_name.startswith(self.logical_name):
            return False
        remainder = property_name[len(self.logical_name) :]
        return bool(remainder) and remainder[0].isupper()

    def variant_for(self, property_name: str) -> FieldDescriptor | None:
        return self._by_property.get(property_name)

    def variant_of_type(self, type_code: str) -> FieldDescriptor | None:
        return self._by_property.get(self.property_name(type_code))

    def property_names(self) -> tuple[str, ...]:
        return tuple(self._by_property)


SchemaEntry = FieldDescriptor | ChoiceGroup


@dataclass(frozen=True, slots=True)
class RecordSchema:
    type_name: str
    entries: tuple[SchemaEntry, ...]
    kind: TypeKind = TypeKind.COMPLEX_TYPE
    _by_name: Mapping[str, SchemaEntry] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "kind", TypeKind(self.kind))
        object.__setattr__(self, "entries", tuple(self.entries))
        index: dict[str, SchemaEntry] = {}
        for entry in self.entries:
            if entry.name in index:
                raise ValueError(f"{self.type_name}: duplicate element '{entry.name}'")
            index[entry.name] = entry
        object.__setattr__(self, "_by_name", MappingProxyType(index))

    @property
    def is_resource(self) -> bool:
        return self.kind == TypeKind.RESOURCE

    def element(self, name: str) -> SchemaEntry | None:
        return self._by_name.get(name)

    def element_names(self) -> tuple[str, ...]:
        return tuple(self._by_name)

    def fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(e for e in self.entries if isinstance(e, FieldDescriptor))

    def choice_groups(self) -> tuple[ChoiceGroup, ...]:
        return tuple(e for e in self.entries if isinstance(e, ChoiceGroup))

    def get_field(self, name: str) -> FieldDescriptor | None:
        entry = self._by_name.get(name)
        return entry if isinstance(entry, FieldDescriptor) else None

    def get_choice_group(self, logical_name: str) -> ChoiceGroup | None:
        entry = self._by_name.get(logical_name)
        return entry if isinstance(entry, ChoiceGroup) else None

    def variant_names(self) -> tuple[str, ...]:
        return tuple(name for group in self.choice_groups() for name in group.property_names())

    def group_claiming(self, property_name: str) -> ChoiceGroup | None:
        """The group with the longest logical name that claims ``property_name``."""
        claiming = [group for group in self.choice_groups() if group.claims(property_name)]
        return max(claiming, key=lambda group: len(group.logical_name), default=None)
