"""Generic record instances.

An ``Instance`` is one record of any registered type: a type name plus an
ordered mapping from property name to value. Choice properties are stored
under their concrete name (``valueDateTime``); the tagged ``Choice`` view is
obtained through the choice resolver so the naming rule lives in one place.

Instances are not synchronized. Callers sharing one across threads must
serialize their own writes.
"""

from __future__ import annotations

from collections.abc import Collection, Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from .element import ChoiceGroup, choice_suffix


@dataclass(frozen=True, slots=True)
class Choice:
    """The populated variant of a choice group: ``{kind, value}``."""

    name: str
    type_code: str
    value: Any

    @property
    def property_name(self) -> str:
        return f"{self.name}{choice_suffix(self.type_code)}"


class Instance(MutableMapping[str, Any]):
    __slots__ = ("_properties", "type_name")

    def __init__(
        self,
        type_name: str,
        properties: Mapping[str, Any] | None = None,
        /,
        **kwargs: Any,
    ) -> None:
        super().__init__()
        self.type_name = type_name
        self._properties: dict[str, Any] = {}
        if properties:
            self._properties.update(properties)
        self._properties.update(kwargs)

    def __getitem__(self, key: str) -> Any:
        return self._properties[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._properties[key] = value

    def __delitem__(self, key: str) -> None:
        del self._properties[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Instance):
            return NotImplemented
        return self.type_name == other.type_name and self._properties == other._properties

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        props = ", ".join(f"{k}={v!r}" for k, v in self._properties.items())
        return f"Instance({self.type_name!r}, {props})" if props else f"Instance({self.type_name!r})"

    def populated(self) -> dict[str, Any]:
        """Properties that count as present (not ``None``, not an empty list)."""
        return {
            key: value
            for key, value in self._properties.items()
            if value is not None and value != []
        }

    def choice(self, group: ChoiceGroup, *, known: Collection[str] = ()) -> Choice | None:
        """Bind ``group``; ``known`` names other properties sharing its prefix."""
        # Lazy import to avoid circular imports
        from ..services.choice_resolver import bind

        return bind(group, self.populated(), known=known)

    def set_choice(self, group: ChoiceGroup, type_code: str, value: Any) -> None:
        """Populate ``group`` with one variant, clearing any other variant."""
        variant = group.variant_of_type(type_code)
        if variant is None:
            raise ValueError(
                f"'{type_code}' is not a declared type of '{group.logical_name}[x]' "
                f"(expected one of: {', '.join(group.type_codes)})"
            )
        for name in group.property_names():
            self._properties.pop(name, None)
        if value is not None:
            self._properties[variant.name] = value

    def clear_choice(self, group: ChoiceGroup) -> None:
        for name in group.property_names():
            self._properties.pop(name, None)

    def copy(self) -> Instance:
        return Instance(self.type_name, self._properties)
