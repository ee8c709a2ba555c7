"""Row models for the catalog tables.

Each CSV row is validated into one of these pydantic models before any
schema is built, so a malformed catalog fails with the file and row that
caused it.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ...domain.entities.element import CHOICE_MARKER, UNBOUNDED, BindingStrength, TypeKind

LIST_SEPARATOR = ";"


def _split_list(value: object) -> tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(str(v).strip() for v in value if str(v).strip())
    return tuple(part.strip() for part in str(value).split(LIST_SEPARATOR) if part.strip())


def _blank_to_none(value: object) -> object:
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CatalogRow(BaseModel):
    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        frozen=True,
        extra="ignore",
    )


class TypeRow(CatalogRow):
    type_name: str = Field(alias="Type Name", min_length=1)
    kind: TypeKind = Field(alias="Kind")
    description: str = Field(default="", alias="Description")


class ElementRow(CatalogRow):
    type_name: str = Field(alias="Type Name", min_length=1)
    order: int = Field(alias="Element Order", ge=0)
    element_name: str = Field(alias="Element Name", min_length=1)
    path: str = Field(default="", alias="Path")
    type_code: str = Field(default="", alias="Type")
    min: int = Field(alias="Min", ge=0)
    max: int | float = Field(alias="Max")
    choice_types: tuple[str, ...] = Field(default=(), alias="Choice Types")
    binding_strength: BindingStrength | None = Field(default=None, alias="Binding Strength")
    binding_value_set: str | None = Field(default=None, alias="Binding Value Set")
    type_profiles: tuple[str, ...] = Field(default=(), alias="Type Profiles")
    short: str = Field(default="", alias="Short")

    @field_validator("max", mode="before")
    @classmethod
    def _parse_max(cls, value: object) -> int | float:
        if value == UNBOUNDED:
            return UNBOUNDED
        text = str(value).strip()
        if text == "*":
            return UNBOUNDED
        try:
            parsed = int(text)
        except ValueError as exc:
            raise ValueError(f"Max must be '*' or an integer, got {text!r}") from exc
        if parsed < 1:
            raise ValueError(f"Max must be at least 1, got {parsed}")
        return parsed

    @field_validator("choice_types", "type_profiles", mode="before")
    @classmethod
    def _parse_list(cls, value: object) -> tuple[str, ...]:
        return _split_list(value)

    @field_validator("binding_strength", "binding_value_set", mode="before")
    @classmethod
    def _parse_optional(cls, value: object) -> object:
        return _blank_to_none(value)

    @model_validator(mode="after")
    def _check_shape(self) -> ElementRow:
        if self.min > self.max:
            raise ValueError(f"Min {self.min} exceeds Max for '{self.element_name}'")
        if self.is_choice:
            if not self.choice_types:
                raise ValueError(f"Choice element '{self.element_name}' lists no Choice Types")
            if self.type_code:
                raise ValueError(
                    f"Choice element '{self.element_name}' must leave Type empty"
                )
        elif not self.type_code:
            raise ValueError(f"Element '{self.element_name}' has no Type")
        if self.binding_value_set and self.binding_strength is None:
            raise ValueError(
                f"Element '{self.element_name}' names a value set without a binding strength"
            )
        return self

    @property
    def is_choice(self) -> bool:
        return self.element_name.endswith(CHOICE_MARKER)

    @property
    def logical_name(self) -> str:
        return self.element_name.removesuffix(CHOICE_MARKER)


class ValueSetRow(CatalogRow):
    value_set: str = Field(alias="Value Set URI", min_length=1)
    system: str = Field(alias="System", min_length=1)
    code: str = Field(alias="Code", min_length=1)
    display: str = Field(default="", alias="Display")
