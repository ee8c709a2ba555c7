"""Choice (``[x]``) resolution.

A choice group is one logical slot carried under one of several concrete
property names (``valueQuantity``, ``valueDateTime``, ...). The mapping
between the two lives here and nowhere else: the codec projects through it
on the way in and out, the validator and ``Instance.choice`` bind through it.
"""

from __future__ import annotations

from collections.abc import Collection, Mapping
from dataclasses import dataclass
from typing import Any

from ..entities.element import ChoiceGroup, FieldDescriptor, RecordSchema
from ..entities.instance import Choice
from ..errors import AmbiguousChoiceError, UnknownChoiceTypeError


@dataclass(frozen=True, slots=True)
class ResolvedProperty:
    """A payload key matched against a schema."""

    descriptor: FieldDescriptor
    group: ChoiceGroup | None = None

    @property
    def type_code(self) -> str:
        return self.descriptor.type_code

    @property
    def is_choice(self) -> bool:
        return self.group is not None


def _reject_unknown_variants(
    group: ChoiceGroup,
    candidate_properties: Mapping[str, Any],
    known: Collection[str],
    path: str,
) -> None:
    for key in candidate_properties:
        if key in known or not group.claims(key):
            continue
        if group.variant_for(key) is None:
            raise UnknownChoiceTypeError(
                f"'{key}' is not a declared variant of '{group.logical_name}[x]' "
                f"(allowed: {', '.join(group.property_names())})",
                key=key,
                path=path,
            )


def bind(
    group: ChoiceGroup,
    candidate_properties: Mapping[str, Any],
    *,
    known: Collection[str] = (),
    path: str = "",
) -> Choice | None:
    """Bind ``group`` against the populated properties of one record.

    Variants are checked in declared order. Returns ``None`` when none is
    present and the tagged ``Choice`` when exactly one is. Raises
    ``AmbiguousChoiceError`` for two or more, and ``UnknownChoiceTypeError``
    when a property extends the logical name with an undeclared type suffix.
    ``known`` names exact elements of the owning schema that merely share the
    prefix and must not be taken for variants.
    """
    _reject_unknown_variants(group, candidate_properties, known, path)

    matches = [
        variant for variant in group.variants if variant.name in candidate_properties
    ]
    if not matches:
        return None
    if len(matches) > 1:
        raise AmbiguousChoiceError(group.logical_name, [v.name for v in matches])
    variant = matches[0]
    return Choice(group.logical_name, variant.type_code, candidate_properties[variant.name])


class ChoiceResolver:
    def bind(
        self,
        group: ChoiceGroup,
        candidate_properties: Mapping[str, Any],
        *,
        known: Collection[str] = (),
        path: str = "",
    ) -> Choice | None:
        return bind(group, candidate_properties, known=known, path=path)

    def resolve_property(
        self, schema: RecordSchema, key: str, *, path: str = ""
    ) -> ResolvedProperty | None:
        """Match a single payload key: exact element name first, then choice suffix.

        Returns ``None`` when neither matches. Every group is tried, so with
        ``value[x]`` and ``valueRange[x]`` side by side ``valueRangeQuantity``
        finds its own group. A key that some group claims by prefix but none
        declares raises ``UnknownChoiceTypeError``.
        """
        descriptor = schema.get_field(key)
        if descriptor is not None:
            return ResolvedProperty(descriptor)

        for group in schema.choice_groups():
            variant = group.variant_for(key)
            if variant is not None:
                return ResolvedProperty(variant, group)

        group = schema.group_claiming(key)
        if group is not None:
            raise UnknownChoiceTypeError(
                f"'{key}' is not a declared variant of '{group.logical_name}[x]' "
                f"(allowed: {', '.join(group.property_names())})",
                key=key,
                path=path,
            )
        return None

    def bind_all(
        self, schema: RecordSchema, properties: Mapping[str, Any]
    ) -> dict[str, Choice]:
        """Bind every choice group of ``schema``; unresolved groups are left out."""
        known = {*schema.element_names(), *schema.variant_names()}
        bound: dict[str, Choice] = {}
        for group in schema.choice_groups():
            choice = bind(group, properties, known=known)
            if choice is not None:
                bound[group.logical_name] = choice
        return bound
