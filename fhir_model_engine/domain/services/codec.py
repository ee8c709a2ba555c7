"""Instance <-> interchange tree codec.

The interchange tree is format neutral: scalars, lists and ordered string
keyed mappings. JSON and XML adapters in ``infrastructure.io`` convert it to
and from text.

Encoding follows schema declaration order. Repeating elements are always
lists (even with one entry); ``max = 1`` elements are bare values. Choice
groups are emitted under their concrete property name. Decoding is the
mirror image and rejects anything it cannot place.
"""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import TYPE_CHECKING, Any

from ..entities.element import ChoiceGroup, FieldDescriptor, RecordSchema
from ..entities.findings import join_path
from ..entities.instance import Instance
from ..entities.primitives import get_primitive
from ..errors import AmbiguousChoiceError, DecodeError, EncodeError, UnknownTypeError
from .choice_resolver import ChoiceResolver
from .schema_registry import ABSTRACT_RESOURCE
from .suggestions import suggest_names

if TYPE_CHECKING:
    from .schema_registry import SchemaRegistry

RESOURCE_TYPE_KEY = "resourceType"

TreeNode = Any


def property_names(schema: RecordSchema) -> list[str]:
    """Every key a payload for ``schema`` may carry."""
    names: list[str] = []
    for entry in schema.entries:
        if isinstance(entry, ChoiceGroup):
            names.extend(entry.property_names())
        else:
            names.append(entry.name)
    return names


def _kind_name(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, Mapping):
        return "object"
    if isinstance(value, list):
        return "array"
    if isinstance(value, (int, float, Decimal)):
        return "number"
    if isinstance(value, str):
        return "string"
    return type(value).__name__


class TreeCodec:
    def __init__(self, registry: SchemaRegistry, resolver: ChoiceResolver | None = None) -> None:
        super().__init__()
        self.registry = registry
        self.resolver = resolver or ChoiceResolver()

    # ------------------------------------------------------------------
    # Encoding
    # ------------------------------------------------------------------

    def encode(self, instance: Instance, schema: RecordSchema) -> dict[str, TreeNode]:
        return self._encode_instance(instance, schema, "")

    def _encode_instance(
        self, instance: Instance, schema: RecordSchema, path: str
    ) -> dict[str, TreeNode]:
        if instance.type_name != schema.type_name:
            raise EncodeError(
                f"Instance of '{instance.type_name}' cannot be encoded as '{schema.type_name}'",
                path=path,
            )
        populated = instance.populated()
        allowed = property_names(schema)
        for key in populated:
            if key not in allowed:
                hint = suggest_names(key, allowed)
                message = f"Unknown element '{key}' for type '{schema.type_name}'"
                if hint:
                    message += f" (did you mean: {', '.join(hint)}?)"
                raise EncodeError(message, path=join_path(path, key))

        node: dict[str, TreeNode] = {}
        if schema.is_resource:
            node[RESOURCE_TYPE_KEY] = schema.type_name

        for entry in schema.entries:
            if isinstance(entry, ChoiceGroup):
                candidates = {
                    k: v for k, v in populated.items() if entry.variant_for(k) is not None
                }
                choice = self.resolver.bind(entry, candidates, path=path)
                if choice is None:
                    continue
                variant = entry.variant_of_type(choice.type_code)
                assert variant is not None
                node[variant.name] = self._encode_field(
                    variant, choice.value, join_path(path, variant.name)
                )
            elif entry.name in populated:
                node[entry.name] = self._encode_field(
                    entry, populated[entry.name], join_path(path, entry.name)
                )
        return node

    def _encode_field(self, descriptor: FieldDescriptor, value: Any, path: str) -> TreeNode:
        if descriptor.is_repeating:
            if not isinstance(value, list):
                raise EncodeError(
                    f"Element '{descriptor.name}' repeats ({descriptor.cardinality()}) "
                    f"and must be a list, got {_kind_name(value)}",
                    path=path,
                )
            return [
                self._encode_value(descriptor, item, f"{path}[{index}]")
                for index, item in enumerate(value)
            ]
        if isinstance(value, list):
            raise EncodeError(
                f"Element '{descriptor.name}' allows at most one value, got a list of {len(value)}",
                path=path,
            )
        return self._encode_value(descriptor, value, path)

    def _encode_value(self, descriptor: FieldDescriptor, value: Any, path: str) -> TreeNode:
        primitive = get_primitive(descriptor.type_code)
        if primitive is not None:
            if value is None or not primitive.accepts_python_value(value):
                raise EncodeError(
                    f"Expected {descriptor.type_code}, got {_kind_name(value)}", path=path
                )
            return value

        if not isinstance(value, Instance):
            raise EncodeError(
                f"Expected a {descriptor.type_code} instance, got {_kind_name(value)}",
                path=path,
            )
        if descriptor.type_code == ABSTRACT_RESOURCE:
            schema = self.registry.lookup(value.type_name)
            if not schema.is_resource:
                raise EncodeError(f"Expected a resource, got {value.type_name}", path=path)
        else:
            schema = self.registry.lookup(descriptor.type_code)
        return self._encode_instance(value, schema, path)

    # ------------------------------------------------------------------
    # Decoding
    # ------------------------------------------------------------------

    def decode(self, node: TreeNode, schema: RecordSchema) -> Instance:
        return self._decode_instance(node, schema, "")

    def _decode_instance(self, node: TreeNode, schema: RecordSchema, path: str) -> Instance:
        if not isinstance(node, Mapping):
            raise DecodeError(
                f"Expected an object for {schema.type_name}, got {_kind_name(node)}", path=path
            )
        if schema.is_resource:
            resource_type = node.get(RESOURCE_TYPE_KEY)
            if resource_type is None:
                raise DecodeError(
                    f"Missing '{RESOURCE_TYPE_KEY}' for {schema.type_name}",
                    key=RESOURCE_TYPE_KEY,
                    path=path,
                )
            if resource_type != schema.type_name:
                raise DecodeError(
                    f"Expected resourceType '{schema.type_name}', got '{resource_type}'",
                    key=RESOURCE_TYPE_KEY,
                    path=path,
                )

        instance = Instance(schema.type_name)
        bound: dict[str, str] = {}
        for key, raw in node.items():
            if not isinstance(key, str):
                raise DecodeError(f"Property names must be strings, got {key!r}", path=path)
            if key == RESOURCE_TYPE_KEY and schema.is_resource:
                continue
            child_path = join_path(path, key)
            resolved = self.resolver.resolve_property(schema, key, path=child_path)
            if resolved is None:
                raise self._unknown_key(schema, key, child_path)
            if resolved.group is not None:
                logical = resolved.group.logical_name
                if logical in bound:
                    raise AmbiguousChoiceError(logical, [bound[logical], key])
                bound[logical] = key
            instance[key] = self._decode_field(resolved.descriptor, raw, child_path, key)
        return instance

    def _unknown_key(self, schema: RecordSchema, key: str, path: str) -> DecodeError:
        hint = suggest_names(key, property_names(schema))
        message = f"Unknown property '{key}' for type '{schema.type_name}'"
        if hint:
            message += f" (did you mean: {', '.join(hint)}?)"
        return DecodeError(message, key=key, path=path)

    def _decode_field(
        self, descriptor: FieldDescriptor, raw: TreeNode, path: str, key: str
    ) -> Any:
        if raw is None:
            raise DecodeError(f"'{key}' must not be null", key=key, path=path)
        if descriptor.is_repeating:
            if not isinstance(raw, list):
                raise DecodeError(
                    f"'{key}' repeats ({descriptor.cardinality()}) and must be a list, "
                    f"got {_kind_name(raw)}",
                    key=key,
                    path=path,
                )
            if not raw:
                raise DecodeError(f"'{key}' must not be an empty list", key=key, path=path)
            return [
                self._decode_value(descriptor, item, f"{path}[{index}]", key)
                for index, item in enumerate(raw)
            ]
        if isinstance(raw, list):
            raise DecodeError(
                f"'{key}' allows a single value ({descriptor.cardinality()}), got a list",
                key=key,
                path=path,
            )
        return self._decode_value(descriptor, raw, path, key)

    def _decode_value(
        self, descriptor: FieldDescriptor, raw: TreeNode, path: str, key: str
    ) -> Any:
        primitive = get_primitive(descriptor.type_code)
        if primitive is not None:
            if raw is None or not primitive.accepts_python_value(raw):
                raise DecodeError(
                    f"Expected {primitive.json_kind} for {descriptor.type_code} '{key}', "
                    f"got {_kind_name(raw)}",
                    key=key,
                    path=path,
                )
            return raw

        if descriptor.type_code == ABSTRACT_RESOURCE:
            schema = self._contained_schema(raw, path, key)
        else:
            schema = self.registry.lookup(descriptor.type_code)
        return self._decode_instance(raw, schema, path)

    def _contained_schema(self, raw: TreeNode, path: str, key: str) -> RecordSchema:
        if not isinstance(raw, Mapping):
            raise DecodeError(
                f"Expected a resource object, got {_kind_name(raw)}", key=key, path=path
            )
        resource_type = raw.get(RESOURCE_TYPE_KEY)
        if not isinstance(resource_type, str):
            raise DecodeError(
                f"Missing '{RESOURCE_TYPE_KEY}' on embedded resource", key=key, path=path
            )
        try:
            schema = self.registry.lookup(resource_type)
        except UnknownTypeError as exc:
            raise DecodeError(str(exc), key=key, path=path) from exc
        if not schema.is_resource:
            raise DecodeError(f"'{resource_type}' is not a resource type", key=key, path=path)
        return schema
