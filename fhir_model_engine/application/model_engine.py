"""Programmatic facade over the engine services.

``ModelEngine`` bundles a sealed registry with the validator and codec and
adds the text formats. Every operation accepts either a ``RecordSchema``, a
type name, or nothing; with nothing the type is taken from the instance
(``type_name``) or from the payload (``resourceType`` / root XML element).
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..domain.errors import DecodeError
from ..domain.services.codec import RESOURCE_TYPE_KEY, TreeCodec
from ..domain.services.validator import Validator
from ..infrastructure.io import json_format, xml_format

if TYPE_CHECKING:
    from ..domain.entities.element import RecordSchema
    from ..domain.entities.findings import ValidationResult
    from ..domain.entities.instance import Choice, Instance
    from ..domain.services.choice_resolver import ChoiceResolver
    from ..domain.services.schema_registry import SchemaRegistry
    from .ports.services import LoggerPort


class ModelEngine:
    pass

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        validator: Validator | None = None,
        codec: TreeCodec | None = None,
        logger: LoggerPort | None = None,
    ) -> None:
        super().__init__()
        self.registry = registry
        self.validator = validator or Validator(registry)
        self.codec = codec or TreeCodec(registry)
        self.logger = logger

    @property
    def resolver(self) -> ChoiceResolver:
        return self.codec.resolver

    def lookup(self, type_name: str) -> RecordSchema:
        return self.registry.lookup(type_name)

    def _schema(self, schema: RecordSchema | str | None, type_name: str) -> RecordSchema:
        if schema is None:
            return self.registry.lookup(type_name)
        if isinstance(schema, str):
            return self.registry.lookup(schema)
        return schema

    def _log(self, operation: str, type_name: str) -> None:
        if self.logger is not None:
            self.logger.log_record_processed(operation, type_name)

    # Instance <-> tree

    def validate(
        self, instance: Instance, schema: RecordSchema | str | None = None
    ) -> ValidationResult:
        result = self.validator.validate(instance, self._schema(schema, instance.type_name))
        self._log("validate", result.type_name)
        if self.logger is not None:
            self.logger.log_validation_result(result)
        return result

    def encode(
        self, instance: Instance, schema: RecordSchema | str | None = None
    ) -> dict[str, Any]:
        resolved = self._schema(schema, instance.type_name)
        tree = self.codec.encode(instance, resolved)
        self._log("encode", resolved.type_name)
        return tree

    def decode(self, node: Any, schema: RecordSchema | str | None = None) -> Instance:
        if schema is None:
            schema = self._payload_type(node)
        resolved = self._schema(schema, "")
        instance = self.codec.decode(node, resolved)
        self._log("decode", resolved.type_name)
        return instance

    def choice(self, instance: Instance, logical_name: str) -> Choice | None:
        """Bound variant of choice group ``logical_name`` on ``instance``."""
        schema = self.registry.lookup(instance.type_name)
        group = schema.get_choice_group(logical_name)
        if group is None:
            raise KeyError(f"'{instance.type_name}' has no choice element '{logical_name}[x]'")
        return instance.choice(group, known=(*schema.element_names(), *schema.variant_names()))

    @staticmethod
    def _payload_type(node: Any) -> str:
        if not isinstance(node, Mapping) or not isinstance(node.get(RESOURCE_TYPE_KEY), str):
            raise DecodeError(
                f"Cannot determine the record type: payload has no '{RESOURCE_TYPE_KEY}'",
                key=RESOURCE_TYPE_KEY,
            )
        return node[RESOURCE_TYPE_KEY]

    # Text formats

    def from_json(self, text: str | bytes, schema: RecordSchema | str | None = None) -> Instance:
        return self.decode(json_format.loads(text), schema)

    def to_json(
        self,
        instance: Instance,
        schema: RecordSchema | str | None = None,
        *,
        indent: int | None = None,
    ) -> str:
        return json_format.dumps(self.encode(instance, schema), indent=indent)

    def from_xml(self, text: str | bytes, schema: RecordSchema | str | None = None) -> Instance:
        element = xml_format.from_string(text)
        if schema is None:
            _, schema = xml_format.split_tag(element.tag)
        resolved = self._schema(schema, "")
        tree = xml_format.element_to_tree(element, resolved, self.registry)
        return self.decode(tree, resolved)

    def to_xml(
        self,
        instance: Instance,
        schema: RecordSchema | str | None = None,
        *,
        indent: bool = False,
    ) -> str:
        resolved = self._schema(schema, instance.type_name)
        element = xml_format.tree_to_element(self.encode(instance, resolved), resolved, self.registry)
        return xml_format.to_string(element, indent=indent)
