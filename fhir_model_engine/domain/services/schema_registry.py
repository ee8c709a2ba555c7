"""Schema registry: record type name -> ``RecordSchema``.

The registry is populated once at start-up (usually from the packaged
catalog) and then sealed. After sealing it is read-only, so concurrent
lookups need no locking.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from ..entities.element import ChoiceGroup, RecordSchema
from ..entities.primitives import is_primitive
from ..errors import RegistrySealedError, SchemaConflictError, UnknownTypeError
from .suggestions import suggest_names

if TYPE_CHECKING:
    from ...application.ports.services import LoggerPort

ABSTRACT_RESOURCE = "Resource"


class SchemaRegistry:
    def __init__(self, logger: LoggerPort | None = None) -> None:
        super().__init__()
        self._schemas: dict[str, RecordSchema] = {}
        self._sealed = False
        self._logger = logger

    def register(self, type_name: str, schema: RecordSchema) -> None:
        """Register ``schema`` under ``type_name``.

        Re-registering an identical schema is a no-op. A different schema
        under a known name raises ``SchemaConflictError`` right away.
        """
        if schema.type_name != type_name:
            raise SchemaConflictError(
                f"Schema for '{schema.type_name}' cannot be registered as '{type_name}'"
            )
        existing = self._schemas.get(type_name)
        if existing is not None:
            if existing == schema:
                return
            raise SchemaConflictError(
                f"Type '{type_name}' is already registered with a different schema"
            )
        if self._sealed:
            raise RegistrySealedError(
                f"Cannot register '{type_name}': registry is sealed"
            )
        self._schemas[type_name] = schema
        if self._logger is not None:
            self._logger.debug(
                f"Registered {schema.kind.value} '{type_name}' ({len(schema.entries)} elements)"
            )

    def register_all(self, schemas: Iterable[RecordSchema]) -> int:
        count = 0
        for schema in schemas:
            self.register(schema.type_name, schema)
            count += 1
        return count

    def lookup(self, type_name: str) -> RecordSchema:
        schema = self._schemas.get(type_name)
        if schema is None:
            raise UnknownTypeError(type_name, suggest_names(type_name, self._schemas))
        return schema

    def seal(self) -> None:
        self._sealed = True

    @property
    def sealed(self) -> bool:
        return self._sealed

    def __contains__(self, type_name: object) -> bool:
        return type_name in self._schemas

    def __len__(self) -> int:
        return len(self._schemas)

    def type_names(self) -> list[str]:
        return sorted(self._schemas)

    def resource_types(self) -> list[str]:
        return sorted(name for name, schema in self._schemas.items() if schema.is_resource)

    def is_primitive(self, type_code: str) -> bool:
        return is_primitive(type_code)

    def is_complex(self, type_code: str) -> bool:
        return type_code == ABSTRACT_RESOURCE or type_code in self._schemas

    def unresolved_types(self) -> set[str]:
        """Declared type codes that are neither primitives nor registered schemas."""
        missing: set[str] = set()
        for schema in self._schemas.values():
            for entry in schema.entries:
                variants = entry.variants if isinstance(entry, ChoiceGroup) else (entry,)
                for variant in variants:
                    if not is_primitive(variant.type_code) and not self.is_complex(
                        variant.type_code
                    ):
                        missing.add(variant.type_code)
        return missing
