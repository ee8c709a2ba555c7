"""FHIR XML <-> interchange tree.

Follows the FHIR XML conventions:

- elements live in the ``http://hl7.org/fhir`` namespace;
- a resource is an element named after its type; an embedded resource is
  wrapped in the element of the property that holds it;
- primitive values are carried in a ``value`` attribute;
- ``id`` of a non-resource element and ``Extension.url`` are attributes;
- an ``xhtml`` element (``Narrative.div``) is the XHTML element itself, in
  the XHTML namespace, and reads back in the default-namespace form.

XML has no native types, so the schema is needed in both directions to know
which elements repeat and how to type primitive values.
"""

from __future__ import annotations

import copy
from decimal import Decimal, InvalidOperation
import re
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree as ET

from ...constants import Xml
from ...domain.entities.element import FieldDescriptor, RecordSchema
from ...domain.entities.findings import join_path
from ...domain.entities.primitives import get_primitive
from ...domain.errors import DecodeError, EncodeError, UnknownTypeError
from ...domain.services.choice_resolver import ChoiceResolver
from ...domain.services.codec import RESOURCE_TYPE_KEY
from ...domain.services.schema_registry import ABSTRACT_RESOURCE

if TYPE_CHECKING:
    from ...domain.services.schema_registry import SchemaRegistry

ET.register_namespace("", Xml.FHIR_NAMESPACE)

_INTEGER_LITERAL = re.compile(r"-?\d+")
_EXTENSION_TYPE = "Extension"
XHTML_TYPE = "xhtml"

_resolver = ChoiceResolver()


def tag(name: str, namespace: str = Xml.FHIR_NAMESPACE) -> str:
    return f"{{{namespace}}}{name}"


def split_tag(qualified: str) -> tuple[str, str]:
    """Split ``{namespace}local`` into ``(namespace, local)``."""
    if qualified.startswith("{"):
        namespace, _, local = qualified[1:].partition("}")
        return namespace, local
    return "", qualified


def _is_attribute(schema: RecordSchema, key: str) -> bool:
    if key == "id":
        return not schema.is_resource
    return key == "url" and schema.type_name == _EXTENSION_TYPE


def _resolve(schema: RecordSchema, key: str, path: str) -> FieldDescriptor:
    resolved = _resolver.resolve_property(schema, key, path=path)
    if resolved is None:
        raise DecodeError(
            f"Unknown element '{key}' for type '{schema.type_name}'", key=key, path=path
        )
    return resolved.descriptor


# -----------------------------------------------------------------------------
# Tree -> XML
# -----------------------------------------------------------------------------


def lexical_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def tree_to_element(tree: dict[str, Any], schema: RecordSchema, registry: SchemaRegistry) -> ET.Element:
    """Build the XML element for an encoded record of type ``schema``."""
    element = ET.Element(tag(schema.type_name))
    _fill_element(element, tree, schema, registry, "")
    return element


def _fill_element(
    element: ET.Element,
    node: dict[str, Any],
    schema: RecordSchema,
    registry: SchemaRegistry,
    path: str,
) -> None:
    for key, value in node.items():
        if key == RESOURCE_TYPE_KEY and schema.is_resource:
            continue
        child_path = join_path(path, key)
        if _is_attribute(schema, key):
            element.set(key, lexical_value(value))
            continue
        try:
            descriptor = _resolve(schema, key, child_path)
        except DecodeError as exc:
            raise EncodeError(str(exc)) from exc
        items = value if isinstance(value, list) else [value]
        for index, item in enumerate(items):
            item_path = f"{child_path}[{index}]" if isinstance(value, list) else child_path
            if descriptor.type_code == XHTML_TYPE:
                element.append(_parse_xhtml(item, item_path))
                continue
            child = ET.SubElement(element, tag(key))
            _fill_value(child, descriptor, item, registry, item_path)


def _parse_xhtml(value: Any, path: str) -> ET.Element:
    if not isinstance(value, str):
        raise EncodeError("Expected xhtml text", path=path)
    try:
        div = ET.fromstring(value)
    except ET.ParseError as exc:
        raise EncodeError(f"Invalid xhtml content: {exc}", path=path) from exc
    if not _is_xhtml(div.tag):
        raise EncodeError(
            f"Narrative content must be in the {Xml.XHTML_NAMESPACE} namespace", path=path
        )
    return div


def _fill_value(
    child: ET.Element,
    descriptor: FieldDescriptor,
    value: Any,
    registry: SchemaRegistry,
    path: str,
) -> None:
    if get_primitive(descriptor.type_code) is not None:
        child.set(Xml.VALUE_ATTRIBUTE, lexical_value(value))
        return
    if not isinstance(value, dict):
        raise EncodeError(f"Expected an object for {descriptor.type_code}", path=path)
    if descriptor.type_code == ABSTRACT_RESOURCE:
        schema = registry.lookup(str(value.get(RESOURCE_TYPE_KEY)))
        inner = ET.SubElement(child, tag(schema.type_name))
        _fill_element(inner, value, schema, registry, path)
        return
    _fill_element(child, value, registry.lookup(descriptor.type_code), registry, path)


def _is_xhtml(qualified: str) -> bool:
    return split_tag(qualified)[0] == Xml.XHTML_NAMESPACE


def _indent(element: ET.Element) -> None:
    """Pretty-print ``element`` in place, leaving narrative content untouched."""
    narratives = [
        (parent, index, copy.deepcopy(child))
        for parent in element.iter()
        if not _is_xhtml(parent.tag)
        for index, child in enumerate(parent)
        if _is_xhtml(child.tag)
    ]
    ET.indent(element)
    for parent, index, original in narratives:
        original.tail = parent[index].tail
        parent[index] = original


def to_string(element: ET.Element, *, indent: bool = False) -> str:
    if indent:
        _indent(element)
    return ET.tostring(element, encoding="unicode")


# -----------------------------------------------------------------------------
# XML -> tree
# -----------------------------------------------------------------------------


def from_string(text: str | bytes) -> ET.Element:
    try:
        return ET.fromstring(text)
    except ET.ParseError as exc:
        raise DecodeError(f"Invalid XML: {exc}") from exc


def parse_primitive(descriptor: FieldDescriptor, text: str, path: str) -> Any:
    primitive = get_primitive(descriptor.type_code)
    assert primitive is not None
    match primitive.json_kind:
        case "boolean":
            if text not in ("true", "false"):
                raise DecodeError(
                    f"Expected true or false, got '{text}'", key=descriptor.name, path=path
                )
            return text == "true"
        case "integer":
            if not _INTEGER_LITERAL.fullmatch(text):
                raise DecodeError(
                    f"Expected an integer, got '{text}'", key=descriptor.name, path=path
                )
            return int(text)
        case "decimal":
            if _INTEGER_LITERAL.fullmatch(text):
                return int(text)
            try:
                value = Decimal(text)
            except InvalidOperation:
                value = None
            if value is None or not value.is_finite():
                raise DecodeError(
                    f"Expected a decimal, got '{text}'", key=descriptor.name, path=path
                )
            return value
        case _:
            return text


def element_to_tree(element: ET.Element, schema: RecordSchema, registry: SchemaRegistry) -> dict[str, Any]:
    """Read the XML element of a record of type ``schema`` into a tree."""
    namespace, local = split_tag(element.tag)
    if namespace != Xml.FHIR_NAMESPACE:
        raise DecodeError(f"Element '{local}' is not in the FHIR namespace")
    if schema.is_resource and local != schema.type_name:
        raise DecodeError(
            f"Expected resource '{schema.type_name}', got '{local}'", key=RESOURCE_TYPE_KEY
        )
    return _read_element(element, schema, registry, "")


def _read_element(
    element: ET.Element, schema: RecordSchema, registry: SchemaRegistry, path: str
) -> dict[str, Any]:
    node: dict[str, Any] = {}
    if schema.is_resource:
        node[RESOURCE_TYPE_KEY] = schema.type_name

    for name, value in element.attrib.items():
        if not _is_attribute(schema, name):
            raise DecodeError(
                f"Unexpected attribute '{name}' on {schema.type_name}",
                key=name,
                path=path,
            )
        node[name] = value

    for child in element:
        namespace, local = split_tag(child.tag)
        child_path = join_path(path, local)
        if namespace not in (Xml.FHIR_NAMESPACE, Xml.XHTML_NAMESPACE):
            raise DecodeError(f"Element '{local}' is not in the FHIR namespace", key=local, path=child_path)
        descriptor = _resolve(schema, local, child_path)
        if (namespace == Xml.XHTML_NAMESPACE) != (descriptor.type_code == XHTML_TYPE):
            raise DecodeError(
                f"Element '{local}' is in the wrong namespace for {descriptor.type_code}",
                key=local,
                path=child_path,
            )
        if descriptor.is_repeating:
            items = node.setdefault(local, [])
            item_path = f"{child_path}[{len(items)}]"
            items.append(_read_value(child, descriptor, registry, item_path))
        else:
            if local in node:
                raise DecodeError(
                    f"'{local}' allows a single value ({descriptor.cardinality()})",
                    key=local,
                    path=child_path,
                )
            node[local] = _read_value(child, descriptor, registry, child_path)
    return node


def _detached(element: ET.Element) -> ET.Element:
    clone = copy.copy(element)
    clone.tail = None
    return clone


def _read_value(
    child: ET.Element, descriptor: FieldDescriptor, registry: SchemaRegistry, path: str
) -> Any:
    if descriptor.type_code == XHTML_TYPE:
        try:
            return ET.tostring(
                _detached(child), encoding="unicode", default_namespace=Xml.XHTML_NAMESPACE
            )
        except ValueError as exc:
            raise DecodeError(
                f"Narrative content must be in the xhtml namespace: {exc}",
                key=descriptor.name,
                path=path,
            ) from exc

    if get_primitive(descriptor.type_code) is not None:
        if len(child) or set(child.attrib) - {Xml.VALUE_ATTRIBUTE}:
            raise DecodeError(
                "Primitive ids and extensions are not supported", key=descriptor.name, path=path
            )
        text = child.get(Xml.VALUE_ATTRIBUTE)
        if text is None:
            raise DecodeError("Missing value attribute", key=descriptor.name, path=path)
        return parse_primitive(descriptor, text, path)

    if descriptor.type_code == ABSTRACT_RESOURCE:
        content = list(child)
        if len(content) != 1:
            raise DecodeError(
                "Expected exactly one embedded resource", key=descriptor.name, path=path
            )
        _, resource_type = split_tag(content[0].tag)
        try:
            schema = registry.lookup(resource_type)
        except UnknownTypeError as exc:
            raise DecodeError(str(exc), key=descriptor.name, path=path) from exc
        return _read_element(content[0], schema, registry, path)

    return _read_element(child, registry.lookup(descriptor.type_code), registry, path)
