"""FHIR R4 primitive data types.

Each primitive has a JSON representation kind (what Python type a decoded
value must have) and, for most types, a regular expression the lexical form
must fully match.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
import re
from typing import Literal

JsonKind = Literal["string", "boolean", "integer", "decimal"]

_YEAR = "([0-9]([0-9]([0-9][1-9]|[1-9]0)|[1-9]00)|[1-9]000)"
_MONTH = "(0[1-9]|1[0-2])"
_DAY = "(0[1-9]|[1-2][0-9]|3[0-1])"
_TIME = "([01][0-9]|2[0-3]):[0-5][0-9]:([0-5][0-9]|60)(\\.[0-9]+)?"
_ZONE = "(Z|(\\+|-)((0[0-9]|1[0-3]):[0-5][0-9]|14:00))"


@dataclass(frozen=True, slots=True)
class PrimitiveType:
    name: str
    json_kind: JsonKind
    pattern: re.Pattern[str] | None = None

    def accepts_python_value(self, value: object) -> bool:
        if isinstance(value, bool):
            return self.json_kind == "boolean"
        match self.json_kind:
            case "boolean":
                return False
            case "integer":
                return isinstance(value, int)
            case "decimal":
                return isinstance(value, (int, float, Decimal))
            case _:
                return isinstance(value, str)

    def lexical_form(self, value: object) -> str:
        if isinstance(value, bool):
            return "true" if value else "false"
        return str(value)

    def matches_format(self, value: object) -> bool:
        if self.pattern is None:
            return True
        return self.pattern.fullmatch(self.lexical_form(value)) is not None


def _primitive(name: str, json_kind: JsonKind, regex: str | None = None) -> PrimitiveType:
    return PrimitiveType(name, json_kind, re.compile(regex) if regex else None)


PRIMITIVE_TYPES: dict[str, PrimitiveType] = {
    p.name: p
    for p in (
        _primitive("base64Binary", "string", "(\\s*([0-9a-zA-Z\\+/=]){4}\\s*)+"),
        _primitive("boolean", "boolean", "true|false"),
        _primitive("canonical", "string", "\\S*"),
        _primitive("code", "string", "[^\\s]+(\\s[^\\s]+)*"),
        _primitive("date", "string", f"{_YEAR}(-{_MONTH}(-{_DAY})?)?"),
        _primitive(
            "dateTime", "string", f"{_YEAR}(-{_MONTH}(-{_DAY}(T{_TIME}{_ZONE})?)?)?"
        ),
        _primitive(
            "decimal", "decimal", "-?(0|[1-9][0-9]*)(\\.[0-9]+)?([eE][+-]?[0-9]+)?"
        ),
        _primitive("id", "string", "[A-Za-z0-9\\-\\.]{1,64}"),
        _primitive("instant", "string", f"{_YEAR}-{_MONTH}-{_DAY}T{_TIME}{_ZONE}"),
        _primitive("integer", "integer", "-?([0]|([1-9][0-9]*))"),
        _primitive("markdown", "string", "[ \\r\\n\\t\\S]+"),
        _primitive("oid", "string", "urn:oid:[0-2](\\.(0|[1-9][0-9]*))+"),
        _primitive("positiveInt", "integer", "[1-9][0-9]*"),
        _primitive("string", "string", "[ \\r\\n\\t\\S]+"),
        _primitive("time", "string", _TIME),
        _primitive("unsignedInt", "integer", "[0]|([1-9][0-9]*)"),
        _primitive("uri", "string", "\\S*"),
        _primitive("url", "string", "\\S*"),
        _primitive(
            "uuid",
            "string",
            "urn:uuid:[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}",
        ),
        _primitive("xhtml", "string"),
    )
}


def get_primitive(type_code: str) -> PrimitiveType | None:
    return PRIMITIVE_TYPES.get(type_code)


def is_primitive(type_code: str) -> bool:
    return type_code in PRIMITIVE_TYPES
