"""Interchange formats: JSON text and FHIR XML."""

from . import json_format, xml_format

__all__ = [
    "json_format",
    "xml_format",
]
