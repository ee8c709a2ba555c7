"""Domain services.

Engine logic that operates on schemas and instances.
"""

from .binding_checker import BindingChecker, CodedValue, extract_codes
from .choice_resolver import ChoiceResolver, ResolvedProperty, bind
from .codec import TreeCodec, property_names
from .schema_registry import ABSTRACT_RESOURCE, SchemaRegistry
from .suggestions import suggest_names
from .validator import Validator, reference_target_type

__all__ = [
    # Registry
    "ABSTRACT_RESOURCE",
    "SchemaRegistry",
    # Choice resolution
    "ChoiceResolver",
    "ResolvedProperty",
    "bind",
    # Validation
    "BindingChecker",
    "CodedValue",
    "extract_codes",
    "Validator",
    "reference_target_type",
    # Codec
    "TreeCodec",
    "property_names",
    # Helpers
    "suggest_names",
]
