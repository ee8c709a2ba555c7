from typing import ClassVar


class Defaults:
    FHIR_VERSION = "R4"
    CATALOG_DIR = "standards/R4"
    CONFIG_FILE = "fhir_model_engine.toml"
    CHECK_PRIMITIVE_FORMATS = True
    CHECK_REFERENCE_TARGETS = True
    REPORT_ADVISORY_BINDINGS = True
    STRICT_ADVISORY_BINDINGS = False


class FhirVersions:
    DEFAULT_VERSION = "R4"
    SUPPORTED_VERSIONS: ClassVar[tuple[str, ...]] = ("R4",)


class CatalogFiles:
    TYPES = "Types.csv"
    ELEMENTS = "Elements.csv"
    VALUE_SETS = "ValueSets.csv"
    ALL: ClassVar[tuple[str, ...]] = (TYPES, ELEMENTS, VALUE_SETS)


class Xml:
    FHIR_NAMESPACE = "http://hl7.org/fhir"
    XHTML_NAMESPACE = "http://www.w3.org/1999/xhtml"
    VALUE_ATTRIBUTE = "value"
    ATTRIBUTE_ELEMENTS: ClassVar[frozenset[str]] = frozenset({"id", "url"})


class Suggestions:
    LIMIT = 3
    MIN_SCORE = 0.75


class LogLevels:
    NORMAL = 0
    VERBOSE = 1
    DEBUG = 2
