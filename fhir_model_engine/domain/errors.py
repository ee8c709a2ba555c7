"""Exception hierarchy for the model engine.

Two tiers are kept apart:

- ``DecodeError`` / ``EncodeError`` describe bad input data and carry the
  offending key and dotted path.
- ``SchemaError`` subclasses describe a broken schema catalog or caller code
  (unknown type, conflicting registration, ambiguous choice) and are not
  expected to be caught and retried.
"""


class ModelEngineError(Exception):
    pass


class SchemaError(ModelEngineError):
    pass


class UnknownTypeError(SchemaError, KeyError):
    def __init__(self, type_name: str, suggestions: list[str] | None = None) -> None:
        self.type_name = type_name
        self.suggestions = suggestions or []
        message = f"Unknown record type '{type_name}'"
        if self.suggestions:
            message += f" (did you mean: {', '.join(self.suggestions)}?)"
        super().__init__(message)

    def __str__(self) -> str:
        return str(self.args[0])


class SchemaConflictError(SchemaError):
    pass


class RegistrySealedError(SchemaError):
    pass


class AmbiguousChoiceError(SchemaError):
    def __init__(self, logical_name: str, properties: list[str]) -> None:
        self.logical_name = logical_name
        self.properties = properties
        super().__init__(
            f"Choice '{logical_name}[x]' has {len(properties)} populated variants: "
            f"{', '.join(properties)}"
        )


class DecodeError(ModelEngineError):
    def __init__(self, message: str, *, key: str | None = None, path: str = "") -> None:
        self.key = key
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class UnknownChoiceTypeError(DecodeError):
    pass


class EncodeError(ModelEngineError):
    def __init__(self, message: str, *, path: str = "") -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class CatalogError(ModelEngineError):
    pass
