from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
import os
from pathlib import Path
import tomllib
from typing import cast
import warnings

from .constants import Defaults, FhirVersions

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True, slots=True)
class EngineConfig:
    catalog_dir: Path = field(default_factory=lambda: Path(Defaults.CATALOG_DIR))
    fhir_version: str = Defaults.FHIR_VERSION
    check_primitive_formats: bool = Defaults.CHECK_PRIMITIVE_FORMATS
    check_reference_targets: bool = Defaults.CHECK_REFERENCE_TARGETS
    report_advisory_bindings: bool = Defaults.REPORT_ADVISORY_BINDINGS
    strict_advisory_bindings: bool = Defaults.STRICT_ADVISORY_BINDINGS

    def __post_init__(self) -> None:
        if self.fhir_version not in FhirVersions.SUPPORTED_VERSIONS:
            raise ValueError(
                f"fhir_version must be one of {', '.join(FhirVersions.SUPPORTED_VERSIONS)}, "
                f"got {self.fhir_version!r}"
            )
        if self.strict_advisory_bindings and not self.report_advisory_bindings:
            raise ValueError(
                "strict_advisory_bindings requires report_advisory_bindings to be enabled"
            )

    @classmethod
    def from_env(cls) -> EngineConfig:
        return cls(
            catalog_dir=Path(os.getenv("FHIR_CATALOG_DIR", Defaults.CATALOG_DIR)),
            fhir_version=os.getenv("FHIR_VERSION", Defaults.FHIR_VERSION).strip(),
            check_primitive_formats=_env_bool(
                "FHIR_CHECK_FORMATS", Defaults.CHECK_PRIMITIVE_FORMATS
            ),
            check_reference_targets=_env_bool(
                "FHIR_CHECK_REFERENCES", Defaults.CHECK_REFERENCE_TARGETS
            ),
            report_advisory_bindings=_env_bool(
                "FHIR_REPORT_ADVISORY_BINDINGS", Defaults.REPORT_ADVISORY_BINDINGS
            ),
            strict_advisory_bindings=_env_bool(
                "FHIR_STRICT_BINDINGS", Defaults.STRICT_ADVISORY_BINDINGS
            ),
        )


class ConfigLoader:
    pass

    @staticmethod
    def load(config_file: Path | None = None) -> EngineConfig:
        config = EngineConfig.from_env()
        if config_file is None:
            config_file = Path(Defaults.CONFIG_FILE)
        if config_file.exists():
            try:
                config = ConfigLoader._load_from_toml(config_file, config)
            except Exception as e:
                warnings.warn(
                    f"Failed to load config from {config_file}: {e}", stacklevel=2
                )
        return config

    @staticmethod
    def _load_from_toml(config_file: Path, base_config: EngineConfig) -> EngineConfig:
        with config_file.open("rb") as handle:
            data = tomllib.load(handle)
        paths = _get_table(data, "paths")
        validation = _get_table(data, "validation")

        catalog_dir = base_config.catalog_dir
        if value := paths.get("catalog_dir"):
            catalog_dir = Path(str(value))
        fhir_version = base_config.fhir_version
        if (value := data.get("fhir_version")) is not None:
            fhir_version = str(value).strip()

        flags: dict[str, bool] = {}
        for name in (
            "check_primitive_formats",
            "check_reference_targets",
            "report_advisory_bindings",
            "strict_advisory_bindings",
        ):
            if (value := validation.get(name)) is not None:
                flags[name] = _coerce_bool(value, key=f"validation.{name}")
            else:
                flags[name] = getattr(base_config, name)

        return EngineConfig(catalog_dir=catalog_dir, fhir_version=fhir_version, **flags)


def _get_table(data: Mapping[str, object], key: str) -> Mapping[str, object]:
    value = data.get(key)
    if isinstance(value, Mapping):
        return cast("Mapping[str, object]", value)
    return {}


def _coerce_bool(value: object, *, key: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
    raise ValueError(f"{key} must be a boolean, got {value!r}")


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    return _coerce_bool(raw, key=name)
