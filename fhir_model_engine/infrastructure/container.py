from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console

from ..application.model_engine import ModelEngine
from ..config import ConfigLoader, EngineConfig
from ..domain.services.binding_checker import BindingChecker
from ..domain.services.choice_resolver import ChoiceResolver
from ..domain.services.codec import TreeCodec
from ..domain.services.schema_registry import SchemaRegistry
from ..domain.services.validator import Validator
from .catalog.loader import CatalogLoader
from .logging.console_logger import ConsoleLogger
from .logging.null_logger import NullLogger
from .repositories.catalog_repository import CatalogRepository

if TYPE_CHECKING:
    from ..application.ports.repositories import CatalogRepositoryPort
    from ..application.ports.services import LoggerPort


class EngineContainer:
    pass

    def __init__(
        self,
        config: EngineConfig | None = None,
        verbose: int = 0,
        console: Console | None = None,
        use_null_logger: bool = True,
    ) -> None:
        super().__init__()
        self.config = config or EngineConfig()
        self.verbose = verbose
        self.console = console
        self.use_null_logger = use_null_logger
        self._logger_instance: LoggerPort | None = None
        self._catalog_repository_instance: CatalogRepositoryPort | None = None
        self._registry_instance: SchemaRegistry | None = None
        self._resolver_instance: ChoiceResolver | None = None
        self._binding_checker_instance: BindingChecker | None = None
        self._validator_instance: Validator | None = None
        self._codec_instance: TreeCodec | None = None
        self._engine_instance: ModelEngine | None = None

    def create_logger(self) -> LoggerPort:
        if self._logger_instance is None:
            if self.use_null_logger:
                self._logger_instance = NullLogger()
            else:
                self._logger_instance = ConsoleLogger(
                    console=self.console or Console(), verbosity=self.verbose
                )
        return self._logger_instance

    def create_catalog_repository(self) -> CatalogRepositoryPort:
        if self._catalog_repository_instance is None:
            self._catalog_repository_instance = CatalogRepository(config=self.config)
        return self._catalog_repository_instance

    def create_registry(self) -> SchemaRegistry:
        if self._registry_instance is None:
            logger = self.create_logger()
            registry = SchemaRegistry(logger=logger)
            CatalogLoader(self.create_catalog_repository(), logger).load_into(registry)
            self._registry_instance = registry
        return self._registry_instance

    def create_resolver(self) -> ChoiceResolver:
        if self._resolver_instance is None:
            self._resolver_instance = ChoiceResolver()
        return self._resolver_instance

    def create_binding_checker(self) -> BindingChecker:
        if self._binding_checker_instance is None:
            self._binding_checker_instance = BindingChecker(
                report_advisory=self.config.report_advisory_bindings,
                strict_advisory=self.config.strict_advisory_bindings,
            )
        return self._binding_checker_instance

    def create_validator(self) -> Validator:
        if self._validator_instance is None:
            self._validator_instance = Validator(
                self.create_registry(),
                resolver=self.create_resolver(),
                binding_checker=self.create_binding_checker(),
                check_primitive_formats=self.config.check_primitive_formats,
                check_reference_targets=self.config.check_reference_targets,
            )
        return self._validator_instance

    def create_codec(self) -> TreeCodec:
        if self._codec_instance is None:
            self._codec_instance = TreeCodec(self.create_registry(), self.create_resolver())
        return self._codec_instance

    def create_engine(self) -> ModelEngine:
        if self._engine_instance is None:
            self._engine_instance = ModelEngine(
                self.create_registry(),
                validator=self.create_validator(),
                codec=self.create_codec(),
                logger=self.create_logger(),
            )
        return self._engine_instance


def create_default_container(
    config: EngineConfig | None = None, *, verbose: int = 0
) -> EngineContainer:
    """Container configured from ``ConfigLoader`` (env + TOML) unless ``config`` is given."""
    if config is None:
        config = ConfigLoader.load()
    return EngineContainer(config=config, verbose=verbose, use_null_logger=verbose == 0)
