"""Port interfaces for external dependencies.

This module defines the protocols that infrastructure adapters (loggers,
catalog repositories) implement, so the engine can be wired and tested
without them.
"""

from .repositories import CatalogRepositoryPort
from .services import LoggerPort

__all__ = [
    "CatalogRepositoryPort",
    "LoggerPort",
]
