"""Repository implementations for data access.

Reads the schema catalog tables shipped with the package (or from a
configured directory).
"""

from .catalog_repository import CatalogRepository

__all__ = [
    "CatalogRepository",
]
