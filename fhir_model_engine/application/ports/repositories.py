from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from pathlib import Path

    import pandas as pd


@runtime_checkable
class CatalogRepositoryPort(Protocol):
    pass

    @property
    def catalog_dir(self) -> Path: ...

    def read_types(self) -> pd.DataFrame: ...

    def read_elements(self) -> pd.DataFrame: ...

    def read_value_sets(self) -> pd.DataFrame: ...
