from __future__ import annotations

from pathlib import Path

import pandas as pd

from ...config import EngineConfig
from ...constants import CatalogFiles
from ...domain.errors import CatalogError
from ..caching.memory_cache import MemoryCache

TYPE_COLUMNS = ("Type Name", "Kind")
ELEMENT_COLUMNS = (
    "Type Name",
    "Element Order",
    "Element Name",
    "Type",
    "Min",
    "Max",
)
VALUE_SET_COLUMNS = ("Value Set URI", "System", "Code")

PACKAGE_ROOT = Path(__file__).resolve().parents[2]


class CatalogRepository:
    """Reads the catalog CSV tables as string-typed DataFrames.

    Tables are cached per file and re-read when the file's modification
    time changes.
    """

    def __init__(
        self,
        config: EngineConfig | None = None,
        cache: MemoryCache[pd.DataFrame] | None = None,
    ) -> None:
        super().__init__()
        self._config = config or EngineConfig()
        self._cache: MemoryCache[pd.DataFrame] = cache or MemoryCache()

    @property
    def catalog_dir(self) -> Path:
        catalog_dir = self._config.catalog_dir
        if catalog_dir.is_absolute():
            return catalog_dir
        cwd_candidate = Path.cwd() / catalog_dir
        if cwd_candidate.is_dir():
            return cwd_candidate
        return PACKAGE_ROOT / catalog_dir

    def read_types(self) -> pd.DataFrame:
        return self._read_table(CatalogFiles.TYPES, TYPE_COLUMNS)

    def read_elements(self) -> pd.DataFrame:
        return self._read_table(CatalogFiles.ELEMENTS, ELEMENT_COLUMNS)

    def read_value_sets(self) -> pd.DataFrame:
        return self._read_table(CatalogFiles.VALUE_SETS, VALUE_SET_COLUMNS, optional=True)

    def _read_table(
        self, filename: str, required: tuple[str, ...], *, optional: bool = False
    ) -> pd.DataFrame:
        path = self.catalog_dir / filename
        stamp = path.stat().st_mtime_ns if path.exists() else None
        return self._cache.get_or_load(
            str(path), lambda: self._load(path, required, optional=optional), stamp=stamp
        )

    def _load(self, path: Path, required: tuple[str, ...], *, optional: bool) -> pd.DataFrame:
        if not path.exists():
            if optional:
                return pd.DataFrame(columns=list(required), dtype=str)
            raise CatalogError(f"Catalog table not found: {path}")

        try:
            frame = pd.read_csv(path, dtype=str, na_filter=False)
        except (OSError, ValueError, pd.errors.ParserError) as exc:
            raise CatalogError(f"Failed to read catalog table {path}: {exc}") from exc

        frame.columns = [str(col).strip() for col in frame.columns]
        missing = [col for col in required if col not in frame.columns]
        if missing:
            raise CatalogError(f"{path.name} is missing required columns: {', '.join(missing)}")
        return frame
