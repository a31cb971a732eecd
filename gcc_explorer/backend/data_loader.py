"""
Data loading and preprocessing for the GCC explorer.
Reads one CSV per table, normalizes headers and numeric columns, and
validates rows into the collection models.
"""
import logging
import re
import threading
from datetime import datetime, timezone
from pathlib import Path

import pandas as pd
from pydantic import ValidationError

from defaults import calculate_base_ranges
from errors import DataLoadError, DataNotLoadedError
from filtering import get_account_names
from models import (
    Account,
    BaseRanges,
    Center,
    DashboardData,
    Function,
    Prospect,
    Service,
    StatusResponse,
    Tech,
)


logger = logging.getLogger(__name__)


# ============================================================================
# Table Definitions
# ============================================================================

# table name -> (row model, join key column)
TABLES: dict[str, tuple[type, str]] = {
    "accounts": (Account, "account_global_legal_name"),
    "centers": (Center, "cn_unique_key"),
    "functions": (Function, "cn_unique_key"),
    "services": (Service, "cn_unique_key"),
    "tech": (Tech, "cn_unique_key"),
    "prospects": (Prospect, "account_global_legal_name"),
}

# Revenue stays raw: it may carry currency symbols and scale suffixes
NUMERIC_COLUMNS = {
    "accounts": [
        "account_hq_employee_count",
        "account_center_employees",
        "years_in_india",
        "account_first_center_year",
    ],
    "centers": [
        "center_employees",
        "center_inc_year",
        "lat",
        "lng",
    ],
}


def normalize_column_name(name: str) -> str:
    """
    Convert an export header to a snake_case field name.

    Examples:
        "ACCOUNT GLOBAL LEGAL NAME" -> "account_global_legal_name"
        "CN UNIQUE KEY" -> "cn_unique_key"
        "Sales & Marketing" -> "sales_marketing"
    """
    name = re.sub(r"[^0-9a-zA-Z]+", "_", str(name).strip().lower())
    return name.strip("_")


# ============================================================================
# Data Store
# ============================================================================

class DataStore:
    """
    Singleton-like data store that holds the loaded collections and the
    values derived from them once per load (base ranges, account names).
    """

    def __init__(self):
        self.data: DashboardData | None = None
        self.base_ranges: BaseRanges | None = None
        self.account_names: list[str] = []
        self.source: Path | None = None
        self.loaded_at: datetime | None = None
        self.orphan_center_count = 0
        self._loaded = False
        self._lock = threading.Lock()

    def load_data(self, data_dir: str | Path) -> None:
        """
        Load every table CSV from a directory and swap in the new snapshot.

        Args:
            data_dir: Directory holding accounts.csv, centers.csv, functions.csv,
                services.csv, tech.csv and prospects.csv.

        Raises:
            DataLoadError: The directory is missing, a table file cannot be
                decoded or parsed, or no table holds any rows.
        """
        data_dir = Path(data_dir)
        if not data_dir.is_dir():
            raise DataLoadError(f"Data directory not found: {data_dir}", path=str(data_dir))

        logger.info("Loading data from %s", data_dir)

        collections = {
            table: self._load_table(data_dir, table)
            for table in TABLES
        }
        if not any(collections.values()):
            raise DataLoadError(f"No data found in {data_dir}", path=str(data_dir))

        data = DashboardData(**collections)
        base_ranges = calculate_base_ranges(data.accounts, data.centers)
        account_names = get_account_names(data.accounts)

        with self._lock:
            self.data = data
            self.base_ranges = base_ranges
            self.account_names = account_names
            self.source = data_dir
            self.loaded_at = datetime.now(timezone.utc)
            self._loaded = True

        self.orphan_center_count = len(self.find_orphan_centers())
        if self.orphan_center_count:
            logger.warning(
                "%d centers reference an unknown account and are hidden once account filters apply",
                self.orphan_center_count,
            )

        logger.info(
            "Loaded %s",
            ", ".join(f"{count:,} {table}" for table, count in self.row_counts.items()),
        )

    def _load_table(self, data_dir: Path, table: str) -> list:
        """Read one table CSV into validated row models."""
        model, key_column = TABLES[table]
        csv_path = data_dir / f"{table}.csv"
        if not csv_path.exists():
            logger.warning("Table file missing, loading %s as empty: %s", table, csv_path)
            return []

        # Everything as text; blanks stay "" rather than NaN
        try:
            df = pd.read_csv(csv_path, dtype=str, keep_default_na=False)
        except pd.errors.EmptyDataError:
            logger.warning("Table file is empty: %s", csv_path)
            return []
        except (UnicodeDecodeError, pd.errors.ParserError, OSError) as exc:
            raise DataLoadError(f"Could not read {csv_path.name}: {exc}", path=str(csv_path)) from exc
        df.columns = [normalize_column_name(col) for col in df.columns]
        df = df.loc[:, ~df.columns.duplicated()]

        for col in df.columns:
            df[col] = df[col].str.strip()

        if key_column not in df.columns:
            logger.warning("%s has no %s column, loading as empty", csv_path.name, key_column)
            return []

        missing_key = df[key_column] == ""
        if missing_key.any():
            logger.warning("Dropped %d %s rows without %s", int(missing_key.sum()), table, key_column)
            df = df[~missing_key]

        df = self._coerce_numeric_columns(df, table)

        rows = []
        invalid = 0
        for record in df.to_dict(orient="records"):
            try:
                rows.append(model.model_validate(record))
            except ValidationError as exc:
                invalid += 1
                logger.debug("Skipping invalid %s row: %s", table, exc)
        if invalid:
            logger.warning("Skipped %d invalid %s rows", invalid, table)

        return rows

    def _coerce_numeric_columns(self, df: pd.DataFrame, table: str) -> pd.DataFrame:
        """Convert numeric columns to float; blanks and junk become None."""
        df = df.copy()
        for col in NUMERIC_COLUMNS.get(table, []):
            if col in df.columns:
                numeric = pd.to_numeric(df[col], errors="coerce")
                df[col] = numeric.astype(object).where(numeric.notna(), None)
        return df

    def find_orphan_centers(self) -> list[Center]:
        """Centers whose account name matches no loaded account."""
        if self.data is None:
            return []
        names = set(self.account_names)
        return [c for c in self.data.centers if c.account_global_legal_name not in names]

    def clear_cache(self) -> None:
        """Drop the loaded snapshot and reload it from the last source."""
        source = self.source
        with self._lock:
            self.data = None
            self.base_ranges = None
            self.account_names = []
            self._loaded = False
        if source is None:
            raise DataNotLoadedError()
        logger.info("Cache cleared, reloading from %s", source)
        self.load_data(source)

    def require_data(self) -> DashboardData:
        if not self._loaded or self.data is None:
            raise DataNotLoadedError()
        return self.data

    @property
    def row_counts(self) -> dict[str, int]:
        if self.data is None:
            return {table: 0 for table in TABLES}
        return {table: len(getattr(self.data, table)) for table in TABLES}

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def status(self) -> StatusResponse:
        return StatusResponse(
            loaded=self._loaded,
            source=str(self.source) if self.source else None,
            loaded_at=self.loaded_at,
            row_counts=self.row_counts,
            orphan_centers=self.orphan_center_count,
        )


# Global data store instance
data_store = DataStore()


def get_data_store() -> DataStore:
    """Get the global data store instance."""
    return data_store


def load_data_dir(data_dir: str | Path | None = None) -> DataStore:
    """
    Load data from a CSV directory, using the configured default if not specified.
    Returns the data store instance.
    """
    if data_dir is None:
        from config import get_settings
        data_dir = get_settings().data_dir

    data_store.load_data(data_dir)
    return data_store
