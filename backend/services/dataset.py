# backend/services/dataset.py
"""
Read-only handle over the vehicle price snapshot.

The handle is built once (from CSV at startup, or from an in-memory frame in
tests) and passed explicitly to every service call. Nothing here mutates the
underlying frame, so concurrent requests can share one handle.
"""

import logging
from pathlib import Path
from typing import Dict, List, Union

import polars as pl

from services.errors import AggregationError, DatasetError

logger = logging.getLogger(__name__)


# ============================================================
#  DECLARED SCHEMA OF THE PRICE VIEW
# ============================================================

PRICE_SCHEMA: Dict[str, pl.DataType] = {
    "id": pl.Utf8,
    "advert_id": pl.Utf8,
    "source": pl.Utf8,
    "title": pl.Utf8,
    "make": pl.Utf8,
    "model": pl.Utf8,
    "year": pl.Int32,
    "mileage": pl.Int32,
    "engine": pl.Utf8,
    "gearbox": pl.Utf8,
    "cc": pl.Utf8,
    "power_ps": pl.Int32,
    "power_kw": pl.Int32,
    "created_on": pl.Date,
    "last_updated_on": pl.Date,
    "currency": pl.Utf8,
    "price": pl.Int32,
    "estimated_price": pl.Int32,
}


class DatasetHandle:

    def __init__(self, frame: pl.DataFrame, name: str = "dataset"):
        self._frame = frame
        self.name = name

    @classmethod
    def from_frame(cls, frame: pl.DataFrame, name: str = "in-memory") -> "DatasetHandle":
        return cls(frame, name)

    @classmethod
    def from_csv(
        cls,
        path: Union[str, Path],
        separator: str = ";",
        schema: Dict[str, pl.DataType] = PRICE_SCHEMA,
    ) -> "DatasetHandle":
        """
        Load the price CSV. Declared columns get their declared dtype,
        anything else in the file is inferred.
        """
        path = Path(path)
        if not path.exists():
            raise DatasetError(f"Dataset file not found: {path}")

        try:
            frame = pl.read_csv(
                path,
                separator=separator,
                has_header=True,
                schema_overrides=schema,
                try_parse_dates=True,
            )
        except pl.exceptions.PolarsError as e:
            raise DatasetError(f"Failed to read {path}: {e}") from e

        logger.info("Loaded %d rows from %s", frame.height, path)
        return cls(frame, path.name)

    # ------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------

    def lazy(self) -> pl.LazyFrame:
        return self._frame.lazy()

    @property
    def schema(self) -> pl.Schema:
        return self._frame.schema

    @property
    def columns(self) -> List[str]:
        return self._frame.columns

    @property
    def height(self) -> int:
        return self._frame.height

    def has_column(self, column: str) -> bool:
        return column in self._frame.columns

    def require_column(self, column: str) -> None:
        if not self.has_column(column):
            raise AggregationError(f"Unknown column: {column}")

    def is_integer(self, column: str) -> bool:
        self.require_column(column)
        return self._frame.schema[column].is_integer()

    def is_numeric(self, column: str) -> bool:
        self.require_column(column)
        return self._frame.schema[column].is_numeric()

    def __repr__(self) -> str:
        return f"DatasetHandle(name={self.name!r}, rows={self.height})"
