"""
Tabular storage.

A Table is a raw grid of cells addressed 1-based by (row, column), the way a
worksheet is. Row 1 is the header. A TabularStore hands out tables by name.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Sequence

import pandas as pd

from ..core.errors import DataSourceNotFoundError
from .file_reader import FileReader


def is_populated(value: Any) -> bool:
    """True if a cell holds anything other than an empty value."""
    if value is None:
        return False
    if isinstance(value, str):
        return value != ""
    return not pd.isna(value)


class Table:
    """
    A named worksheet-like grid.

    Backed by a DataFrame without a header (integer column labels); the first
    grid row is the header row.
    """

    def __init__(self, name: str, frame: pd.DataFrame):
        self.name = name
        self.frame = frame.reset_index(drop=True)
        self.frame.columns = range(len(self.frame.columns))

    @classmethod
    def from_rows(cls, name: str, rows: Sequence[Sequence[Any]]) -> Table:
        """Build a table from a header row followed by data rows."""
        return cls(name, pd.DataFrame(list(rows), dtype=object))

    @property
    def row_count(self) -> int:
        return len(self.frame)

    @property
    def column_count(self) -> int:
        return len(self.frame.columns)

    def cell(self, row: int, column: int) -> Any:
        """Raw value at (row, column); None outside the grid or when empty."""
        if row < 1 or column < 1 or row > self.row_count or column > self.column_count:
            return None
        value = self.frame.iat[row - 1, column - 1]
        return value if is_populated(value) else None

    def last_row(self, column: int) -> int:
        """
        Last row with a populated cell in the given column.

        Scans from the bottom up, so gaps above the last value do not end the
        table. Returns 0 when the column is empty.
        """
        if column < 1 or column > self.column_count:
            return 0
        populated = self.frame.iloc[:, column - 1].map(is_populated)
        if not populated.any():
            return 0
        return int(populated[populated].index[-1]) + 1

    def last_column(self, row: int = 1) -> int:
        """Last populated column in the given row (0 when the row is empty)."""
        if row < 1 or row > self.row_count:
            return 0
        populated = self.frame.iloc[row - 1].map(is_populated).reset_index(drop=True)
        if not populated.any():
            return 0
        return int(populated[populated].index[-1]) + 1

    def header(self) -> list[Any]:
        """Header cells from column 1 through the last populated header cell."""
        return [self.cell(1, col) for col in range(1, self.last_column(1) + 1)]

    def rows(self, first_row: int, last_row: int) -> pd.DataFrame:
        """Slice of grid rows first_row..last_row inclusive (1-based)."""
        return self.frame.iloc[first_row - 1:last_row]


class TabularStore(ABC):
    """Read access to named tables."""

    @abstractmethod
    def table_names(self) -> list[str]:
        """Names of all tables in the store."""

    @abstractmethod
    def _load_table(self, name: str) -> Table:
        """Load a table known to exist."""

    def find_table(self, name: str) -> str | None:
        """
        Stored name of the table called ``name``, ignoring case.

        An exact match wins over a case-insensitive one.
        """
        names = self.table_names()
        if name in names:
            return name
        wanted = name.casefold()
        return next((n for n in names if n.casefold() == wanted), None)

    def has_table(self, name: str) -> bool:
        return bool(name) and self.find_table(name) is not None

    def open_table(self, name: str) -> Table:
        """
        Open a table by name, ignoring case as the workbook host does.

        Raises:
            DataSourceNotFoundError: If no table has that name
        """
        stored_name = self.find_table(name) if name else None
        if stored_name is None:
            raise DataSourceNotFoundError(name)
        return self._load_table(stored_name)


class InMemoryStore(TabularStore):
    """Tables held in memory, keyed by name."""

    def __init__(self, tables: dict[str, Table] | None = None):
        self._tables: dict[str, Table] = dict(tables or {})

    @classmethod
    def from_rows(cls, tables: dict[str, Sequence[Sequence[Any]]]) -> InMemoryStore:
        return cls({name: Table.from_rows(name, rows) for name, rows in tables.items()})

    def table_names(self) -> list[str]:
        return list(self._tables)

    def _load_table(self, name: str) -> Table:
        return self._tables[name]


class WorkbookStore(TabularStore):
    """
    Tables backed by the sheets of an Excel workbook.

    Sheets are read on first access and cached for the lifetime of the store.
    """

    def __init__(self, workbook_path: str | Path):
        self.path = Path(workbook_path)
        self._reader = FileReader()
        self._sheet_names: list[str] | None = None
        self._cache: dict[str, Table] = {}

    def table_names(self) -> list[str]:
        if self._sheet_names is None:
            self._sheet_names = self._reader.sheet_names(self.path)
        return self._sheet_names

    def _load_table(self, name: str) -> Table:
        if name not in self._cache:
            frame = self._reader.read_sheet(self.path, name)
            self._cache[name] = Table(name, frame)
        return self._cache[name]
