"""Workbook reader for the control workbook and its data sheets."""

from __future__ import annotations

from pathlib import Path

import pandas as pd

from ..core.errors import WorkbookNotFoundError


class FileReader:
    """
    Reads worksheets of an Excel workbook as raw cell grids.

    Handles .xlsx and .xlsm files, one sheet at a time.
    """

    SUPPORTED_EXTENSIONS = {".xlsx", ".xlsm"}

    def _check(self, path: Path) -> None:
        extension = path.suffix.lower()
        if extension not in self.SUPPORTED_EXTENSIONS:
            raise ValueError(f"Unsupported file type: {extension}")
        if not path.exists():
            raise WorkbookNotFoundError(f"Workbook not found: {path}")

    def sheet_names(self, path: str | Path) -> list[str]:
        """List the sheet names of a workbook."""
        path = Path(path)
        self._check(path)

        with pd.ExcelFile(path) as excel_file:
            return [str(name) for name in excel_file.sheet_names]

    def read_sheet(self, path: str | Path, sheet_name: str) -> pd.DataFrame:
        """
        Read one sheet without interpreting a header.

        Cell values keep their native types (dates stay datetimes, numbers stay
        numbers); the caller decides how to render them.
        """
        path = Path(path)
        self._check(path)

        return pd.read_excel(path, sheet_name=sheet_name, header=None, dtype=object)
