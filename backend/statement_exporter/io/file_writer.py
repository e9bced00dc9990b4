"""File writer for exported CSV files."""

from __future__ import annotations

from io import StringIO
from pathlib import Path
from typing import TYPE_CHECKING

import pandas as pd

from ..core.errors import FileWriteError

if TYPE_CHECKING:
    from ..core.config_models import OutputConfig


class FileWriter:
    """
    Writes DataFrames to CSV.

    Supports:
    - CSV files on disk, overwriting any existing file
    - In-memory CSV text for previews
    """

    def __init__(self, output_config: OutputConfig | None = None):
        """
        Initialize the writer.

        Args:
            output_config: Output configuration (uses defaults if None)
        """
        self.config = output_config

    @property
    def delimiter(self) -> str:
        return self.config.delimiter if self.config else ","

    @property
    def encoding(self) -> str:
        return self.config.encoding if self.config else "utf-8"

    def write_csv(self, df: pd.DataFrame, output_path: str | Path) -> str:
        """
        Write DataFrame to a CSV file with a header row and no index.

        Args:
            df: DataFrame to write
            output_path: Path to output file

        Returns:
            Path to written file

        Raises:
            FileWriteError: If the folder is missing or cannot be created, or the
                file cannot be written or encoded
        """
        output_path = Path(output_path)

        try:
            if self.config and self.config.create_missing_folders:
                output_path.parent.mkdir(parents=True, exist_ok=True)
            df.to_csv(
                output_path,
                sep=self.delimiter,
                header=True,
                index=False,
                encoding=self.encoding,
            )
        except (OSError, LookupError, ValueError) as e:
            raise FileWriteError(f"Could not write {output_path}: {e}") from e

        return str(output_path)

    def write_csv_text(self, df: pd.DataFrame) -> str:
        """Render DataFrame as CSV text."""
        buffer = StringIO()
        df.to_csv(buffer, sep=self.delimiter, header=True, index=False)
        return buffer.getvalue()
