"""
Configuration loader.

Handles two sources:
- settings.yaml, describing the control workbook layout and output options
- the control workbook itself: run date, source folder, export and
  distribution tables
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import pandas as pd
import yaml
from openpyxl.utils.cell import coordinate_to_tuple
from pydantic import ValidationError

from .config_models import (
    AppSettings,
    ConfigSheet,
    DistributionConfigEntry,
    ExportConfigEntry,
    RunDate,
    cell_text,
    normalize_folder,
)
from .errors import DataSourceNotFoundError, DateMissingError

if TYPE_CHECKING:
    from ..io.tabular_store import Table, TabularStore

logger = logging.getLogger(__name__)


class ConfigLoader:
    """
    Loads settings from YAML and configuration tables from a TabularStore.

    Export table columns: Client Name, Data Sheet Name, New File Name, File Path.
    Distribution table columns: Client Name, Destination Folder, Process Flag.
    """

    def __init__(self, config_dir: str | Path | None = None):
        """
        Initialize the config loader.

        Args:
            config_dir: Path to config directory. Defaults to backend/config
        """
        if config_dir is None:
            config_dir = Path(__file__).parent.parent.parent / "config"

        self.config_dir = Path(config_dir)
        self._settings: AppSettings | None = None

    @property
    def settings(self) -> AppSettings:
        """Application settings (lazy loaded)."""
        if self._settings is None:
            self._settings = self._load_settings()
        return self._settings

    def _load_settings(self) -> AppSettings:
        config_path = self.config_dir / "settings.yaml"

        if config_path.exists():
            with open(config_path) as f:
                data = yaml.safe_load(f) or {}
            return AppSettings(**data)

        # Return defaults if no settings file exists
        return AppSettings()

    def save_settings(self, settings: AppSettings) -> None:
        """Save settings to YAML file."""
        self.config_dir.mkdir(parents=True, exist_ok=True)
        config_path = self.config_dir / "settings.yaml"

        data = settings.model_dump(exclude_none=True)
        with open(config_path, "w") as f:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)

        self._settings = settings

    def reload(self) -> None:
        """Reload settings from disk."""
        self._settings = None

    def resolve_workbook(self, workbook: str | Path | None = None) -> Path:
        """
        Pick the control workbook path.

        An explicit path wins; otherwise the settings value, resolved relative
        to the config directory.
        """
        if workbook is not None:
            return Path(workbook)
        if not self.settings.workbook:
            raise ValueError("No workbook given and none configured in settings.yaml")
        path = Path(self.settings.workbook)
        return path if path.is_absolute() else self.config_dir / path

    # ------------------------------------------------------------------
    # Master sheet
    # ------------------------------------------------------------------

    def _master_cell(self, store: TabularStore, coordinate: str) -> Any:
        row, column = coordinate_to_tuple(coordinate)
        table = store.open_table(self.settings.master.sheet)
        return table.cell(row, column)

    def load_run_date(self, store: TabularStore) -> RunDate:
        """
        Read the run date from the master sheet.

        Raises:
            DateMissingError: If the sheet or cell is missing, empty, or not a date
        """
        master = self.settings.master
        try:
            value = self._master_cell(store, master.run_date_cell)
        except (DataSourceNotFoundError, ValueError) as e:
            raise DateMissingError(
                f"Run date could not be read from {master.sheet}!{master.run_date_cell}: {e}"
            ) from e

        if value is None:
            raise DateMissingError(
                f"Run date is missing in {master.sheet}!{master.run_date_cell}"
            )

        if isinstance(value, str):
            try:
                value = pd.to_datetime(value.strip(), dayfirst=master.dayfirst)
            except (ValueError, OverflowError) as e:
                raise DateMissingError(f"Run date '{value}' is not a valid date") from e

        if value is pd.NaT:
            raise DateMissingError(
                f"Run date is missing in {master.sheet}!{master.run_date_cell}"
            )

        try:
            run_date = RunDate(value=value)
        except ValidationError as e:
            raise DateMissingError(f"Run date '{value}' is not a valid date") from e

        logger.info("Run date %s", run_date.value.isoformat())
        return run_date

    def load_source_folder(self, store: TabularStore) -> str:
        """Read the distribution source folder from the master sheet."""
        value = self._master_cell(store, self.settings.master.source_folder_cell)
        return normalize_folder(cell_text(value))

    # ------------------------------------------------------------------
    # Configuration tables
    # ------------------------------------------------------------------

    def _config_rows(self, store: TabularStore, sheet: ConfigSheet, width: int):
        """
        Yield the cells of each row through the last client name.

        Rows with a blank client name are skipped.
        """
        table: Table = store.open_table(sheet.sheet)
        last_row = table.last_row(1)
        for row in range(sheet.first_data_row, last_row + 1):
            if not cell_text(table.cell(row, 1)):
                logger.warning("Skipping row %d of %s: no client name", row, sheet.sheet)
                continue
            yield [table.cell(row, column) for column in range(1, width + 1)]

    def load_export_config(self, store: TabularStore) -> list[ExportConfigEntry]:
        """Read every export entry from the export configuration table."""
        entries = []
        for client, source, base_name, folder in self._config_rows(
            store, self.settings.export_config, 4
        ):
            entries.append(
                ExportConfigEntry(
                    client_name=client,
                    data_source_name=source,
                    output_base_name=base_name,
                    output_folder=folder,
                )
            )
        logger.debug("Loaded %d export entries", len(entries))
        return entries

    def load_distribution_config(self, store: TabularStore) -> list[DistributionConfigEntry]:
        """Read every distribution entry from the distribution configuration table."""
        entries = []
        for client, destination, flag in self._config_rows(
            store, self.settings.distribution_config, 3
        ):
            entries.append(
                DistributionConfigEntry(
                    client_name=client,
                    destination_folder=destination,
                    should_process=flag,
                )
            )
        logger.debug("Loaded %d distribution entries", len(entries))
        return entries
