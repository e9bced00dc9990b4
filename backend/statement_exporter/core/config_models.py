"""
Pydantic models for configuration.

These models define:
- Application settings loaded from settings.yaml (workbook layout, output)
- The run date and its derived file-name / column representations
- Export and distribution entries read from the control workbook
"""

from __future__ import annotations

import math
import os
from datetime import date, datetime
from typing import Any, ClassVar

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, field_validator


def cell_text(value: Any) -> str:
    """Render a raw cell value as trimmed text ("" for empty cells)."""
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return ""
    if value is pd.NaT:
        return ""
    return str(value).strip()


def normalize_folder(folder: str) -> str:
    """Ensure a folder path ends with exactly one separator."""
    folder = folder.strip()
    if not folder:
        return folder
    return folder.rstrip("/\\") + os.sep


# =============================================================================
# APPLICATION SETTINGS
# =============================================================================


class MasterSheetConfig(BaseModel):
    """Location of the run-wide values in the master sheet."""

    sheet: str = Field(default="Master", description="Master sheet name")
    run_date_cell: str = Field(default="B1", description="Cell holding the run date")
    source_folder_cell: str = Field(
        default="B2", description="Cell holding the distribution source folder"
    )
    dayfirst: bool = Field(
        default=False, description="Read text dates such as 03/04/2025 day first"
    )


class ConfigSheet(BaseModel):
    """A configuration table inside the control workbook."""

    sheet: str = Field(..., description="Sheet name")
    first_data_row: int = Field(default=2, ge=2, description="First row after the header")


class OutputConfig(BaseModel):
    """Output file settings."""

    delimiter: str = Field(default=",", description="CSV field delimiter")
    encoding: str = Field(default="utf-8", description="CSV file encoding")
    export_extension: str = Field(default=".csv", description="Exported file extension")
    distribution_extension: str = Field(
        default=".xlsx", description="Extension of files picked up for distribution"
    )
    create_missing_folders: bool = Field(
        default=False,
        description="Create an absent export folder instead of failing the entry",
    )


class AppSettings(BaseModel):
    """
    Settings shared by both stages.

    Describes where the control workbook lives and how its sheets are laid out.
    """

    version: str = Field(default="1.0", description="Settings schema version")
    workbook: str | None = Field(default=None, description="Default control workbook path")
    master: MasterSheetConfig = Field(default_factory=MasterSheetConfig)
    export_config: ConfigSheet = Field(
        default_factory=lambda: ConfigSheet(sheet="Export Config")
    )
    distribution_config: ConfigSheet = Field(
        default_factory=lambda: ConfigSheet(sheet="Distribution Config")
    )
    output: OutputConfig = Field(default_factory=OutputConfig)


# =============================================================================
# RUN DATE
# =============================================================================


class RunDate(BaseModel):
    """The single calendar date governing one execution."""

    model_config = ConfigDict(frozen=True)

    value: date

    COMPACT_FORMAT: ClassVar[str] = "%Y%m%d"
    DISPLAY_FORMAT: ClassVar[str] = "%d-%B-%y"

    @field_validator("value", mode="before")
    @classmethod
    def coerce_datetime(cls, v: Any) -> Any:
        if isinstance(v, (datetime, pd.Timestamp)):
            return v.date()
        return v

    @property
    def compact(self) -> str:
        """File-name prefix, e.g. 20250313."""
        return self.value.strftime(self.COMPACT_FORMAT)

    @property
    def display(self) -> str:
        """Statement Date column value, e.g. 13-March-25."""
        return self.value.strftime(self.DISPLAY_FORMAT)


# =============================================================================
# CONFIGURATION ENTRIES
# =============================================================================


class ExportConfigEntry(BaseModel):
    """One row of the export configuration table."""

    model_config = ConfigDict(frozen=True)

    client_name: str
    data_source_name: str
    output_base_name: str
    output_folder: str

    @field_validator("*", mode="before")
    @classmethod
    def to_text(cls, v: Any) -> str:
        return cell_text(v)

    @field_validator("output_folder")
    @classmethod
    def trailing_separator(cls, v: str) -> str:
        return normalize_folder(v)


class DistributionConfigEntry(BaseModel):
    """One row of the distribution configuration table."""

    model_config = ConfigDict(frozen=True)

    client_name: str
    destination_folder: str
    should_process: bool = False

    @field_validator("client_name", "destination_folder", mode="before")
    @classmethod
    def to_text(cls, v: Any) -> str:
        return cell_text(v)

    @field_validator("should_process", mode="before")
    @classmethod
    def parse_flag(cls, v: Any) -> bool:
        """Only a YES flag (any case, surrounding spaces ignored) enables a row."""
        if isinstance(v, bool):
            return v
        return cell_text(v).upper() == "YES"
