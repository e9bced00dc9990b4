"""Shared fixtures: a control workbook laid out as the exporter expects."""

import sys
from datetime import date
from pathlib import Path

import pandas as pd
import pytest

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from statement_exporter.core.config_loader import ConfigLoader
from statement_exporter.core.config_models import AppSettings, RunDate
from statement_exporter.core.notifications import CollectingNotificationSink
from statement_exporter.core.processing_context import RunContext
from statement_exporter.io.tabular_store import InMemoryStore

RUN_DATE = date(2025, 3, 13)
DATA_HEADER = ["Client", "Cusip_ISIN", "Security_Name", "Valuation_Type", "Price"]
OUTPUT_HEADER = "Client,Cusip_ISIN,Security_Name,Valuation_Type,Price,Statement Date"


@pytest.fixture
def folders(tmp_path):
    """Export, source and destination folders."""
    paths = {
        "out": tmp_path / "out",
        "source": tmp_path / "source",
        "dest": tmp_path / "dest",
    }
    for path in paths.values():
        path.mkdir()

    (paths["source"] / "20250313_Acme.xlsx").write_bytes(b"PK\x03\x04acme-statement")
    (paths["source"] / "20250313_Beta.xlsx").write_bytes(b"PK\x03\x04beta-statement")
    return paths


@pytest.fixture
def control_tables(folders):
    """Sheet name -> rows for a complete control workbook."""
    out = str(folders["out"])
    dest = folders["dest"]
    return {
        "Master": [
            ["Run Date", RUN_DATE],
            ["Source Folder", str(folders["source"])],
        ],
        "Export Config": [
            ["Client Name", "Data Sheet Name", "New File Name", "File Path"],
            ["Acme", "Prices", "Acme_Statement", out],
            ["Beta", "Prices", "Beta_Statement", out],
            ["Gamma", "No Price", "Gamma_Statement", out],
            ["Delta", "Missing Sheet", "Delta_Statement", out],
        ],
        "Prices": [
            DATA_HEADER,
            ["Acme", "US123", "Bond A", "Market", "100.5"],
            ["Other", "US999", "Bond B", "Market", "50"],
            ["Acme ", "US456", "Bond C", "Model", "99.25"],
        ],
        "No Price": [
            ["Client", "Cusip_ISIN", "Security_Name", "Valuation_Type"],
            ["Gamma", "US777", "Bond G", "Market"],
        ],
        "Distribution Config": [
            ["Client Name", "Destination Folder", "Process Flag"],
            ["Acme", str(dest / "Acme"), "YES"],
            ["Beta", str(dest / "Beta"), "no"],
            ["Other", str(dest / "Other"), "yes"],
        ],
    }


@pytest.fixture
def store(control_tables):
    return InMemoryStore.from_rows(control_tables)


@pytest.fixture
def config_loader(tmp_path):
    """Config loader without a settings file (defaults)."""
    return ConfigLoader(tmp_path / "config")


@pytest.fixture
def sink():
    return CollectingNotificationSink()


@pytest.fixture
def context(sink):
    """Run context for 13 March 2025."""
    return RunContext(AppSettings(), RunDate(value=RUN_DATE), sink=sink)


@pytest.fixture
def write_workbook(tmp_path):
    """Write sheet rows to a real .xlsx file and return its path."""

    def _write(tables, name="control.xlsx"):
        path = tmp_path / name
        with pd.ExcelWriter(path, engine="openpyxl") as writer:
            for sheet_name, rows in tables.items():
                pd.DataFrame(rows, dtype=object).to_excel(
                    writer, sheet_name=sheet_name, header=False, index=False
                )
        return path

    return _write
