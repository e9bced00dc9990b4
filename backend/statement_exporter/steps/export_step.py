"""Filter-and-export stage."""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from ..core.column_resolver import ColumnResolver
from ..core.config_models import ExportConfigEntry, RunDate, cell_text
from ..core.errors import EntryError
from ..core.notifications import NotificationKind
from ..core.processing_context import EntryResult, ExportSummary, RunContext
from ..io.file_writer import FileWriter
from ..io.tabular_store import Table, TabularStore
from .base_step import BaseStep

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("Client", "Cusip_ISIN", "Security_Name", "Valuation_Type", "Price")
STATEMENT_DATE = "Statement Date"
OUTPUT_COLUMNS = [*REQUIRED_FIELDS, STATEMENT_DATE]


class FilterExportEngine(BaseStep):
    """
    Writes one CSV per export entry with the data rows belonging to its client.

    Rows are matched on the trimmed Client cell, exactly and case-sensitively,
    and keep their source order. Each output row gets the run's display date
    as its Statement Date.
    """

    def __init__(
        self,
        context: RunContext,
        writer: FileWriter | None = None,
        resolver: ColumnResolver | None = None,
    ):
        super().__init__(context)
        self.writer = writer or FileWriter(context.settings.output)
        self.resolver = resolver or ColumnResolver()

    def output_path(self, entry: ExportConfigEntry, run_date: RunDate | None = None) -> Path:
        """<folder>/<yyyymmdd>_<base name>.csv"""
        run_date = run_date or self.run_date
        extension = self.context.settings.output.export_extension
        return Path(entry.output_folder) / f"{run_date.compact}_{entry.output_base_name}{extension}"

    def build_output(
        self, entry: ExportConfigEntry, table: Table, run_date: RunDate | None = None
    ) -> pd.DataFrame:
        """
        Filter a data table down to the entry's client.

        Raises:
            MissingColumnsError: If any required header is absent
        """
        run_date = run_date or self.run_date
        columns = self.resolver.resolve(table, REQUIRED_FIELDS)

        # Bottom-up scan of the Client column, so blank client cells above the
        # last populated one do not end the data.
        last_row = table.last_row(columns["Client"])
        data = table.rows(2, last_row)

        clients = data[columns["Client"] - 1].map(cell_text)
        matches = data.loc[clients == entry.client_name]

        output = pd.DataFrame(
            {name: matches[columns[name] - 1].tolist() for name in REQUIRED_FIELDS},
            columns=OUTPUT_COLUMNS[:-1],
            dtype=object,
        )
        output[STATEMENT_DATE] = run_date.display
        return output

    def export(
        self, entry: ExportConfigEntry, table: Table, run_date: RunDate | None = None
    ) -> Path:
        """
        Filter one data table and write the entry's CSV file.

        A client without matching rows still gets a header-only file. An
        existing file at the same path is overwritten.

        Returns:
            Path of the written file

        Raises:
            MissingColumnsError: If any required header is absent
            FileWriteError: If the file cannot be written
        """
        output_path, _ = self._export(entry, table, run_date)
        return output_path

    def _export(
        self, entry: ExportConfigEntry, table: Table, run_date: RunDate | None
    ) -> tuple[Path, int]:
        output = self.build_output(entry, table, run_date)
        output_path = self.output_path(entry, run_date)
        self.writer.write_csv(output, output_path)
        logger.debug("Wrote %d rows to %s", len(output), output_path)
        return output_path, len(output)

    def run(self, entries: list[ExportConfigEntry], store: TabularStore) -> ExportSummary:
        """
        Export every entry in configuration order.

        Per-entry failures (missing data sheet, missing columns, write
        failures) are reported and skipped; the batch always completes.
        """
        summary = ExportSummary()

        for entry in entries:
            try:
                table = store.open_table(entry.data_source_name)
                output_path, row_count = self._export(entry, table, self.run_date)
            except EntryError as e:
                logger.warning("Skipping export for %s: %s", entry.client_name, e.message)
                summary.results.append(
                    self.skip_entry(e, entry.client_name, data_source=entry.data_source_name)
                )
                continue

            self.context.report(
                NotificationKind.FILE_EXPORTED,
                f"{entry.client_name}: {output_path.name} ({row_count} rows)",
                client_name=entry.client_name,
            )
            summary.results.append(
                EntryResult(
                    client_name=entry.client_name,
                    success=True,
                    output_file=str(output_path),
                    row_count=row_count,
                )
            )

        self.context.report(
            NotificationKind.EXPORT_COMPLETE,
            f"Export complete: {summary.exported_count} file(s) written, "
            f"{summary.skipped_count} entry(ies) skipped",
            details={
                "exported": summary.exported_count,
                "skipped": summary.skipped_count,
            },
        )
        return summary
