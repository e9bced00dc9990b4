"""
Pipeline execution engine.

Orchestrates a run: resolves the run date once, then executes the export
and/or distribution stage against the same control workbook.
"""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

from .config_loader import ConfigLoader
from .config_models import RunDate, normalize_folder
from .errors import DataSourceNotFoundError, DateMissingError, EntryError
from .notifications import Notification, NotificationSink
from .processing_context import DistributionSummary, ExportSummary, RunContext, RunResult

if TYPE_CHECKING:
    from ..io.file_system import FileSystem
    from ..io.file_writer import FileWriter
    from ..io.tabular_store import TabularStore

logger = logging.getLogger(__name__)

STAGES = ("export", "distribute")


class PipelineEngine:
    """
    Runs the export and distribution stages.

    The engine:
    1. Reads the run date from the master sheet (aborting if it is missing)
    2. Loads the configuration table each stage needs
    3. Runs the stage over every entry in order
    4. Returns the stage summaries with every notification raised
    """

    def __init__(
        self,
        config_loader: ConfigLoader,
        store: TabularStore,
        sink: NotificationSink | None = None,
        file_system: FileSystem | None = None,
        writer: FileWriter | None = None,
    ):
        """
        Initialize the pipeline engine.

        Args:
            config_loader: Loader for settings and configuration tables
            store: Control workbook holding config tables and data sheets
            sink: Where operator notifications go
            file_system: Filesystem used for distribution (host filesystem if None)
            writer: CSV writer used for export (built from settings if None)
        """
        self.config_loader = config_loader
        self.store = store
        self.sink = sink
        self.file_system = file_system
        self.writer = writer

    @property
    def settings(self):
        return self.config_loader.settings

    def create_context(self) -> RunContext:
        """
        Resolve the run date and build the context shared by both stages.

        Raises:
            DateMissingError: Reported to the sink, then re-raised
        """
        try:
            run_date = self.config_loader.load_run_date(self.store)
        except DateMissingError as e:
            if self.sink is not None:
                self.sink.notify(
                    Notification(kind=e.kind, message=e.message, severity=e.severity)
                )
            raise
        return RunContext(self.settings, run_date=run_date, sink=self.sink)

    def run_export(self, context: RunContext) -> ExportSummary:
        """
        Run the export stage.

        A missing export configuration table is reported and leaves the stage
        empty, so a following distribution stage still runs.
        """
        from ..steps.export_step import FilterExportEngine

        try:
            entries = self.config_loader.load_export_config(self.store)
        except DataSourceNotFoundError as e:
            logger.error("Export stage skipped: %s", e.message)
            context.report_error(e)
            return ExportSummary()

        logger.info("Exporting %d entries", len(entries))
        step = FilterExportEngine(context, writer=self.writer)
        return step.run(entries, self.store)

    def run_distribution(
        self, context: RunContext, source_folder: str | Path | None = None
    ) -> DistributionSummary:
        """
        Run the distribution stage.

        A missing distribution configuration table is reported and leaves the
        stage empty.

        Args:
            context: Run context
            source_folder: Overrides the source folder from the master sheet
        """
        from ..steps.distribute_step import FileDistributionEngine

        if source_folder is None:
            source_folder = self.config_loader.load_source_folder(self.store)
        else:
            source_folder = normalize_folder(str(source_folder))

        try:
            entries = self.config_loader.load_distribution_config(self.store)
        except DataSourceNotFoundError as e:
            logger.error("Distribution stage skipped: %s", e.message)
            context.report_error(e)
            return DistributionSummary()

        logger.info("Distributing from %s (%d entries)", source_folder, len(entries))
        step = FileDistributionEngine(context, file_system=self.file_system)
        return step.run(entries, source_folder)

    def run(
        self,
        stages: tuple[str, ...] = STAGES,
        source_folder: str | Path | None = None,
    ) -> RunResult:
        """
        Execute the requested stages with a single run date.

        Args:
            stages: Any of "export", "distribute", executed in that order
            source_folder: Overrides the distribution source folder

        Returns:
            RunResult with a summary per executed stage

        Raises:
            DateMissingError: If the run date cannot be resolved
        """
        unknown = [s for s in stages if s not in STAGES]
        if unknown:
            raise ValueError(f"Unknown stage(s): {', '.join(unknown)}")

        started_at = datetime.now()
        context = self.create_context()
        result = RunResult(run_date=context.run_date, started_at=started_at)

        if "export" in stages:
            result.export = self.run_export(context)
        if "distribute" in stages:
            result.distribution = self.run_distribution(context, source_folder)

        result.notifications = context.notifications
        result.completed_at = datetime.now()
        return result

    def preview_export(self, run_date: RunDate | None = None) -> list[dict]:
        """
        Filter every export entry without writing files.

        Returns one dict per entry with the target file name and the CSV text
        that would be written, or the reason the entry would be skipped.
        """
        from ..io.file_writer import FileWriter
        from ..steps.export_step import FilterExportEngine

        context = (
            RunContext(self.settings, run_date=run_date)
            if run_date is not None
            else self.create_context()
        )
        writer = self.writer or FileWriter(self.settings.output)
        step = FilterExportEngine(context, writer=writer)

        previews = []
        for entry in self.config_loader.load_export_config(self.store):
            preview = {
                "client_name": entry.client_name,
                "data_source": entry.data_source_name,
                "output_file": str(step.output_path(entry)),
            }
            try:
                table = self.store.open_table(entry.data_source_name)
                output = step.build_output(entry, table)
            except EntryError as e:
                preview.update(error_kind=e.kind.value, message=e.message)
            else:
                preview.update(row_count=len(output), csv=writer.write_csv_text(output))
            previews.append(preview)

        return previews
