"""File distribution stage."""

from __future__ import annotations

import logging
from pathlib import Path

from ..core.config_models import DistributionConfigEntry, RunDate
from ..core.errors import (
    DestinationCreationError,
    EntryError,
    FileCopyError,
    SourceFileNotFoundError,
)
from ..core.notifications import NotificationKind
from ..core.processing_context import DistributionSummary, EntryResult, RunContext
from ..io.file_system import FileSystem, LocalFileSystem
from .base_step import BaseStep

logger = logging.getLogger(__name__)


class FileDistributionEngine(BaseStep):
    """
    Copies each flagged client's dated file from the shared source folder to
    the client's destination folder.

    Entries whose flag is not YES are skipped silently. A missing source file,
    a destination folder that cannot be created, or a failed copy is reported
    for that entry and the pass continues.
    """

    def __init__(self, context: RunContext, file_system: FileSystem | None = None):
        super().__init__(context)
        self.fs = file_system or LocalFileSystem()

    def file_name(self, entry: DistributionConfigEntry, run_date: RunDate | None = None) -> str:
        """<yyyymmdd>_<client>.xlsx"""
        run_date = run_date or self.run_date
        extension = self.context.settings.output.distribution_extension
        return f"{run_date.compact}_{entry.client_name}{extension}"

    def copy_entry(
        self,
        entry: DistributionConfigEntry,
        source_folder: str | Path,
        run_date: RunDate | None = None,
    ) -> Path:
        """
        Copy one client's file.

        Returns:
            Destination path of the copy

        Raises:
            SourceFileNotFoundError: If the dated file is not in the source folder
            DestinationCreationError: If the destination folder cannot be created
            FileCopyError: If the copy itself fails
        """
        name = self.file_name(entry, run_date)
        source = Path(source_folder) / name

        if not self.fs.exists(source):
            raise SourceFileNotFoundError(f"File not found: {source}")

        destination_folder = Path(entry.destination_folder)
        if not self.fs.is_directory(destination_folder):
            try:
                self.fs.make_directory(destination_folder)
            except OSError as e:
                raise DestinationCreationError(
                    f"Could not create folder {destination_folder}: {e}"
                ) from e

        destination = destination_folder / name
        try:
            self.fs.copy_file(source, destination)
        except OSError as e:
            raise FileCopyError(f"Could not copy {source} to {destination}: {e}") from e

        return destination

    def distribute(
        self,
        entries: list[DistributionConfigEntry],
        source_folder: str | Path,
        run_date: RunDate | None = None,
    ) -> DistributionSummary:
        """Copy the file of every entry flagged YES and report the total."""
        summary = DistributionSummary()

        for entry in entries:
            if not entry.should_process:
                continue

            try:
                destination = self.copy_entry(entry, source_folder, run_date)
            except EntryError as e:
                logger.warning("Skipping distribution for %s: %s", entry.client_name, e.message)
                summary.results.append(
                    self.skip_entry(
                        e, entry.client_name, destination=entry.destination_folder
                    )
                )
                continue

            summary.copied_count += 1
            summary.results.append(
                EntryResult(
                    client_name=entry.client_name,
                    success=True,
                    output_file=str(destination),
                )
            )
            self.context.report(
                NotificationKind.FILE_DISTRIBUTED,
                f"{entry.client_name}: copied to {destination}",
                client_name=entry.client_name,
            )

        if summary.copied_count:
            message = f"{summary.copied_count} file(s) copied successfully"
        else:
            message = "No files were copied"
        self.context.report(
            NotificationKind.DISTRIBUTION_COMPLETE,
            message,
            details={"copied": summary.copied_count, "failed": summary.failed_count},
        )
        return summary

    def run(
        self, entries: list[DistributionConfigEntry], source_folder: str | Path
    ) -> DistributionSummary:
        return self.distribute(entries, source_folder, self.run_date)
