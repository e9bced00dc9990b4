"""
Exceptions raised by the export and distribution stages.

DateMissingError aborts a whole run. Every EntryError subclass is contained
at the entry boundary: it is reported and the batch moves on.
"""

from __future__ import annotations

from .notifications import ErrorSeverity, NotificationKind


class PipelineError(Exception):
    """Base class for all pipeline failures."""

    kind: NotificationKind
    severity: ErrorSeverity = ErrorSeverity.ERROR

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DateMissingError(PipelineError):
    """The run date cell is empty, unparsable or not a date."""

    kind = NotificationKind.DATE_MISSING
    severity = ErrorSeverity.CRITICAL


class WorkbookNotFoundError(PipelineError):
    """The control workbook could not be opened."""

    kind = NotificationKind.DATA_SOURCE_NOT_FOUND
    severity = ErrorSeverity.CRITICAL


class EntryError(PipelineError):
    """Failure scoped to one configuration entry."""


class DataSourceNotFoundError(EntryError):
    kind = NotificationKind.DATA_SOURCE_NOT_FOUND

    def __init__(self, table_name: str):
        super().__init__(f"Data sheet '{table_name}' not found")
        self.table_name = table_name


class MissingColumnsError(EntryError):
    kind = NotificationKind.MISSING_COLUMNS

    def __init__(self, missing: list[str], table_name: str | None = None):
        where = f" in '{table_name}'" if table_name else ""
        super().__init__(f"Missing required columns{where}: {', '.join(missing)}")
        self.missing = list(missing)
        self.table_name = table_name


class FileWriteError(EntryError):
    kind = NotificationKind.FILE_WRITE_FAILURE


class SourceFileNotFoundError(EntryError):
    kind = NotificationKind.SOURCE_FILE_NOT_FOUND
    severity = ErrorSeverity.WARNING


class DestinationCreationError(EntryError):
    kind = NotificationKind.DESTINATION_CREATION_FAILURE


class FileCopyError(EntryError):
    kind = NotificationKind.FILE_COPY_FAILURE
