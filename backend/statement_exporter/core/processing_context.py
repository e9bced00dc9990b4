"""
Run context and result models.

The RunContext holds the state shared by every entry of a run: settings,
the single run date, and the notification sink that collects operator
messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from .notifications import (
    ErrorSeverity,
    Notification,
    NotificationKind,
    NotificationSink,
)

if TYPE_CHECKING:
    from .config_models import AppSettings, RunDate
    from .errors import PipelineError


@dataclass
class EntryResult:
    """Outcome of one configuration entry."""

    client_name: str
    success: bool
    output_file: str | None = None
    row_count: int = 0
    error_kind: NotificationKind | None = None
    message: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "client_name": self.client_name,
            "success": self.success,
            "output_file": self.output_file,
            "row_count": self.row_count,
            "error_kind": self.error_kind.value if self.error_kind else None,
            "message": self.message,
        }


@dataclass
class ExportSummary:
    """Result of the export stage."""

    results: list[EntryResult] = field(default_factory=list)

    @property
    def exported_count(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def skipped_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    @property
    def output_files(self) -> list[str]:
        return [r.output_file for r in self.results if r.output_file]

    def to_dict(self) -> dict[str, Any]:
        return {
            "exported_count": self.exported_count,
            "skipped_count": self.skipped_count,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class DistributionSummary:
    """
    Result of the distribution stage.

    Entries not flagged for processing never appear in results.
    """

    copied_count: int = 0
    results: list[EntryResult] = field(default_factory=list)

    @property
    def failed_count(self) -> int:
        return sum(1 for r in self.results if not r.success)

    def to_dict(self) -> dict[str, Any]:
        return {
            "copied_count": self.copied_count,
            "failed_count": self.failed_count,
            "results": [r.to_dict() for r in self.results],
        }


@dataclass
class RunResult:
    """Complete result of one run."""

    run_date: RunDate
    export: ExportSummary | None = None
    distribution: DistributionSummary | None = None
    notifications: list[Notification] = field(default_factory=list)
    started_at: datetime | None = None
    completed_at: datetime | None = None

    @property
    def duration_ms(self) -> float:
        if self.started_at and self.completed_at:
            return (self.completed_at - self.started_at).total_seconds() * 1000
        return 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_date": self.run_date.value.isoformat(),
            "export": self.export.to_dict() if self.export else None,
            "distribution": self.distribution.to_dict() if self.distribution else None,
            "notifications": [n.to_dict() for n in self.notifications],
            "duration_ms": self.duration_ms,
        }


class RunContext:
    """
    Shared context during a run.

    Carries the run date unchanged to both stages and routes every message to
    the notification sink while keeping its own copy.
    """

    def __init__(
        self,
        settings: AppSettings,
        run_date: RunDate,
        sink: NotificationSink | None = None,
    ):
        self.settings = settings
        self.run_date = run_date
        self.sink = sink
        self._notifications: list[Notification] = []

    @property
    def notifications(self) -> list[Notification]:
        return list(self._notifications)

    def report(
        self,
        kind: NotificationKind,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.INFO,
        client_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> Notification:
        """Record a notification and forward it to the sink."""
        notification = Notification(
            kind=kind,
            message=message,
            severity=severity,
            client_name=client_name,
            details=details,
        )
        self._notifications.append(notification)
        if self.sink is not None:
            self.sink.notify(notification)
        return notification

    def report_error(
        self,
        error: PipelineError,
        client_name: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> Notification:
        """Report a pipeline error under its own kind and severity."""
        prefix = f"{client_name}: " if client_name else ""
        return self.report(
            kind=error.kind,
            message=prefix + error.message,
            severity=error.severity,
            client_name=client_name,
            details=details,
        )

    def errors(self) -> list[Notification]:
        return [
            n for n in self._notifications
            if n.severity in (ErrorSeverity.ERROR, ErrorSeverity.CRITICAL)
        ]
