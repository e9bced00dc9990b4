"""
Operator notifications.

Every status or error message produced during a run is a Notification
delivered to a NotificationSink. The console sink prints it, the collecting
sink keeps it in memory for the API and tests.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any


class ErrorSeverity(str, Enum):
    """Severity level for notifications."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class NotificationKind(str, Enum):
    """Message categories an operator can receive."""

    DATE_MISSING = "date_missing"
    DATA_SOURCE_NOT_FOUND = "data_source_not_found"
    MISSING_COLUMNS = "missing_columns"
    FILE_WRITE_FAILURE = "file_write_failure"
    SOURCE_FILE_NOT_FOUND = "source_file_not_found"
    DESTINATION_CREATION_FAILURE = "destination_creation_failure"
    FILE_COPY_FAILURE = "file_copy_failure"
    FILE_EXPORTED = "file_exported"
    FILE_DISTRIBUTED = "file_distributed"
    EXPORT_COMPLETE = "export_complete"
    DISTRIBUTION_COMPLETE = "distribution_complete"


@dataclass(frozen=True)
class Notification:
    """A single message for the operator."""

    kind: NotificationKind
    message: str
    severity: ErrorSeverity = ErrorSeverity.INFO
    client_name: str | None = None
    details: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "kind": self.kind.value,
            "message": self.message,
            "severity": self.severity.value,
            "client_name": self.client_name,
            "details": self.details,
        }


class NotificationSink(ABC):
    """Receives human-readable status and error messages."""

    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver a notification."""


class ConsoleNotificationSink(NotificationSink):
    """Prints notifications to stdout with a status marker."""

    MARKERS = {
        ErrorSeverity.INFO: "✓",
        ErrorSeverity.WARNING: "⚠",
        ErrorSeverity.ERROR: "✗",
        ErrorSeverity.CRITICAL: "✗",
    }

    def __init__(self, show_info: bool = True):
        self.show_info = show_info

    def notify(self, notification: Notification) -> None:
        if notification.severity == ErrorSeverity.INFO and not self.show_info:
            return
        marker = self.MARKERS[notification.severity]
        print(f"  {marker} {notification.message}")


class CollectingNotificationSink(NotificationSink):
    """Keeps every notification in arrival order."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    def of_kind(self, kind: NotificationKind) -> list[Notification]:
        """Notifications of a single category."""
        return [n for n in self.notifications if n.kind == kind]

    def clear(self) -> None:
        self.notifications.clear()
