"""Base class for pipeline stages."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ..core.config_models import RunDate
from ..core.errors import EntryError
from ..core.processing_context import EntryResult, RunContext


class BaseStep(ABC):
    """
    Abstract base class for the export and distribution stages.

    Each stage walks its configuration entries in order and reports failures
    through the run context without stopping the batch.
    """

    def __init__(self, context: RunContext):
        """
        Initialize the step.

        Args:
            context: Run context with settings, run date and notification sink
        """
        self.context = context

    @property
    def run_date(self) -> RunDate:
        return self.context.run_date

    @abstractmethod
    def run(self, entries: list[Any], *args: Any) -> Any:
        """Process every entry and return the stage summary."""

    def skip_entry(self, error: EntryError, client_name: str, **details: Any) -> EntryResult:
        """Report a per-entry failure and build its result."""
        self.context.report_error(error, client_name=client_name, details=details or None)
        return EntryResult(
            client_name=client_name,
            success=False,
            error_kind=error.kind,
            message=error.message,
        )
