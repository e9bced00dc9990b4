"""Core configuration and processing components."""

from .config_models import (
    AppSettings,
    DistributionConfigEntry,
    ExportConfigEntry,
    OutputConfig,
    RunDate,
)
from .config_loader import ConfigLoader
from .column_resolver import ColumnIndex, ColumnResolver
from .errors import (
    DataSourceNotFoundError,
    DateMissingError,
    EntryError,
    MissingColumnsError,
    PipelineError,
)
from .notifications import (
    CollectingNotificationSink,
    ConsoleNotificationSink,
    Notification,
    NotificationKind,
    NotificationSink,
)
from .pipeline_engine import PipelineEngine
from .processing_context import (
    DistributionSummary,
    EntryResult,
    ExportSummary,
    RunContext,
    RunResult,
)

__all__ = [
    "AppSettings",
    "DistributionConfigEntry",
    "ExportConfigEntry",
    "OutputConfig",
    "RunDate",
    "ConfigLoader",
    "ColumnIndex",
    "ColumnResolver",
    "DataSourceNotFoundError",
    "DateMissingError",
    "EntryError",
    "MissingColumnsError",
    "PipelineError",
    "CollectingNotificationSink",
    "ConsoleNotificationSink",
    "Notification",
    "NotificationKind",
    "NotificationSink",
    "PipelineEngine",
    "DistributionSummary",
    "EntryResult",
    "ExportSummary",
    "RunContext",
    "RunResult",
]
