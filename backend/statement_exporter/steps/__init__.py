"""Pipeline stage implementations."""

from .base_step import BaseStep
from .export_step import FilterExportEngine
from .distribute_step import FileDistributionEngine

__all__ = [
    "BaseStep",
    "FilterExportEngine",
    "FileDistributionEngine",
]
