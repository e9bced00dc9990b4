"""File and table I/O handlers."""

from .file_reader import FileReader
from .file_writer import FileWriter
from .file_system import FileSystem, LocalFileSystem
from .tabular_store import InMemoryStore, Table, TabularStore, WorkbookStore

__all__ = [
    "FileReader",
    "FileWriter",
    "FileSystem",
    "LocalFileSystem",
    "InMemoryStore",
    "Table",
    "TabularStore",
    "WorkbookStore",
]
