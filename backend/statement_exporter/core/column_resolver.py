"""Header lookup: logical field names to physical column positions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, Mapping

from .config_models import cell_text
from .errors import MissingColumnsError

if TYPE_CHECKING:
    from ..io.tabular_store import Table


@dataclass(frozen=True)
class ColumnIndex(Mapping[str, int]):
    """1-based column position for every required field of one table."""

    table_name: str
    positions: Mapping[str, int]

    def __getitem__(self, field_name: str) -> int:
        return self.positions[field_name]

    def __iter__(self) -> Iterator[str]:
        return iter(self.positions)

    def __len__(self) -> int:
        return len(self.positions)


class ColumnResolver:
    """
    Resolves required field names against a table's header row.

    Header cells are trimmed and matched exactly (case-sensitive). When a name
    appears twice, the leftmost column wins. Resolution is all-or-nothing.
    """

    def resolve(self, table: Table, required: Iterable[str]) -> ColumnIndex:
        """
        Build the column index for a table.

        Args:
            table: Table whose first row is the header
            required: Field names that must all be present

        Returns:
            ColumnIndex covering every required name

        Raises:
            MissingColumnsError: Listing every required name not found
        """
        required = list(required)
        wanted = set(required)
        positions: dict[str, int] = {}

        for position, value in enumerate(table.header(), start=1):
            name = cell_text(value)
            if name in wanted and name not in positions:
                positions[name] = position

        missing = [name for name in required if name not in positions]
        if missing:
            raise MissingColumnsError(missing, table_name=table.name)

        return ColumnIndex(table_name=table.name, positions=positions)
