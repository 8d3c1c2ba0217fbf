from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, List, Optional, Sequence

from labledger.core.identifiers.codec import alpha_value

Row = List[Any]


def column_index(column: str) -> int:
    """Zero-based index of a spreadsheet column letter (A -> 0, AA -> 26)."""
    return alpha_value((column or "A").strip().upper()) - 1


def is_blank_row(row: Sequence[Any]) -> bool:
    return all(str(c if c is not None else "").strip() == "" for c in row)


class TableStore(ABC):
    """Append-only tabular store.

    No locks, transactions or conditional writes are assumed; implementations
    only need these primitives.
    """

    name: str

    @abstractmethod
    def list_tables(self) -> List[str]:
        """Concrete table names currently present."""

    @abstractmethod
    def read_column(self, table: str, column: str = "A") -> List[Any]:
        """One cell per row, header included at index 0. Missing cells read as ""."""

    @abstractmethod
    def append_rows(self, table: str, rows: List[Row]) -> None:
        """Append rows to the end of ``table`` in the given order."""

    @abstractmethod
    def ensure_table(self, table: str, header: Optional[Row] = None) -> bool:
        """Create ``table`` with ``header`` if absent. Returns True when created."""

    @abstractmethod
    def ensure_header(self, table: str, header: Row) -> bool:
        """Write ``header`` into row 1 when that row is empty. Returns True when written."""

    def append_row(self, table: str, row: Row) -> None:
        self.append_rows(table, [row])
