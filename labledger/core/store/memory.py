from __future__ import annotations

import threading
from typing import Any, Dict, List, Optional

from labledger.core.errors import StoreError

from .base import Row, TableStore, column_index, is_blank_row


class MemoryTableStore(TableStore):
    """In-process store. Used by tests and for local runs without a sheet."""

    name = "memory"

    def __init__(self, tables: Optional[Dict[str, List[Row]]] = None):
        self._lock = threading.Lock()
        self._tables: Dict[str, List[Row]] = {k: [list(r) for r in v] for k, v in (tables or {}).items()}

    def _rows(self, table: str) -> List[Row]:
        if table not in self._tables:
            raise StoreError(f"Unable to parse range: {table}")
        return self._tables[table]

    def list_tables(self) -> List[str]:
        with self._lock:
            return list(self._tables.keys())

    def read_column(self, table: str, column: str = "A") -> List[Any]:
        idx = column_index(column)
        with self._lock:
            return [r[idx] if idx < len(r) else "" for r in self._rows(table)]

    def append_rows(self, table: str, rows: List[Row]) -> None:
        if not rows:
            return
        with self._lock:
            self._rows(table).extend(list(r) for r in rows)

    def ensure_table(self, table: str, header: Optional[Row] = None) -> bool:
        with self._lock:
            if table in self._tables:
                return False
            self._tables[table] = [list(header)] if header else []
            return True

    def ensure_header(self, table: str, header: Row) -> bool:
        with self._lock:
            rows = self._rows(table)
            if rows and not is_blank_row(rows[0]):
                return False
            if rows:
                rows[0] = list(header)
            else:
                rows.append(list(header))
            return True

    def rows(self, table: str) -> List[Row]:
        with self._lock:
            return [list(r) for r in self._rows(table)]
