"""
Next record identifier from the tail of an append-only ledger.

There is no counter: the identifier column of the master table is the source
of truth. The caller supplies a snapshot of that column and gets a value back;
nothing here writes.

Two submissions that read the same tail before either appends will compute the
same identifier. Nothing in this module prevents that.
"""
from __future__ import annotations

import logging
from typing import Any, Optional, Sequence

from labledger.core.identifiers.codec import BOOTSTRAP, RecordIdentifier, SerialNumber, decode, increment
from labledger.core.modes.models import ModeConfig
from labledger.core.store.base import TableStore

_log = logging.getLogger("labledger.allocator")

ID_COLUMN = "A"


def _cell(v: Any) -> str:
    return "" if v is None else str(v).strip()


def last_serial(column: Sequence[Any], prefix: str) -> Optional[SerialNumber]:
    """Scan from the last row up to row 1 (never the header) for a decodable identifier."""
    tail_seen = False
    for i in range(len(column) - 1, 0, -1):
        v = _cell(column[i])
        if not v:
            continue
        serial = decode(v, prefix)
        if serial is not None:
            return serial
        if not tail_seen:
            _log.warning("ledger tail is not an identifier row=%d value=%r; scanning back", i + 1, v[:40])
        tail_seen = True
    return None


def allocate(column: Sequence[Any], prefix: str) -> SerialNumber:
    last = last_serial(column, prefix)
    if last is None:
        return BOOTSTRAP
    return increment(last)


def next_identifier(store: TableStore, table: str, mode: ModeConfig) -> RecordIdentifier:
    column = store.read_column(table, ID_COLUMN)
    serial = allocate(column, mode.prefix)
    ident = RecordIdentifier(prefix=mode.prefix, serial=serial)
    _log.info("allocated id=%s mode=%s table=%s rows=%d", ident.text, mode.name, table, len(column))
    return ident
