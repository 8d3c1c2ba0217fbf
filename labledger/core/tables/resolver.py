"""
Logical table -> concrete table name, tolerating historical renames.

Resolution is read-only and must run against a fresh listing for every
submission: worksheets can be renamed, added or removed between calls.
"""
from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from labledger.core.modes.models import LogicalTable, TableSpec
from labledger.core.store.base import TableStore

_log = logging.getLogger("labledger.tables")

_WS = re.compile(r"\s+")


def normalize_name(name: str) -> str:
    return _WS.sub(" ", str(name or "")).strip().casefold()


@dataclass(frozen=True)
class TableResolution:
    logical: LogicalTable
    table: Optional[str] = None
    alias: Optional[str] = None

    @property
    def found(self) -> bool:
        return self.table is not None


def resolve_table(spec: TableSpec, existing: Iterable[str]) -> TableResolution:
    """First alias (in priority order) that matches an existing table wins."""
    by_norm: Dict[str, str] = {}
    for name in existing:
        # keep the first concrete name when two differ only by case/spacing
        by_norm.setdefault(normalize_name(name), name)

    for alias in spec.aliases:
        hit = by_norm.get(normalize_name(alias))
        if hit is not None:
            return TableResolution(logical=spec.logical, table=hit, alias=alias)
    return TableResolution(logical=spec.logical)


def resolve_tables(specs: Iterable[TableSpec], existing: Iterable[str]) -> Dict[LogicalTable, TableResolution]:
    names = list(existing)
    return {spec.logical: resolve_table(spec, names) for spec in specs}


def ensure_tables(store: TableStore, specs: List[TableSpec]) -> List[str]:
    """Create missing tables under their canonical name and fill empty header rows.

    Idempotent; safe to race against other submissions doing the same.
    Returns the names of tables created.
    """
    created: List[str] = []
    existing = store.list_tables()
    for spec in specs:
        res = resolve_table(spec, existing)
        if not res.found:
            if store.ensure_table(spec.canonical, spec.header or None):
                created.append(spec.canonical)
            continue
        if spec.header and store.ensure_header(res.table, spec.header):
            _log.info("header written table=%s", res.table)
    if created:
        _log.info("tables created: %s", created)
    return created
