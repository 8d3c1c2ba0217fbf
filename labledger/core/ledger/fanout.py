"""
Fan-out writer: one master row, then one batch per non-empty child collection.

The master append happens first and must succeed; detail batches are only
issued after it returns. Detail batches are independent of each other and run
on a small thread pool. Nothing is rolled back when a detail batch fails.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from labledger.core.errors import AppendFailure, LabLedgerError
from labledger.core.identifiers.codec import RecordIdentifier
from labledger.core.modes.models import LogicalTable, ModeConfig, TableSpec
from labledger.core.observability.metrics import DETAIL_ROWS_TOTAL
from labledger.core.submission.models import SubmissionPayload
from labledger.core.store.base import Row, TableStore

from .rows import detail_rows, master_row

_log = logging.getLogger("labledger.fanout")


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class FanOutResult:
    record_id: str
    timestamp: str
    master_table: str
    written: Dict[str, int] = field(default_factory=dict)
    skipped: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)

    @property
    def partial(self) -> bool:
        return bool(self.failed)


class FanOutWriter:
    def __init__(
        self,
        store: TableStore,
        *,
        workers: int = 4,
        clock: Callable[[], str] = utc_now_iso,
    ):
        self.store = store
        self.workers = max(1, int(workers))
        self.clock = clock

    def write(
        self,
        *,
        payload: SubmissionPayload,
        ident: RecordIdentifier,
        mode: ModeConfig,
        master_table: str,
        detail_specs: List[TableSpec],
        detail_tables: Mapping[LogicalTable, Optional[str]],
    ) -> FanOutResult:
        timestamp = self.clock()
        row = master_row(payload, ident, mode, timestamp)
        try:
            self.store.append_row(master_table, row)
        except LabLedgerError as e:
            raise AppendFailure(master_table, str(e)) from e

        result = FanOutResult(record_id=ident.text, timestamp=timestamp, master_table=master_table)

        batches: List[Tuple[str, str, List[Row]]] = []
        for spec in detail_specs:
            name = spec.collection or spec.logical.value
            rows = detail_rows(payload.collection(name), ident, mode)
            if not rows:
                continue
            table = detail_tables.get(spec.logical)
            if table is None:
                _log.info("detail table unresolved; skipping id=%s collection=%s rows=%d", ident.text, name, len(rows))
                result.skipped.append(name)
                continue
            batches.append((name, table, rows))

        if not batches:
            return result

        if self.workers == 1 or len(batches) == 1:
            outcomes = [self._append_batch(b) for b in batches]
        else:
            with ThreadPoolExecutor(max_workers=min(self.workers, len(batches))) as pool:
                outcomes = list(pool.map(self._append_batch, batches))

        for (name, _table, rows), err in zip(batches, outcomes):
            if err is None:
                result.written[name] = len(rows)
                DETAIL_ROWS_TOTAL.labels(collection=name).inc(len(rows))
            else:
                result.failed[name] = err
        return result

    def _append_batch(self, batch: Tuple[str, str, List[Row]]) -> Optional[str]:
        name, table, rows = batch
        try:
            self.store.append_rows(table, rows)
        except LabLedgerError as e:
            _log.error("detail append failed collection=%s table=%s err=%s", name, table, e)
            return str(e)
        except Exception as e:
            # master row is already written; any crash here is a failed collection
            _log.exception("detail append crashed collection=%s table=%s", name, table)
            return f"{type(e).__name__}: {e}"
        return None
