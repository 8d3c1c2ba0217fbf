from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from labledger.core.config import Settings
from labledger.core.errors import AppendFailure, LabLedgerError, TableResolutionError, ValidationError
from labledger.core.ledger.allocator import next_identifier
from labledger.core.ledger.fanout import FanOutWriter
from labledger.core.modes.models import LogicalTable, ModeConfig
from labledger.core.modes.registry import ModeRegistry
from labledger.core.observability.metrics import record_submission
from labledger.core.store.base import TableStore
from labledger.core.tables.resolver import ensure_tables, resolve_tables

from .models import SubmissionPayload

log = logging.getLogger("labledger.submit")


def _json_log(event: str, **fields):
    log.info("%s", {"event": event, **fields})


@dataclass
class SubmissionResult:
    record_id: str
    timestamp: str
    mode: str
    failed_collections: List[str] = field(default_factory=list)
    skipped_collections: List[str] = field(default_factory=list)

    @property
    def partial(self) -> bool:
        return bool(self.failed_collections)

    def to_dict(self) -> Dict[str, Any]:
        if self.partial:
            message = "Saved master record; some detail rows were not saved: " + ", ".join(self.failed_collections)
        else:
            message = "Submission saved."
        return {
            "ok": True,
            "status": "partial" if self.partial else "saved",
            "recordId": self.record_id,
            "timestamp": self.timestamp,
            "mode": self.mode,
            "message": message,
            "failedCollections": list(self.failed_collections),
            "skippedCollections": list(self.skipped_collections),
        }


def check_required(payload: SubmissionPayload, mode: ModeConfig) -> None:
    missing = [f for f in mode.required_fields if getattr(payload, f, None) in (None, "")]
    if missing:
        raise ValidationError(
            f"Missing required fields for {mode.label} mode: {', '.join(missing)}",
            fields=missing,
        )


class SubmissionService:
    """Validate -> resolve tables -> allocate identifier -> fan out."""

    def __init__(
        self,
        store: TableStore,
        *,
        modes: Optional[ModeRegistry] = None,
        settings: Optional[Settings] = None,
        writer: Optional[FanOutWriter] = None,
    ):
        self.store = store
        self.settings = settings or Settings()
        self.modes = modes or ModeRegistry(overrides_path=self.settings.modes_file)
        self.writer = writer or FanOutWriter(store, workers=self.settings.detail_workers)

    def select_mode(self, payload: SubmissionPayload) -> ModeConfig:
        mode = self.modes.normalize(payload.input_mode)
        if mode is None:
            expected = " or ".join(repr(n) for n in self.modes.list_names())
            raise ValidationError(f"Invalid inputMode. Expected {expected}.", fields=["inputMode"])
        return mode

    def submit(self, payload: SubmissionPayload) -> SubmissionResult:
        # metric labels stay bounded: raw selectors never become label values
        mode_name = "unknown"
        try:
            mode = self.select_mode(payload)
            mode_name = mode.name
            check_required(payload, mode)
            result = self._persist(payload, mode)
        except LabLedgerError as e:
            record_submission(mode_name, e.code)
            _json_log(
                "submission_failed",
                mode=mode_name,
                input_mode=(payload.input_mode or "")[:40],
                error=e.code,
                message=str(e),
            )
            raise

        record_submission(mode.name, "partial" if result.partial else "saved")
        _json_log(
            "submission_saved",
            mode=mode.name,
            record_id=result.record_id,
            failed=result.failed_collections,
            skipped=result.skipped_collections,
        )
        return result

    def _persist(self, payload: SubmissionPayload, mode: ModeConfig) -> SubmissionResult:
        details = self.modes.detail_tables()
        specs = [mode.master] + details

        if self.settings.ensure_tables:
            ensure_tables(self.store, specs)

        resolved = resolve_tables(specs, self.store.list_tables())
        master = resolved[LogicalTable.MASTER_RECORD]
        if not master.found:
            raise TableResolutionError(f"{mode.label} master table", mode.master.aliases)

        ident = next_identifier(self.store, master.table, mode)
        try:
            out = self.writer.write(
                payload=payload,
                ident=ident,
                mode=mode,
                master_table=master.table,
                detail_specs=details,
                detail_tables={spec.logical: resolved[spec.logical].table for spec in details},
            )
        except AppendFailure:
            log.error("master append failed; id=%s was not recorded", ident.text)
            raise

        return SubmissionResult(
            record_id=out.record_id,
            timestamp=out.timestamp,
            mode=mode.name,
            failed_collections=sorted(out.failed.keys()),
            skipped_collections=list(out.skipped),
        )
