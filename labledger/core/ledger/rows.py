from __future__ import annotations

import math
from typing import Any, List

from labledger.core.identifiers.codec import RecordIdentifier
from labledger.core.modes.models import ModeConfig
from labledger.core.submission.models import DetailEntry, SubmissionPayload


def cell(v: Any) -> Any:
    """Store-safe cell value: None/NaN -> "", integral floats -> int, everything else str or number."""
    if v is None:
        return ""
    if isinstance(v, bool):
        return str(v).lower()
    if isinstance(v, float):
        if not math.isfinite(v):
            return ""
        return int(v) if v.is_integer() else v
    if isinstance(v, int):
        return v
    return str(v)


def master_row(payload: SubmissionPayload, ident: RecordIdentifier, mode: ModeConfig, timestamp: str) -> List[Any]:
    row: List[Any] = [ident.text, timestamp]
    for f in mode.master_fields:
        v = getattr(payload, f, None)
        if not v and f in mode.defaults:
            v = mode.defaults[f]
        row.append(cell(v))
    return row


def detail_rows(entries: List[DetailEntry], ident: RecordIdentifier, mode: ModeConfig) -> List[List[Any]]:
    """Drop all-blank entries, then number the survivors 1..n."""
    kept = [e for e in entries if not e.is_blank()]
    return [[ident.text, mode.name, ordinal, *e.cells()] for ordinal, e in enumerate(kept, start=1)]
