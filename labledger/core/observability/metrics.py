from __future__ import annotations

from collections import Counter
from typing import Dict

from prometheus_client import Counter as PromCounter

# Named counters (custom)
_NAMED = Counter()

SUBMISSIONS_TOTAL = PromCounter(
    "labledger_submissions_total",
    "Submissions by mode and outcome",
    ["mode", "outcome"],
)

DETAIL_ROWS_TOTAL = PromCounter(
    "labledger_detail_rows_total",
    "Detail rows appended, by child collection",
    ["collection"],
)


def reset_metrics() -> None:
    """
    Test helper: clears named counters to avoid cross-test leakage.
    Prometheus collectors are process-global and are not reset.
    """
    _NAMED.clear()


def inc_named(name: str, value: int = 1) -> None:
    if not name:
        return
    _NAMED[name] += int(value)


def record_submission(mode: str, outcome: str) -> None:
    SUBMISSIONS_TOTAL.labels(mode=mode or "unknown", outcome=outcome).inc()
    inc_named(f"submissions_{outcome}")


def snapshot_named() -> Dict[str, int]:
    return dict(_NAMED)
