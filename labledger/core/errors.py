from __future__ import annotations

from typing import Any, Dict, List, Optional


class LabLedgerError(Exception):
    code = "labledger_error"
    http_status = 500

    def to_dict(self) -> Dict[str, Any]:
        return {"ok": False, "error": self.code, "message": str(self)}


class ConfigurationError(LabLedgerError):
    """Connection or target information is missing. Nothing was read or written."""

    code = "configuration_error"
    http_status = 500


class ValidationError(LabLedgerError):
    """Payload rejected before allocation; no identifier consumed."""

    code = "validation_error"
    http_status = 400

    def __init__(self, message: str, *, fields: Optional[List[str]] = None):
        super().__init__(message)
        self.fields = list(fields or [])

    def to_dict(self) -> Dict[str, Any]:
        out = super().to_dict()
        if self.fields:
            out["fields"] = self.fields
        return out


class TableResolutionError(LabLedgerError):
    """The master table resolved to no concrete table."""

    code = "table_resolution_error"
    http_status = 503

    def __init__(self, logical: str, aliases: List[str]):
        super().__init__(f"No table found for {logical} (tried: {', '.join(aliases)})")
        self.logical = logical
        self.aliases = list(aliases)


class AppendFailure(LabLedgerError):
    """The store rejected the master-row append. The computed identifier was never recorded."""

    code = "append_failure"
    http_status = 502

    def __init__(self, table: str, reason: str):
        super().__init__(f"Append to {table!r} failed: {reason}")
        self.table = table
        self.reason = reason


class StoreError(LabLedgerError):
    """Raised by store adapters for any failed call to the backing store."""

    code = "store_error"
    http_status = 502
