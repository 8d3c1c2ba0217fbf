from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from labledger.core.errors import ConfigurationError

_TRUTHY = ("1", "true", "yes")


def _env(*names: str) -> str:
    for n in names:
        v = (os.getenv(n) or "").strip()
        if v:
            return v
    return ""


def _flag(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in _TRUTHY


@dataclass(frozen=True)
class Settings:
    store: str = "sheets"
    data_dir: Optional[Path] = None

    sheet_id: str = ""
    sa_email: str = ""
    sa_private_key: str = ""
    request_timeout: float = 20.0

    ensure_tables: bool = False
    detail_workers: int = 4
    modes_file: Optional[Path] = None

    @classmethod
    def from_env(cls) -> "Settings":
        # GOOGLE_PRIVATE_KEY is usually pasted with literal "\n" sequences
        key = _env("LABLEDGER_SA_PRIVATE_KEY", "GOOGLE_PRIVATE_KEY").replace("\\n", "\n")
        data_dir = _env("LABLEDGER_DATA_DIR")
        modes_file = _env("LABLEDGER_MODES_FILE")

        try:
            workers = int(_env("LABLEDGER_DETAIL_WORKERS") or "4")
            timeout = float(_env("LABLEDGER_REQUEST_TIMEOUT") or "20")
        except ValueError as e:
            raise ConfigurationError(f"Invalid numeric setting: {e}") from e

        return cls(
            store=(_env("LABLEDGER_STORE") or "sheets").lower(),
            data_dir=Path(data_dir) if data_dir else None,
            sheet_id=_env("LABLEDGER_SHEET_ID", "SHEET_ID"),
            sa_email=_env("LABLEDGER_SA_EMAIL", "GOOGLE_SERVICE_ACCOUNT_EMAIL"),
            sa_private_key=key,
            request_timeout=max(1.0, timeout),
            ensure_tables=_flag("LABLEDGER_ENSURE_TABLES"),
            detail_workers=max(1, workers),
            modes_file=Path(modes_file) if modes_file else None,
        )

    def require_sheets(self) -> None:
        missing = [
            name
            for name, val in (
                ("LABLEDGER_SHEET_ID", self.sheet_id),
                ("LABLEDGER_SA_EMAIL", self.sa_email),
                ("LABLEDGER_SA_PRIVATE_KEY", self.sa_private_key),
            )
            if not val
        ]
        if missing:
            raise ConfigurationError(f"Missing env vars: {', '.join(missing)}")
