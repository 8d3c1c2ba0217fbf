from __future__ import annotations

from pathlib import Path
from typing import Callable, Dict

from labledger.core.config import Settings
from labledger.core.errors import ConfigurationError

from .base import TableStore
from .jsonfile import JsonFileTableStore
from .memory import MemoryTableStore
from .sheets import GoogleSheetsTableStore, ServiceAccountCredentials


def _memory(settings: Settings) -> TableStore:
    return MemoryTableStore()


def _jsonfile(settings: Settings) -> TableStore:
    if settings.data_dir is None:
        raise ConfigurationError("Missing env vars: LABLEDGER_DATA_DIR")
    return JsonFileTableStore(data_dir=Path(settings.data_dir))


def _sheets(settings: Settings) -> TableStore:
    settings.require_sheets()
    creds = ServiceAccountCredentials(
        email=settings.sa_email,
        private_key=settings.sa_private_key,
        timeout=settings.request_timeout,
    )
    return GoogleSheetsTableStore(
        sheet_id=settings.sheet_id,
        credentials=creds,
        timeout=settings.request_timeout,
    )


STORES: Dict[str, Callable[[Settings], TableStore]] = {
    "memory": _memory,
    "jsonfile": _jsonfile,
    "sheets": _sheets,
}


def build_store(settings: Settings) -> TableStore:
    factory = STORES.get(settings.store)
    if factory is None:
        raise ConfigurationError(
            f"Unsupported store: {settings.store!r} (expected one of {', '.join(sorted(STORES))})"
        )
    return factory(settings)


__all__ = [
    "STORES",
    "GoogleSheetsTableStore",
    "JsonFileTableStore",
    "MemoryTableStore",
    "TableStore",
    "build_store",
]
