from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional

from .builtins import builtin_detail_tables, builtin_modes
from .loader import load_mode_overrides
from .models import ModeConfig, TableSpec


class ModeRegistry:
    """Measurement modes and the detail tables they share.

    Resolution order:
      1) Built-in modes and detail tables (always present)
      2) Optional overrides file (prefixes, labels, aliases)
    """

    def __init__(self, overrides_path: Optional[Path] = None):
        self._modes: Dict[str, ModeConfig] = {m.name: m for m in builtin_modes()}
        self._details: List[TableSpec] = builtin_detail_tables()
        if overrides_path is not None:
            self._apply(load_mode_overrides(overrides_path))

    def _apply(self, overrides: Dict) -> None:
        for name, body in (overrides.get("modes") or {}).items():
            mode = self._modes.get(name)
            if mode is None:
                continue
            update = {k: v for k, v in body.items() if k in ("prefix", "label", "spellings")}
            if "master_aliases" in body:
                update["master"] = mode.master.model_copy(update={"aliases": body["master_aliases"]})
            self._modes[name] = mode.model_copy(update=update)

        tables = overrides.get("tables") or {}
        self._details = [
            spec.model_copy(update={"aliases": tables[spec.logical.value]}) if spec.logical.value in tables else spec
            for spec in self._details
        ]

    def list_names(self) -> list[str]:
        return sorted(self._modes.keys())

    def get(self, name: str) -> Optional[ModeConfig]:
        return self._modes.get(name)

    def normalize(self, raw: Optional[str]) -> Optional[ModeConfig]:
        """Map a client-supplied mode selector ('ratio', 'kg', 'Kg/m3', ...) to its config."""
        for mode in self._modes.values():
            if mode.accepts(raw or ""):
                return mode
        return None

    def detail_tables(self) -> List[TableSpec]:
        return list(self._details)
