"""
Mode and table-alias overrides.

Reads an optional YAML/JSON file and returns the overrides to merge onto the
built-in modes, so a sheet rename or a new prefix needs no code change.

Override file format (YAML or JSON):
    modes:
      ratio:
        prefix: UNILAG-CLR
        master_aliases: ["Research Master Sheet - Ratio", "Ratio Master"]
    tables:
      scm: ["Research SCMs", "SCM"]

Environment variable:
    LABLEDGER_MODES_FILE: path to the override file (optional).
"""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

_log = logging.getLogger("labledger.modes")

_MODE_KEYS = ("prefix", "label", "master_aliases", "spellings")


def _str_list(value: Any) -> Optional[list[str]]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return None
    out = [str(v).strip() for v in value if str(v).strip()]
    return out or None


def _parse_overrides(raw: Dict[str, Any]) -> Dict[str, Any]:
    raw_modes = raw.get("modes") if isinstance(raw.get("modes"), dict) else {}
    raw_tables = raw.get("tables") if isinstance(raw.get("tables"), dict) else {}

    modes: Dict[str, Dict[str, Any]] = {}
    for name, body in raw_modes.items():
        if not isinstance(body, dict):
            _log.warning("Skipping mode override %r: expected a mapping", name)
            continue
        entry: Dict[str, Any] = {}
        for key in _MODE_KEYS:
            if key not in body:
                continue
            if key in ("master_aliases", "spellings"):
                lst = _str_list(body[key])
                if lst is None:
                    _log.warning("Skipping %s.%s: expected a non-empty list", name, key)
                    continue
                entry[key] = lst
            else:
                entry[key] = str(body[key]).strip()
        if entry:
            modes[str(name).strip().lower()] = entry

    tables: Dict[str, list[str]] = {}
    for logical, aliases in raw_tables.items():
        lst = _str_list(aliases)
        if lst is None:
            _log.warning("Skipping table override %r: expected a non-empty list", logical)
            continue
        tables[str(logical).strip().lower()] = lst

    return {"modes": modes, "tables": tables}


def load_mode_overrides(path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load overrides from a YAML or JSON file.

    Returns an empty dict when the file is absent, unreadable, or malformed;
    the built-in modes apply unchanged in that case.
    """
    resolved = _resolve_path(path)
    if resolved is None or not resolved.exists():
        return {}

    try:
        raw_text = resolved.read_text(encoding="utf-8")
    except OSError as exc:
        _log.warning("Cannot read modes file %s: %s", resolved, exc)
        return {}

    try:
        data = json.loads(raw_text)
    except json.JSONDecodeError:
        try:
            data = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            _log.warning("Failed to parse modes file %s as JSON or YAML: %s", resolved, exc)
            return {}

    if not isinstance(data, dict):
        _log.warning("Modes file %s must be a mapping, got %s", resolved, type(data).__name__)
        return {}

    overrides = _parse_overrides(data)
    _log.info(
        "Loaded %d mode and %d table overrides from %s",
        len(overrides["modes"]),
        len(overrides["tables"]),
        resolved,
    )
    return overrides


def _resolve_path(path: Optional[Path]) -> Optional[Path]:
    if path is not None:
        return Path(path)
    env_path = os.getenv("LABLEDGER_MODES_FILE", "").strip()
    if env_path:
        return Path(env_path)
    return None
