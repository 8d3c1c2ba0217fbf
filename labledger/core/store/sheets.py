"""
Google Sheets backing store (Sheets API v4 over HTTPS).

Authentication uses a service account: a short-lived RS256 assertion is signed
with the account's private key and exchanged for an OAuth access token, which
is cached until shortly before it expires.

Env (see labledger.core.config.Settings):
  LABLEDGER_SHEET_ID
  LABLEDGER_SA_EMAIL
  LABLEDGER_SA_PRIVATE_KEY
"""
from __future__ import annotations

import logging
import threading
import time
from typing import Any, Dict, List, Optional
from urllib.parse import quote

import jwt
import requests

from labledger.core.errors import ConfigurationError, StoreError

from .base import Row, TableStore, is_blank_row

_log = logging.getLogger("labledger.store")

SHEETS_API = "https://sheets.googleapis.com/v4/spreadsheets"
TOKEN_URI = "https://oauth2.googleapis.com/token"
SCOPE = "https://www.googleapis.com/auth/spreadsheets"

_TOKEN_LIFETIME_S = 3600
_TOKEN_REFRESH_MARGIN_S = 60


class ServiceAccountCredentials:
    def __init__(
        self,
        *,
        email: str,
        private_key: str,
        token_uri: str = TOKEN_URI,
        timeout: float = 20.0,
    ):
        if not email or not private_key:
            raise ConfigurationError("Service account email and private key are required")
        self.email = email
        self._private_key = private_key
        self.token_uri = token_uri
        self.timeout = timeout

        self._lock = threading.Lock()
        self._token: Optional[str] = None
        self._expires_at = 0.0

    def _assertion(self, now: int) -> str:
        claims = {
            "iss": self.email,
            "scope": SCOPE,
            "aud": self.token_uri,
            "iat": now,
            "exp": now + _TOKEN_LIFETIME_S,
        }
        try:
            return jwt.encode(claims, self._private_key, algorithm="RS256")
        except (ValueError, TypeError, jwt.PyJWTError) as e:
            raise ConfigurationError(f"Invalid service account private key: {type(e).__name__}") from e

    def token(self, session: requests.Session) -> str:
        with self._lock:
            if self._token and time.time() < self._expires_at - _TOKEN_REFRESH_MARGIN_S:
                return self._token

            now = int(time.time())
            try:
                resp = session.post(
                    self.token_uri,
                    data={
                        "grant_type": "urn:ietf:params:oauth:grant-type:jwt-bearer",
                        "assertion": self._assertion(now),
                    },
                    timeout=self.timeout,
                )
            except requests.RequestException as e:
                raise StoreError(f"Token request failed: {type(e).__name__}") from e

            if resp.status_code >= 400:
                raise StoreError(f"Token request rejected: HTTP {resp.status_code}")

            try:
                body = resp.json()
                self._token = str(body["access_token"])
                self._expires_at = now + float(body.get("expires_in", _TOKEN_LIFETIME_S))
            except (ValueError, TypeError, KeyError, AttributeError) as e:
                self._token = None
                raise StoreError(f"Malformed token response: {type(e).__name__}") from e
            _log.info("sheets token refreshed sa=%s", self.email)
            return self._token


def a1_range(title: str, cells: str) -> str:
    return "'" + title.replace("'", "''") + "'!" + cells


class GoogleSheetsTableStore(TableStore):
    """One spreadsheet; each worksheet (tab) is a table."""

    name = "sheets"

    def __init__(
        self,
        *,
        sheet_id: str,
        credentials: ServiceAccountCredentials,
        session: Optional[requests.Session] = None,
        timeout: float = 20.0,
    ):
        if not sheet_id:
            raise ConfigurationError("Missing spreadsheet id")
        self.sheet_id = sheet_id
        self.credentials = credentials
        self.session = session or requests.Session()
        self.timeout = timeout

    def _call(self, method: str, path: str, *, params: Optional[Dict[str, Any]] = None, json: Any = None) -> Dict[str, Any]:
        url = f"{SHEETS_API}/{self.sheet_id}{path}"
        headers = {"Authorization": f"Bearer {self.credentials.token(self.session)}"}
        try:
            resp = self.session.request(
                method,
                url,
                params=params,
                json=json,
                headers=headers,
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise StoreError(f"Sheets {method} {path} failed: {type(e).__name__}: {e}") from e

        if resp.status_code >= 400:
            raise StoreError(f"Sheets {method} {path} rejected: HTTP {resp.status_code} {resp.text[:200]}")
        if not resp.content:
            return {}
        try:
            body = resp.json()
        except ValueError as e:
            raise StoreError(f"Sheets {method} {path} returned a non-JSON body: {resp.text[:200]}") from e
        if not isinstance(body, dict):
            raise StoreError(f"Sheets {method} {path} returned {type(body).__name__}, expected an object")
        return body

    def _values_path(self, rng: str, suffix: str = "") -> str:
        return f"/values/{quote(rng, safe='')}{suffix}"

    def list_tables(self) -> List[str]:
        meta = self._call("GET", "", params={"fields": "sheets.properties.title"})
        out = []
        for s in meta.get("sheets", []) or []:
            title = (s.get("properties") or {}).get("title")
            if title:
                out.append(title)
        return out

    def read_column(self, table: str, column: str = "A") -> List[Any]:
        col = (column or "A").strip().upper()
        res = self._call("GET", self._values_path(a1_range(table, f"{col}:{col}")))
        # ROWS major: an empty row in the middle comes back as []
        return [r[0] if r else "" for r in res.get("values", []) or []]

    def append_rows(self, table: str, rows: List[Row]) -> None:
        if not rows:
            return
        self._call(
            "POST",
            self._values_path(a1_range(table, "A:A"), ":append"),
            params={"valueInputOption": "RAW", "insertDataOption": "INSERT_ROWS"},
            json={"values": rows},
        )
        _log.debug("sheets append table=%s rows=%d", table, len(rows))

    def _write_header(self, table: str, header: Row) -> None:
        self._call(
            "PUT",
            self._values_path(a1_range(table, "A1")),
            params={"valueInputOption": "RAW"},
            json={"values": [header]},
        )

    def ensure_table(self, table: str, header: Optional[Row] = None) -> bool:
        if table in self.list_tables():
            return False
        try:
            res = self._call(
                "POST",
                ":batchUpdate",
                json={"requests": [{"addSheet": {"properties": {"title": table}}}]},
            )
        except StoreError:
            # another writer may have created it between list and addSheet
            if table in self.list_tables():
                _log.info("sheets table created concurrently table=%s", table)
                return False
            raise
        replies = res.get("replies") or [{}]
        if "addSheet" not in (replies[0] or {}):
            raise StoreError(f"Failed to create sheet: {table}")
        if header:
            self._write_header(table, header)
        _log.info("sheets created table=%s", table)
        return True

    def ensure_header(self, table: str, header: Row) -> bool:
        res = self._call("GET", self._values_path(a1_range(table, "A1:Z1")))
        values = res.get("values") or []
        if values and not is_blank_row(values[0]):
            return False
        self._write_header(table, header)
        return True
