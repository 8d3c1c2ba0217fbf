from __future__ import annotations

import logging
import traceback
from typing import Callable

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse, Response

from labledger.core.errors import LabLedgerError

log = logging.getLogger("labledger.errors")


def _request_id(request: Request):
    return getattr(request.state, "request_id", None) or request.headers.get("x-request-id")


async def labledger_error_handler(request: Request, exc: LabLedgerError) -> JSONResponse:
    """Domain errors: stable code + message, never a traceback."""
    payload = exc.to_dict()
    rid = _request_id(request)
    if rid:
        payload["request_id"] = rid
    log.warning("%s rid=%s path=%s: %s", exc.code, rid, request.url.path, exc)
    return JSONResponse(status_code=exc.http_status, content=payload)


class SafeErrorMiddleware(BaseHTTPMiddleware):
    """
    - Never return stack traces to clients
    - Preserve request_id if present
    - Log traceback server-side
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as e:
            rid = _request_id(request)
            log.error(
                "Unhandled error: %s rid=%s path=%s\n%s",
                str(e),
                rid,
                request.url.path,
                traceback.format_exc(),
            )
            payload = {"ok": False, "error": "internal_error", "message": "Server error"}
            if rid:
                payload["request_id"] = rid
            return JSONResponse(status_code=500, content=payload)
