from __future__ import annotations

import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from labledger import __version__
from labledger.api.endpoints import health
from labledger.api.endpoints import metrics as metrics_ep
from labledger.api.endpoints import submit
from labledger.api.middleware.error_shaping import SafeErrorMiddleware, labledger_error_handler
from labledger.api.middleware.request_context import RequestContextMiddleware
from labledger.core.errors import LabLedgerError

app = FastAPI(
    title="LabLedger Submission API",
    version=__version__,
)

# ------------------------------------------------------------
# Middleware stack (ORDER MATTERS)
# Note: Starlette reverses add_middleware order; the LAST call = OUTERMOST wrapper.
# Desired runtime order (outermost → innermost):
#   SafeErrorMiddleware → CORSMiddleware → RequestContext → handler
# ------------------------------------------------------------

app.add_middleware(RequestContextMiddleware)

# The submission form posts from a browser, possibly from another origin
_cors_origins_raw = os.getenv("LABLEDGER_CORS_ORIGINS", "").strip()
_cors_origins = [o.strip() for o in _cors_origins_raw.split(",") if o.strip()] if _cors_origins_raw else ["*"]
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=_cors_origins != ["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
)

app.add_middleware(SafeErrorMiddleware)

app.add_exception_handler(LabLedgerError, labledger_error_handler)


# ------------------------------------------------------------
# /api/submit is what deployed forms call; /api/v1 is the versioned alias
# ------------------------------------------------------------
for prefix in ("/api", "/api/v1"):
    app.include_router(submit.router, prefix=prefix)

app.include_router(health.router)
app.include_router(metrics_ep.router)

