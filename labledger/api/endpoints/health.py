from __future__ import annotations

from fastapi import APIRouter
from starlette.responses import JSONResponse

from labledger.api.deps import get_store
from labledger.core.errors import ConfigurationError
from labledger.core.observability.metrics import inc_named

router = APIRouter()


def _readiness():
    inc_named("health_ready")
    problems: list[str] = []

    # Store construction validates configuration only; it does not call the backing store
    try:
        store = get_store()
    except ConfigurationError as e:
        problems.append(f"config:{e}")
        store = None

    if problems:
        return JSONResponse(
            status_code=503,
            content={"status": "not_ready", "problems": problems},
        )
    return {"status": "ready", "store": store.name}


# ------------------------------------------------------------
# Unversioned health
# ------------------------------------------------------------
@router.get("/health/live")
async def live():
    inc_named("health_live")
    return {"status": "ok"}


@router.get("/health/ready")
def ready():
    return _readiness()


# ------------------------------------------------------------
# Versioned health
# ------------------------------------------------------------
@router.get("/api/v1/health/live")
def liveness():
    inc_named("health_live")
    return {"status": "alive"}


@router.get("/api/v1/health/ready")
def readiness():
    return _readiness()
