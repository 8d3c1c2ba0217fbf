from fastapi import APIRouter
from fastapi.responses import Response
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest

from labledger.core.observability.metrics import snapshot_named

router = APIRouter()


@router.get("/api/v1/metrics/snapshot")
def metrics_snapshot():
    return {"counters": snapshot_named()}


@router.get("/metrics", include_in_schema=False)
def prometheus_metrics() -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
