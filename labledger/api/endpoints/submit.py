from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from labledger.api.deps import get_submission_service
from labledger.core.submission.models import SubmissionPayload
from labledger.core.submission.orchestrator import SubmissionService

router = APIRouter(tags=["submissions"])


class SubmitResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    ok: bool
    status: str
    record_id: str
    timestamp: str
    mode: str
    message: str
    failed_collections: List[str] = Field(default_factory=list)
    skipped_collections: List[str] = Field(default_factory=list)


class SubmitError(BaseModel):
    ok: bool = False
    error: str
    message: str


@router.post(
    "/submit",
    response_model=SubmitResponse,
    responses={400: {"model": SubmitError}, 500: {"model": SubmitError}, 502: {"model": SubmitError}, 503: {"model": SubmitError}},
)
def submit(
    payload: SubmissionPayload,
    service: SubmissionService = Depends(get_submission_service),
) -> Dict[str, Any]:
    """
    Persist one test request.

    Domain errors (LabLedgerError) propagate to the app-level handler, which
    shapes them as {ok: false, error, message}.
    """
    return service.submit(payload).to_dict()
