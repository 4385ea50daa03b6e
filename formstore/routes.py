"""
HTTP routes for saving, listing and exporting submissions.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Response

from formstore.dependencies import get_gateway
from formstore.errors import (
    DuplicateSubmission,
    InvalidSubmission,
    PermissionDenied,
    SubmissionError,
)
from formstore.gateway import NOTHING_TO_EXPORT, SubmissionGateway
from formstore.schemas import Submission, SubmissionListResponse

logger = logging.getLogger(__name__)

router = APIRouter()


def _http_error(exc: SubmissionError) -> HTTPException:
    if isinstance(exc, PermissionDenied):
        status_code = 403
    elif isinstance(exc, DuplicateSubmission):
        status_code = 409
    elif isinstance(exc, InvalidSubmission):
        status_code = 422
    else:
        status_code = 502
    return HTTPException(status_code=status_code, detail=exc.message)


@router.post("/submissions", response_model=Submission, status_code=201)
def create_submission(
    payload: dict[str, Any] = Body(...),
    gateway: SubmissionGateway = Depends(get_gateway),
):
    try:
        return gateway.save(payload)
    except SubmissionError as exc:
        raise _http_error(exc) from exc


@router.get("/submissions", response_model=SubmissionListResponse)
def list_submissions(gateway: SubmissionGateway = Depends(get_gateway)):
    try:
        submissions = gateway.fetch_all()
    except SubmissionError as exc:
        raise _http_error(exc) from exc
    return SubmissionListResponse(submissions=submissions)


@router.get("/submissions/export")
def export_submissions(gateway: SubmissionGateway = Depends(get_gateway)):
    """
    Download every submission as ``form_submissions_<date>.json``.
    """
    try:
        submissions = gateway.fetch_all()
    except SubmissionError as exc:
        raise _http_error(exc) from exc
    if not submissions:
        raise HTTPException(status_code=404, detail=NOTHING_TO_EXPORT)

    export = gateway.render_export(submissions)
    logger.info("Serving export %s (%d rows)", export.filename, len(submissions))
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={
            "Content-Disposition": f'attachment; filename="{export.filename}"'
        },
    )
