"""Resource submissions router -- intake and admin review."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, status

from civichub.auth import Role, User, require_role
from civichub.moderation.models import Submission
from civichub.platform import Platform
from web.backend.app.middleware.auth import get_current_user, get_platform
from web.backend.app.models.api import (
    ApiResponse,
    ApprovalData,
    ApproveSubmissionRequest,
    RejectSubmissionRequest,
    ResourceFields,
    SubmissionResponse,
)

router = APIRouter(prefix="/api", tags=["submissions"])


def _submission_response(s: Submission) -> SubmissionResponse:
    return SubmissionResponse(
        id=s.id,
        draft=ResourceFields(**s.draft.to_dict()),
        submitted_by=s.submitted_by,
        status=s.status.value,
        created_at=s.created_at,
        processed_by=s.processed_by,
        processed_at=s.processed_at,
        resource_id=s.resource_id,
        rejection_reason=s.rejection_reason,
        admin_notes=s.admin_notes,
    )


@router.post(
    "/resources/submit",
    response_model=ApiResponse[SubmissionResponse],
    status_code=status.HTTP_201_CREATED,
    summary="Submit a resource for review",
)
async def submit_resource(
    body: ResourceFields,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    submission = platform.workflow.submit(user, body.model_dump())
    return ApiResponse(
        data=_submission_response(submission),
        message="Resource submitted successfully! It will be reviewed by our admins.",
    )


@router.get(
    "/admin/resource-submissions",
    response_model=ApiResponse[list[SubmissionResponse]],
    summary="List resource submissions",
)
async def list_submissions(
    status_filter: Optional[str] = Query("pending", alias="status"),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    """Return submissions newest first; ``status=all`` lists every status."""
    require_role(user, [Role.admin])
    wanted = None if status_filter in (None, "", "all") else status_filter
    return ApiResponse(
        data=[_submission_response(s) for s in platform.workflow.list_submissions(wanted)]
    )


@router.get(
    "/admin/resource-submissions/{submission_id}",
    response_model=ApiResponse[SubmissionResponse],
    summary="Get a resource submission",
)
async def get_submission(
    submission_id: str,
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, [Role.admin])
    return ApiResponse(data=_submission_response(platform.workflow.get(submission_id)))


@router.patch(
    "/admin/resource-submissions/{submission_id}/approve",
    response_model=ApiResponse[ApprovalData],
    summary="Approve and publish a submission",
)
async def approve_submission(
    submission_id: str,
    body: Optional[ApproveSubmissionRequest] = Body(None),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, [Role.admin])
    body = body or ApproveSubmissionRequest()
    result = platform.workflow.approve(
        submission_id,
        user,
        featured=body.featured,
        admin_notes=body.admin_notes,
    )
    return ApiResponse(
        data=ApprovalData(resource_id=result.resource_id),
        message="Resource approved and published successfully",
    )


@router.patch(
    "/admin/resource-submissions/{submission_id}/reject",
    response_model=ApiResponse,
    summary="Reject a submission",
)
async def reject_submission(
    submission_id: str,
    body: Optional[RejectSubmissionRequest] = Body(None),
    user: User = Depends(get_current_user),
    platform: Platform = Depends(get_platform),
):
    require_role(user, [Role.admin])
    platform.workflow.reject(submission_id, user, reason=(body.reason if body else None))
    return ApiResponse(message="Submission rejected successfully")
