"""
CityGuide Backend — Place Submission Routes
=============================================

What:  Users propose new places and follow their moderation status.

Route Inventory:
    POST /api/submissions           create a pending submission
    GET  /api/submissions/my        caller's submissions, newest first
    GET  /api/submissions/cities    cities offered on the submission form
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.dependencies import get_current_user
from cityguide.models.user import User
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.schemas.submission import SubmissionCreate, SubmissionResponse
from cityguide.services.submission_service import submission_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/submissions", tags=["Submissions"])


@router.post(
    "",
    response_model=ApiResponse[SubmissionResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
    summary="Propose a new place for admin approval",
)
async def create_submission(
    body: SubmissionCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[SubmissionResponse]:
    submission = await submission_service.submit(db, body.model_dump(), user.id)
    return ApiResponse(
        message="Place submitted successfully. Awaiting admin approval.",
        data=SubmissionResponse.model_validate(submission),
    )


@router.get(
    "/my",
    response_model=ApiResponse[List[SubmissionResponse]],
    summary="The caller's submissions",
)
async def my_submissions(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[SubmissionResponse]]:
    submissions = await submission_service.list_mine(db, user.id)
    return ApiResponse(data=[SubmissionResponse.model_validate(s) for s in submissions])


@router.get(
    "/cities",
    response_model=ApiResponse[List[str]],
    summary="Cities that can be chosen when submitting a place",
)
async def submission_cities(user: User = Depends(get_current_user)) -> ApiResponse[List[str]]:
    return ApiResponse(data=submission_service.submission_cities())
