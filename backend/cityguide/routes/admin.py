"""
CityGuide Backend — Admin Routes
==================================

What:  Moderation of users, places, submissions and update requests, plus the
       dashboard counters. Every route depends on require_admin.

Route Inventory:
    GET    /api/admin/users
    PATCH  /api/admin/users/{user_id}                {isActive?, role?}
    DELETE /api/admin/users/{user_id}
    GET    /api/admin/submissions                    ?status
    PATCH  /api/admin/submissions/{submission_id}    {status, adminNotes}
    POST   /api/admin/submissions/reconcile
    GET    /api/admin/updates                        ?status
    PATCH  /api/admin/updates/{update_id}            {status, adminNotes}
    GET    /api/admin/places
    DELETE /api/admin/places/{place_id}
    GET    /api/admin/stats
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.dependencies import require_admin
from cityguide.models.submission import STATUS_APPROVED
from cityguide.models.user import User
from cityguide.schemas.admin import StatsResponse, UserAdminResponse, UserAdminUpdate
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.schemas.place import AdminPlaceResponse, OwnerSummary
from cityguide.schemas.place_update import AdminPlaceUpdateResponse, PlaceUpdateResponse
from cityguide.schemas.submission import (
    AdminSubmissionResponse,
    ModerationDecision,
    ReconcileResponse,
    SubmissionResponse,
)
from cityguide.services.admin_service import admin_service
from cityguide.services.place_service import place_service
from cityguide.services.submission_service import submission_service
from cityguide.services.update_service import update_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/admin",
    tags=["Admin"],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


def _summary(user: Optional[User]) -> Optional[OwnerSummary]:
    return OwnerSummary.model_validate(user) if user is not None else None


# ── Users ─────────────────────────────────────────────────────────────────


@router.get("/users", response_model=ApiResponse[List[UserAdminResponse]])
async def list_users(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[UserAdminResponse]]:
    users = await admin_service.list_users(db)
    return ApiResponse(data=[UserAdminResponse.model_validate(u) for u in users])


@router.patch(
    "/users/{user_id}",
    response_model=ApiResponse[UserAdminResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Ban/unban a user or change their role",
)
async def update_user(
    user_id: UUID,
    body: UserAdminUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[UserAdminResponse]:
    user = await admin_service.update_user(db, user_id, body.is_active, body.role, admin)
    return ApiResponse(
        message="User updated successfully",
        data=UserAdminResponse.model_validate(user),
    )


@router.delete(
    "/users/{user_id}",
    response_model=ApiResponse[None],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Delete a user with their submissions and favorites",
)
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await admin_service.delete_user(db, user_id, admin)
    return ApiResponse(message="User deleted successfully")


# ── Submissions ───────────────────────────────────────────────────────────


@router.get("/submissions", response_model=ApiResponse[List[AdminSubmissionResponse]])
async def list_submissions(
    status: Optional[str] = Query(default=None, description="pending, approved or rejected"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[AdminSubmissionResponse]]:
    submissions, submitters = await submission_service.list_all(db, status)
    items = []
    for submission in submissions:
        item = AdminSubmissionResponse.model_validate(submission)
        item.submitter = _summary(submitters.get(submission.submitted_by))
        items.append(item)
    return ApiResponse(data=items)


@router.post(
    "/submissions/reconcile",
    response_model=ApiResponse[ReconcileResponse],
    summary="Create places for approved submissions that have none",
)
async def reconcile_submissions(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ReconcileResponse]:
    place_ids = await submission_service.reconcile_approved(db)
    return ApiResponse(
        message=f"Materialized {len(place_ids)} approved submission(s)",
        data=ReconcileResponse(materialized=len(place_ids), place_ids=place_ids),
    )


@router.patch(
    "/submissions/{submission_id}",
    response_model=ApiResponse[SubmissionResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Approve or reject a submission",
)
async def review_submission(
    submission_id: UUID,
    body: ModerationDecision,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[SubmissionResponse]:
    outcome = await submission_service.review(
        db, submission_id, body.status, body.admin_notes, admin
    )
    if outcome.changed:
        message = f"Submission {body.status} successfully"
    elif outcome.applied:
        message = "Submission already approved; missing place was created"
    else:
        message = f"Submission already {body.status}"
    return ApiResponse(message=message, data=SubmissionResponse.model_validate(outcome.record))


# ── Update requests ───────────────────────────────────────────────────────


@router.get("/updates", response_model=ApiResponse[List[AdminPlaceUpdateResponse]])
async def list_updates(
    status: Optional[str] = Query(default=None, description="pending, approved or rejected"),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[AdminPlaceUpdateResponse]]:
    updates, submitters, existing_places = await update_service.list_all(db, status)
    items = []
    for update in updates:
        item = AdminPlaceUpdateResponse.model_validate(update)
        item.submitter = _summary(submitters.get(update.submitted_by))
        item.place_exists = update.place_id in existing_places
        items.append(item)
    return ApiResponse(data=items)


@router.patch(
    "/updates/{update_id}",
    response_model=ApiResponse[PlaceUpdateResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Approve or reject an update request; approval applies it",
)
async def review_update(
    update_id: UUID,
    body: ModerationDecision,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PlaceUpdateResponse]:
    outcome = await update_service.review(db, update_id, body.status, body.admin_notes, admin)
    if not outcome.changed:
        message = f"Update request already {body.status}"
    elif body.status == STATUS_APPROVED and not outcome.applied:
        message = "Update request approved, but the place no longer exists; no changes were applied"
    else:
        message = f"Update request {body.status} successfully"
    return ApiResponse(message=message, data=PlaceUpdateResponse.model_validate(outcome.record))


# ── Places ────────────────────────────────────────────────────────────────


@router.get("/places", response_model=ApiResponse[List[AdminPlaceResponse]])
async def list_places(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[AdminPlaceResponse]]:
    places, owners = await place_service.list_all_places(db)
    items = []
    for place in places:
        item = AdminPlaceResponse.model_validate(place)
        item.owner = _summary(owners.get(place.owner_id))
        items.append(item)
    return ApiResponse(data=items)


@router.delete(
    "/places/{place_id}",
    response_model=ApiResponse[None],
    responses={404: {"model": ErrorResponse}},
    summary="Delete any place with its reviews and favorites",
)
async def delete_place(
    place_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await place_service.delete_place(db, place_id, admin)
    return ApiResponse(message="Place deleted successfully")


# ── Dashboard ─────────────────────────────────────────────────────────────


@router.get("/stats", response_model=ApiResponse[StatsResponse])
async def stats(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[StatsResponse]:
    return ApiResponse(data=await admin_service.get_stats(db))
