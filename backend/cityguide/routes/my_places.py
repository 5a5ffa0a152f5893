"""
CityGuide Backend — Owner Routes
==================================

What:  Endpoints for users who own places (approved submitters).

Route Inventory:
    GET    /api/my-places              places the caller owns
    PATCH  /api/my-places/{place_id}   file an update request (applied only after approval)
    DELETE /api/my-places/{place_id}   delete the place with its reviews and favorites
    GET    /api/my-updates             caller's update requests, newest first

DELETE allows admins as well as the owner; PATCH is owner-only.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.dependencies import get_current_user
from cityguide.models.user import User
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.schemas.place import PlaceResponse
from cityguide.schemas.place_update import PlaceUpdateCreate, PlaceUpdateResponse
from cityguide.services.place_service import place_service
from cityguide.services.update_service import update_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["My Places"])

OWNER_ERRORS = {403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}}


@router.get(
    "/my-places",
    response_model=ApiResponse[List[PlaceResponse]],
    summary="Places owned by the caller, newest first",
)
async def my_places(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[PlaceResponse]]:
    places = await place_service.list_owned_places(db, user.id)
    return ApiResponse(data=[PlaceResponse.model_validate(p) for p in places])


@router.patch(
    "/my-places/{place_id}",
    response_model=ApiResponse[PlaceUpdateResponse],
    responses=OWNER_ERRORS,
    summary="Request a change to an owned place",
)
async def propose_update(
    place_id: UUID,
    body: PlaceUpdateCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PlaceUpdateResponse]:
    proposed = body.model_dump(by_alias=True)
    update = await update_service.propose_update(db, place_id, proposed, user)
    return ApiResponse(
        message="Update request submitted for admin approval",
        data=PlaceUpdateResponse.model_validate(update),
    )


@router.delete(
    "/my-places/{place_id}",
    response_model=ApiResponse[None],
    responses=OWNER_ERRORS,
    summary="Delete an owned place",
)
async def delete_my_place(
    place_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await place_service.delete_place(db, place_id, user)
    return ApiResponse(message="Place deleted successfully")


@router.get(
    "/my-updates",
    response_model=ApiResponse[List[PlaceUpdateResponse]],
    summary="Update requests filed by the caller",
)
async def my_updates(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[PlaceUpdateResponse]]:
    updates = await update_service.list_mine(db, user.id)
    return ApiResponse(data=[PlaceUpdateResponse.model_validate(u) for u in updates])
