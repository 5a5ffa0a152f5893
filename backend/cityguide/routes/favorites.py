"""
CityGuide Backend — Favorites Routes
======================================

What:  GET/POST /api/favorites and DELETE /api/favorites/{favorite_id}.
Who:   Any authenticated user, always scoped to their own favorites.
"""

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.dependencies import get_current_user
from cityguide.models.user import User
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.schemas.favorite import FavoriteCreate, FavoritePlaceItem, FavoriteResponse
from cityguide.services.favorite_service import favorite_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/favorites", tags=["Favorites"])


@router.get(
    "",
    response_model=ApiResponse[List[FavoritePlaceItem]],
    summary="The caller's favorites with place details, newest first",
)
async def list_favorites(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[FavoritePlaceItem]]:
    favorites = await favorite_service.list_favorites(db, user.id)
    items = [
        FavoritePlaceItem(
            favorite_id=fav.id,
            id=fav.place.id,
            name=fav.place.name,
            category=fav.place.category,
            city=fav.place.city,
            rating=fav.place.rating,
            average_rating=fav.place.average_rating,
            total_reviews=fav.place.total_reviews,
            description=fav.place.description,
            image=fav.place.image,
            address=fav.place.address,
            created_at=fav.created_at,
        )
        for fav in favorites
    ]
    return ApiResponse(data=items)


@router.post(
    "",
    response_model=ApiResponse[FavoriteResponse],
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Add a place to the caller's favorites",
)
async def add_favorite(
    body: FavoriteCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[FavoriteResponse]:
    favorite = await favorite_service.add_favorite(db, user.id, body.place_id)
    return ApiResponse(
        message="Added to favorites",
        data=FavoriteResponse.model_validate(favorite),
    )


@router.delete(
    "/{favorite_id}",
    response_model=ApiResponse[None],
    responses={404: {"model": ErrorResponse}},
    summary="Remove one of the caller's favorites",
)
async def remove_favorite(
    favorite_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[None]:
    await favorite_service.remove_favorite(db, user.id, favorite_id)
    return ApiResponse(message="Removed from favorites")
