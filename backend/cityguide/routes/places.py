"""
CityGuide Backend — Place and Review Routes
=============================================

What:  Browsing (list, search, detail, cities) and the review endpoints.
Who:   Any authenticated user; replying additionally requires owning the place.

Route Inventory:
    GET  /api/cities
    GET  /api/places                              ?city&page&limit&sort
    GET  /api/places/search                       ?keyword&city&minRating&page&limit&sort
    GET  /api/places/{place_id}
    POST /api/places/{place_id}/reviews           {rating, comment}
    GET  /api/places/{place_id}/reviews
    POST /api/places/{place_id}/reviews/{review_id}/reply   {reply}

/places/search is registered before /places/{place_id} so "search" is not
parsed as an id.
"""

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import get_db_session
from cityguide.dependencies import get_current_user
from cityguide.models.user import User
from cityguide.schemas.common import ApiResponse, ErrorResponse
from cityguide.schemas.place import (
    PlaceResponse,
    ReplyCreate,
    ReviewCreate,
    ReviewResponse,
    ReviewsResponse,
)
from cityguide.services.place_service import DEFAULT_SORT, place_service
from cityguide.services.review_service import review_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Places"])

AUTH_ERRORS = {401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}}


@router.get(
    "/cities",
    response_model=ApiResponse[List[str]],
    responses=AUTH_ERRORS,
    summary="Distinct cities that have places, sorted",
)
async def list_cities(
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[str]]:
    return ApiResponse(data=await place_service.list_cities(db))


@router.get(
    "/places",
    response_model=ApiResponse[List[PlaceResponse]],
    responses={400: {"model": ErrorResponse}, **AUTH_ERRORS},
    summary="Paginated place list, optionally filtered by city",
)
async def list_places(
    city: Optional[str] = Query(default=None, description="Exact city name"),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: str = Query(
        default=DEFAULT_SORT,
        description="Descending sort key: rating, averageRating, totalReviews, createdAt, name",
    ),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[PlaceResponse]]:
    places, pagination = await place_service.search_places(
        db, city=city, page=page, limit=limit, sort=sort
    )
    return ApiResponse(
        data=[PlaceResponse.model_validate(p) for p in places],
        pagination=pagination,
    )


@router.get(
    "/places/search",
    response_model=ApiResponse[List[PlaceResponse]],
    responses={400: {"model": ErrorResponse}, **AUTH_ERRORS},
    summary="Case-insensitive keyword search over name, category and description",
)
async def search_places(
    keyword: Optional[str] = Query(default=None),
    city: Optional[str] = Query(default=None),
    min_rating: Optional[float] = Query(default=None, alias="minRating", ge=0, le=5),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort: str = Query(default=DEFAULT_SORT),
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[List[PlaceResponse]]:
    places, pagination = await place_service.search_places(
        db,
        keyword=keyword,
        city=city,
        min_rating=min_rating,
        page=page,
        limit=limit,
        sort=sort,
    )
    return ApiResponse(
        data=[PlaceResponse.model_validate(p) for p in places],
        pagination=pagination,
    )


@router.get(
    "/places/{place_id}",
    response_model=ApiResponse[PlaceResponse],
    responses={404: {"model": ErrorResponse}, **AUTH_ERRORS},
    summary="Single place with its reviews",
)
async def get_place(
    place_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PlaceResponse]:
    place = await place_service.get_place(db, place_id)
    return ApiResponse(data=PlaceResponse.model_validate(place))


@router.post(
    "/places/{place_id}/reviews",
    response_model=ApiResponse[PlaceResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **AUTH_ERRORS},
    summary="Add the caller's review and return the updated place",
)
async def add_review(
    place_id: UUID,
    body: ReviewCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PlaceResponse]:
    place = await review_service.add_review(db, place_id, user, body.rating, body.comment)
    return ApiResponse(
        message="Review added successfully",
        data=PlaceResponse.model_validate(place),
    )


@router.get(
    "/places/{place_id}/reviews",
    response_model=ApiResponse[ReviewsResponse],
    responses={404: {"model": ErrorResponse}, **AUTH_ERRORS},
    summary="Reviews of a place with its rating statistics",
)
async def get_reviews(
    place_id: UUID,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[ReviewsResponse]:
    place = await review_service.get_place_reviews(db, place_id)
    return ApiResponse(
        data=ReviewsResponse(
            reviews=[ReviewResponse.model_validate(r) for r in place.reviews],
            total_reviews=place.total_reviews,
            average_rating=place.average_rating,
        )
    )


@router.post(
    "/places/{place_id}/reviews/{review_id}/reply",
    response_model=ApiResponse[PlaceResponse],
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}, **AUTH_ERRORS},
    summary="Set or replace the owner's reply to a review",
)
async def reply_to_review(
    place_id: UUID,
    review_id: UUID,
    body: ReplyCreate,
    user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> ApiResponse[PlaceResponse]:
    place = await review_service.reply_to_review(db, place_id, review_id, user, body.reply)
    return ApiResponse(
        message="Reply added successfully",
        data=PlaceResponse.model_validate(place),
    )
