"""Schemas for /api/favorites."""

import uuid
from datetime import datetime
from typing import Optional

from cityguide.schemas.common import CamelModel


class FavoriteCreate(CamelModel):
    place_id: uuid.UUID


class FavoriteResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    place_id: uuid.UUID
    created_at: datetime


class FavoritePlaceItem(CamelModel):
    """
    One row of the favorites list: the place's card fields plus the favorite id.

    `id` is the place id; `favorite_id` is what DELETE /api/favorites/{id} takes.
    `created_at` is when the place was favorited.
    """

    favorite_id: uuid.UUID
    id: uuid.UUID
    name: str
    category: str
    city: str
    rating: float
    average_rating: float
    total_reviews: int
    description: str
    image: str
    address: Optional[str] = None
    created_at: datetime
