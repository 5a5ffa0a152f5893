"""
CityGuide Backend — Place and Review Schemas
==============================================

What:  Wire representations of a Place aggregate, its reviews and the review
       request bodies.
Who:   /api/places routes, /api/my-places, /api/admin/places.

Review request bodies are deliberately loose (rating is any int, comment any
string). Range and emptiness rules live in services.review_service so they
hold for every caller, not only HTTP.
"""

import uuid
from datetime import datetime
from typing import Any, List, Optional

from pydantic import Field

from cityguide.schemas.common import CamelModel


class ReviewResponse(CamelModel):
    id: uuid.UUID
    user_id: uuid.UUID
    user_name: str
    rating: int
    comment: str
    created_at: datetime
    owner_reply: Optional[str] = None
    owner_reply_at: Optional[datetime] = None


class PlaceResponse(CamelModel):
    """
    Full place representation including embedded reviews.

    `rating` mirrors `average_rating`; both are kept for older clients.
    """

    id: uuid.UUID
    name: str
    category: str
    city: str
    description: str
    image: str
    address: Optional[str] = None
    contact_number: Optional[str] = None
    website: Optional[str] = None
    owner_id: Optional[uuid.UUID] = None
    rating: float
    average_rating: float
    total_reviews: int
    reviews: List[ReviewResponse] = Field(default_factory=list)
    created_at: datetime
    updated_at: datetime


class OwnerSummary(CamelModel):
    id: uuid.UUID
    name: str
    email: str


class AdminPlaceResponse(PlaceResponse):
    """Place row for the admin table, with the owner's contact details resolved."""

    owner: Optional[OwnerSummary] = None


class ReviewsResponse(CamelModel):
    reviews: List[ReviewResponse]
    total_reviews: int
    average_rating: float


class ReviewCreate(CamelModel):
    # Kept loose so validate_review_input sees the raw JSON value
    rating: Any = Field(default=None, description="Integer from 1 to 5")
    comment: Optional[str] = None


class ReplyCreate(CamelModel):
    reply: Optional[str] = None
