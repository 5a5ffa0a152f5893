"""
CityGuide Backend — Review Aggregator
=======================================

What:  Appends reviews to a place, recomputes its rating statistics, and
       records owner replies.
How:   The rules are plain functions over an in-memory Place
       (compute_review_stats, append_review, set_owner_reply) so they can be
       tested without a database. ReviewService wraps them with row locking
       and persistence.
Who:   /api/places/{id}/reviews and /api/places/{placeId}/reviews/{reviewId}/reply.

Statistics:
    Recomputed from the full review list on every append, never as a running
    average, so a place's numbers can always be rebuilt from its reviews:

        total_reviews  = len(reviews)
        average_rating = sum(ratings) / total_reviews   (0.0 when empty, no rounding)
        rating         = average_rating

Concurrency:
    add_review locks the place row (SELECT ... FOR UPDATE) before checking for
    a duplicate author, so two concurrent reviews of the same place are applied
    one after the other. The (place_id, user_id) unique constraint backs the
    duplicate rule if anything slips past the lock.
"""

import logging
import uuid
from typing import Any, Iterable, Optional, Tuple

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import utcnow
from cityguide.exceptions import (
    DuplicateReviewError,
    EmptyReplyError,
    NotFoundError,
    ReviewNotFoundError,
    ValidationError,
)
from cityguide.models.place import Place, Review
from cityguide.models.user import User
from cityguide.services.authorization import ensure_place_owner

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5


# ══════════════════════════════════════════════════════════════════════════
# Pure aggregate rules
# ══════════════════════════════════════════════════════════════════════════


def compute_review_stats(ratings: Iterable[int]) -> Tuple[int, float]:
    """Returns (total_reviews, average_rating) for a list of ratings."""
    ratings = list(ratings)
    total = len(ratings)
    if total == 0:
        return 0, 0.0
    return total, sum(ratings) / total


def recompute_place_stats(place: Place) -> None:
    total, average = compute_review_stats(review.rating for review in place.reviews)
    place.total_reviews = total
    place.average_rating = average
    place.rating = average


def validate_review_input(rating: Any, comment: Optional[str]) -> Tuple[int, str]:
    """
    Normalizes a review body.

    Raises:
        ValidationError: rating missing or outside 1..5, comment missing or blank
    """
    comment = (comment or "").strip()
    if rating is None or not comment:
        raise ValidationError(message="Rating and comment are required")
    # bool is an int subclass; True must not count as a 1-star rating
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError(message="Rating must be an integer between 1 and 5", field="rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(message="Rating must be between 1 and 5", field="rating")
    return rating, comment


def append_review(
    place: Place,
    author_id: uuid.UUID,
    author_name: str,
    rating: Any,
    comment: Optional[str],
) -> Review:
    """
    Adds one review to `place` and refreshes its statistics.

    The place is left untouched when any precondition fails.

    Raises:
        ValidationError: bad rating or empty comment
        DuplicateReviewError: author already reviewed this place
    """
    rating, comment = validate_review_input(rating, comment)

    if any(review.user_id == author_id for review in place.reviews):
        raise DuplicateReviewError(context={"place_id": str(place.id), "user_id": str(author_id)})

    review = Review(
        id=uuid.uuid4(),
        user_id=author_id,
        user_name=author_name,
        rating=rating,
        comment=comment,
        created_at=utcnow(),
    )
    place.reviews.append(review)
    recompute_place_stats(place)
    place.updated_at = utcnow()
    return review


def set_owner_reply(
    place: Place,
    review_id: uuid.UUID,
    acting_user_id: uuid.UUID,
    reply: Optional[str],
) -> Review:
    """
    Sets or overwrites the owner's reply on one review.

    Checks run in this order: ownership, review existence, reply text.

    Raises:
        NotOwnerError: acting user does not own the place (always, for unowned places)
        ReviewNotFoundError: no review with that id on this place
        EmptyReplyError: reply is missing or blank
    """
    ensure_place_owner(
        acting_user_id, place, message="Only the place owner can reply to reviews"
    )

    review = place.find_review(review_id)
    if review is None:
        raise ReviewNotFoundError(review_id=str(review_id))

    text = (reply or "").strip()
    if not text:
        raise EmptyReplyError()

    review.owner_reply = text
    review.owner_reply_at = utcnow()
    return review


# ══════════════════════════════════════════════════════════════════════════
# Persistence wrapper
# ══════════════════════════════════════════════════════════════════════════


class ReviewService:
    """Loads the place aggregate, applies one of the rules above, flushes."""

    async def add_review(
        self,
        db: AsyncSession,
        place_id: uuid.UUID,
        author: User,
        rating: Any,
        comment: Optional[str],
    ) -> Place:
        # Input errors are reported before the place is looked up
        validate_review_input(rating, comment)

        place = await self._load_place(db, place_id, lock=True)
        review = append_review(place, author.id, author.name, rating, comment)

        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateReviewError(
                context={"place_id": str(place_id), "user_id": str(author.id)}
            ) from None

        logger.info(
            "Review %s added to place %s (rating=%d, total=%d, average=%.3f)",
            review.id, place.id, review.rating, place.total_reviews, place.average_rating,
        )
        return place

    async def get_place_reviews(self, db: AsyncSession, place_id: uuid.UUID) -> Place:
        return await self._load_place(db, place_id)

    async def reply_to_review(
        self,
        db: AsyncSession,
        place_id: uuid.UUID,
        review_id: uuid.UUID,
        acting_user: User,
        reply: Optional[str],
    ) -> Place:
        place = await self._load_place(db, place_id, lock=True)
        set_owner_reply(place, review_id, acting_user.id, reply)
        await db.flush()
        logger.info("Owner reply set on review %s of place %s", review_id, place_id)
        return place

    @staticmethod
    async def _load_place(db: AsyncSession, place_id: uuid.UUID, lock: bool = False) -> Place:
        query = select(Place).where(Place.id == place_id)
        if lock:
            query = query.with_for_update().execution_options(populate_existing=True)
        result = await db.execute(query)
        place = result.scalar_one_or_none()
        if place is None:
            raise NotFoundError(resource="place", resource_id=str(place_id))
        return place


review_service = ReviewService()
