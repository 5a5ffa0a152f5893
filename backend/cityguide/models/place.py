"""
CityGuide Backend — Place and Review SQLAlchemy Models
========================================================

What:  ORM models for the `places` table and its owned `reviews` table.
How:   Place is an aggregate root. Its reviews are loaded eagerly (selectin)
       and deleted with it (delete-orphan cascade), so service code treats
       `place.reviews` as an embedded, ordered list.
Who:   PlaceService, ReviewService, SubmissionService (materialization),
       UpdateService (applying approved diffs).

Aggregate invariants (maintained by services.review_service):
    total_reviews  == len(reviews)
    average_rating == mean(review.rating for review in reviews), or 0.0 when empty
    rating         == average_rating   (legacy field kept for older clients)

Cross-aggregate references:
    owner_id and Review.user_id point at users without a foreign key.
    Deleting a user leaves their places and reviews in place, with the
    author name snapshot on each review still readable.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cityguide.database import Base, utcnow

DEFAULT_PLACE_IMAGE = "https://via.placeholder.com/400x300?text=Place+Image"

# Reference list shown to clients; category itself is stored as free text.
KNOWN_CATEGORIES = ("cafe", "restaurant", "park", "museum", "shopping", "entertainment")

# Fields an owner may change through an update request, keyed by API name.
MUTABLE_FIELDS = {
    "name": "name",
    "category": "category",
    "description": "description",
    "image": "image",
    "address": "address",
    "contactNumber": "contact_number",
    "website": "website",
}


class Review(Base):
    """
    A single user review embedded in a Place.

    Only `owner_reply` / `owner_reply_at` change after creation.
    """

    __tablename__ = "reviews"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    place_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("places.id", ondelete="CASCADE"), nullable=False
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # Snapshot of the author's display name at write time
    user_name: Mapped[str] = mapped_column(String(120), nullable=False)

    rating: Mapped[int] = mapped_column(Integer, nullable=False)

    comment: Mapped[str] = mapped_column(Text, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    owner_reply: Mapped[Optional[str]] = mapped_column(Text, nullable=True, default=None)
    owner_reply_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )

    place: Mapped["Place"] = relationship(back_populates="reviews")

    __table_args__ = (
        # One review per (place, author)
        UniqueConstraint("place_id", "user_id", name="uq_reviews_place_user"),
    )

    def __repr__(self) -> str:
        return f"<Review(id={self.id}, place_id={self.place_id}, rating={self.rating})>"


class Place(Base):
    """
    A reviewable point of interest.

    Lifecycle:
        1. Created by admin seeding or by approving a PlaceSubmission
        2. Reviews appended by users; stats recomputed on every append
        3. Edited only through approved PlaceUpdate requests
        4. Deleted by its owner or an admin (reviews and favorites go with it)
    """

    __tablename__ = "places"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(60), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(500), nullable=False, default=DEFAULT_PLACE_IMAGE)

    address: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    contact_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    # NULL for admin-seeded places
    owner_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    # ── Derived review statistics ─────────────────────────────────────────
    total_reviews: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    average_rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    reviews: Mapped[List[Review]] = relationship(
        back_populates="place",
        order_by=Review.created_at,
        cascade="all, delete-orphan",
        lazy="selectin",
    )

    __table_args__ = (
        Index("idx_places_city_rating", "city", "rating"),
        Index("idx_places_owner", "owner_id"),
    )

    def find_review(self, review_id: uuid.UUID) -> Optional[Review]:
        """Linear scan over the loaded reviews; review counts per place stay small."""
        for review in self.reviews:
            if review.id == review_id:
                return review
        return None

    def __repr__(self) -> str:
        return f"<Place(id={self.id}, name='{self.name}', city='{self.city}')>"
