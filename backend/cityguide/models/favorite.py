"""
CityGuide Backend — Favorite SQLAlchemy Model
===============================================

What:  A (user, place) bookmark. Unique per pair; carries only a timestamp.
Who:   FavoriteService; deleted in bulk when its user or place is deleted.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Index, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cityguide.database import Base, utcnow
from cityguide.models.place import Place


class Favorite(Base):
    __tablename__ = "favorites"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    place_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("places.id", ondelete="CASCADE"), nullable=False
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    # Loaded with the favorite so list responses can include place details
    place: Mapped[Place] = relationship(lazy="joined")

    __table_args__ = (
        UniqueConstraint("user_id", "place_id", name="uq_favorites_user_place"),
        Index("idx_favorites_user", "user_id"),
    )

    def __repr__(self) -> str:
        return f"<Favorite(user_id={self.user_id}, place_id={self.place_id})>"
