"""
CityGuide Backend — Place Update Request SQLAlchemy Model
===========================================================

What:  An owner's proposed edit to an existing place, pending admin approval.
How:   `updates` is a JSON object keyed by API field name (see
       models.place.MUTABLE_FIELDS). It is self-contained: fields the owner
       left out are filled with the place's values at proposal time.

`place_id` carries no foreign key: the request outlives the place as an audit
record. `applied` records whether an approval actually reached the place.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import JSON, Boolean, DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cityguide.database import Base, utcnow
from cityguide.models.submission import STATUS_PENDING


class PlaceUpdate(Base):
    __tablename__ = "place_updates"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    place_id: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)
    place_name: Mapped[str] = mapped_column(String(200), nullable=False)

    submitted_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    updates: Mapped[Dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_PENDING)
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    applied: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("idx_place_updates_submitter", "submitted_by"),
        Index("idx_place_updates_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<PlaceUpdate(id={self.id}, place_id={self.place_id}, status='{self.status}')>"
