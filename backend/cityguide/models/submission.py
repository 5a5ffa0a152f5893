"""
CityGuide Backend — Place Submission SQLAlchemy Model
=======================================================

What:  A user-proposed new place awaiting admin moderation.
Who:   SubmissionService (submit / review / reconcile), AdminService (stats).

Lifecycle:
    pending ──approve──▶ approved   (a Place is materialized, place_id recorded)
       │
       └────reject────▶ rejected

    approved and rejected are terminal. The row is kept after approval as an
    audit trail; `place_id` is the "materialized" marker that makes approval
    replay idempotent.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from cityguide.database import Base, utcnow

STATUS_PENDING = "pending"
STATUS_APPROVED = "approved"
STATUS_REJECTED = "rejected"
STATUSES = (STATUS_PENDING, STATUS_APPROVED, STATUS_REJECTED)
DECISIONS = (STATUS_APPROVED, STATUS_REJECTED)


class PlaceSubmission(Base):
    __tablename__ = "place_submissions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # ── Proposed place fields ─────────────────────────────────────────────
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    category: Mapped[str] = mapped_column(String(60), nullable=False)
    city: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    address: Mapped[str] = mapped_column(String(500), nullable=False)
    image: Mapped[str] = mapped_column(String(500), nullable=False)
    contact_number: Mapped[Optional[str]] = mapped_column(String(40), nullable=True)
    website: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    note_for_admin: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    submitted_by: Mapped[uuid.UUID] = mapped_column(Uuid, nullable=False)

    # ── Moderation ────────────────────────────────────────────────────────
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=STATUS_PENDING)
    admin_notes: Mapped[str] = mapped_column(Text, nullable=False, default="")
    reviewed_by: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)
    reviewed_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    # Place created from this submission (NULL until materialized)
    place_id: Mapped[Optional[uuid.UUID]] = mapped_column(Uuid, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    __table_args__ = (
        Index("idx_submissions_submitter", "submitted_by"),
        Index("idx_submissions_status", "status"),
    )

    @property
    def is_materialized(self) -> bool:
        return self.place_id is not None

    def __repr__(self) -> str:
        return f"<PlaceSubmission(id={self.id}, name='{self.name}', status='{self.status}')>"
