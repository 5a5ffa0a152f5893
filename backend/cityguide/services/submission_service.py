"""
CityGuide Backend — Place Submission Workflow
===============================================

What:  Users propose new places; admins approve or reject them. Approval
       materializes a Place owned by the submitter.
Who:   /api/submissions (users) and /api/admin/submissions (admins).

Approval saga (single transaction):
    ┌─────────────────┐    ┌──────────────────┐    ┌──────────────────────────┐
    │ 1. lock + mark  │───▶│ 2. create Place  │───▶│ 3. submission.place_id = │
    │    approved     │    │    owner=submitter│    │    place.id (marker)     │
    └─────────────────┘    └──────────────────┘    └──────────────────────────┘

    All three writes commit together or not at all. `place_id` records that
    step 2 happened. Re-approving an approved submission whose place_id is
    NULL re-runs steps 2-3; re-approving a materialized one does nothing.
    reconcile_approved() runs steps 2-3 for every approved, unmaterialized
    submission (e.g. rows approved before the marker existed).
"""

import logging
import uuid
from typing import Dict, List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.config import settings
from cityguide.database import utcnow
from cityguide.exceptions import NotFoundError, ValidationError
from cityguide.models.place import DEFAULT_PLACE_IMAGE, Place
from cityguide.models.submission import STATUS_APPROVED, STATUS_PENDING, PlaceSubmission
from cityguide.models.user import User
from cityguide.services.moderation import (
    ModerationResult,
    begin_transition,
    stamp_decision,
    validate_decision,
    validate_status_filter,
)
from cityguide.services.place_service import load_users

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("name", "category", "city", "description", "address")
OPTIONAL_FIELDS = ("contact_number", "website", "note_for_admin")


def normalize_category(category: str) -> str:
    return category.strip().lower()


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


def materialize_place(submission: PlaceSubmission) -> Place:
    """Builds the Place an approved submission turns into: owned by the submitter, no reviews."""
    return Place(
        id=uuid.uuid4(),
        name=submission.name,
        category=submission.category,
        city=submission.city,
        description=submission.description,
        image=submission.image or DEFAULT_PLACE_IMAGE,
        address=submission.address,
        contact_number=submission.contact_number,
        website=submission.website,
        owner_id=submission.submitted_by,
        total_reviews=0,
        average_rating=0.0,
        rating=0.0,
        reviews=[],
        created_at=utcnow(),
        updated_at=utcnow(),
    )


class SubmissionService:
    async def submit(
        self, db: AsyncSession, fields: Dict[str, Optional[str]], submitter_id: uuid.UUID
    ) -> PlaceSubmission:
        """
        Records a pending submission.

        Raises:
            ValidationError: any of name, category, city, description, address is blank
        """
        required = {name: _clean(fields.get(name)) for name in REQUIRED_FIELDS}
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ValidationError(
                message="Please provide all required fields",
                context={"missing": missing},
            )

        submission = PlaceSubmission(
            name=required["name"],
            category=normalize_category(required["category"]),
            city=required["city"],
            description=required["description"],
            address=required["address"],
            image=_clean(fields.get("image")) or DEFAULT_PLACE_IMAGE,
            submitted_by=submitter_id,
            status=STATUS_PENDING,
            admin_notes="",
            **{name: _clean(fields.get(name)) for name in OPTIONAL_FIELDS},
        )
        db.add(submission)
        await db.flush()

        logger.info("Submission %s created by %s (%s)", submission.id, submitter_id, submission.name)
        return submission

    async def list_mine(self, db: AsyncSession, user_id: uuid.UUID) -> List[PlaceSubmission]:
        result = await db.execute(
            select(PlaceSubmission)
            .where(PlaceSubmission.submitted_by == user_id)
            .order_by(desc(PlaceSubmission.created_at))
        )
        return list(result.scalars().all())

    async def list_all(
        self, db: AsyncSession, status: Optional[str] = None
    ) -> Tuple[List[PlaceSubmission], Dict[uuid.UUID, User]]:
        """Admin listing, newest first, with submitters resolved."""
        status = validate_status_filter(status)
        query = select(PlaceSubmission).order_by(desc(PlaceSubmission.created_at))
        if status:
            query = query.where(PlaceSubmission.status == status)
        result = await db.execute(query)
        submissions = list(result.scalars().all())
        submitters = await load_users(db, [s.submitted_by for s in submissions])
        return submissions, submitters

    def submission_cities(self) -> List[str]:
        return settings.submission_cities_list

    async def review(
        self,
        db: AsyncSession,
        submission_id: uuid.UUID,
        decision: Optional[str],
        notes: Optional[str],
        reviewer: User,
    ) -> ModerationResult[PlaceSubmission]:
        """
        Approves or rejects a submission.

        Raises:
            InvalidDecisionError: decision is not approved/rejected
            NotFoundError: no such submission
            InvalidTransitionError: submission already holds the other decision
        """
        decision = validate_decision(decision)

        result = await db.execute(
            select(PlaceSubmission)
            .where(PlaceSubmission.id == submission_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        submission = result.scalar_one_or_none()
        if submission is None:
            raise NotFoundError(resource="submission", resource_id=str(submission_id))

        changed = begin_transition(submission.status, decision)
        if changed:
            stamp_decision(submission, decision, notes, reviewer.id)
            submission.updated_at = utcnow()
            logger.info("Submission %s %s by %s", submission.id, decision, reviewer.id)

        applied = False
        if decision == STATUS_APPROVED:
            if submission.place_id is None:
                await self._materialize(db, submission)
                applied = True
            elif not changed:
                logger.info("Submission %s already materialized as place %s", submission.id, submission.place_id)

        await db.flush()
        return ModerationResult(record=submission, changed=changed, applied=applied)

    async def reconcile_approved(self, db: AsyncSession) -> List[uuid.UUID]:
        """Materializes every approved submission that has no place yet. Returns the new place ids."""
        result = await db.execute(
            select(PlaceSubmission)
            .where(
                PlaceSubmission.status == STATUS_APPROVED,
                PlaceSubmission.place_id.is_(None),
            )
            .order_by(PlaceSubmission.created_at)
            .with_for_update()
        )
        created = []
        for submission in result.scalars().all():
            place = await self._materialize(db, submission)
            created.append(place.id)

        await db.flush()
        if created:
            logger.warning("Reconciliation materialized %d approved submissions", len(created))
        return created

    async def _materialize(self, db: AsyncSession, submission: PlaceSubmission) -> Place:
        place = materialize_place(submission)
        db.add(place)
        await db.flush()

        submission.place_id = place.id
        submission.updated_at = utcnow()
        logger.info(
            "Submission %s materialized as place %s (owner %s)",
            submission.id, place.id, submission.submitted_by,
        )
        return place


submission_service = SubmissionService()
