"""
CityGuide Backend — Place Update Workflow
===========================================

What:  Owners propose edits to their places; an admin approves or rejects them.
       Places change only when an update request is approved.
Who:   PATCH /api/my-places/{id}, GET /api/my-updates, /api/admin/updates.

Stored diff:
    `updates` always holds all seven mutable fields. Fields the owner did not
    send are copied from the place at proposal time, so the request reads on
    its own in the moderation queue.

Approval when the place is gone:
    The place may be deleted while its update request is pending. Approving
    such a request still marks it approved, writes nothing, leaves
    applied=False and logs a warning; the caller surfaces that in its message.
"""

import logging
import uuid
from typing import Any, Dict, List, Optional, Set, Tuple

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import utcnow
from cityguide.exceptions import NotFoundError
from cityguide.models.place import MUTABLE_FIELDS, Place
from cityguide.models.place_update import PlaceUpdate
from cityguide.models.submission import STATUS_APPROVED, STATUS_PENDING
from cityguide.models.user import User
from cityguide.services.authorization import ensure_place_owner
from cityguide.services.moderation import (
    ModerationResult,
    begin_transition,
    stamp_decision,
    validate_decision,
    validate_status_filter,
)
from cityguide.services.place_service import load_users
from cityguide.services.submission_service import normalize_category

logger = logging.getLogger(__name__)

# Fields that fall back to the current value when sent blank; the others may be cleared
REQUIRED_UPDATE_FIELDS = {"name", "category", "description", "image"}


def build_update_diff(place: Place, proposed: Dict[str, Optional[str]]) -> Dict[str, Any]:
    """
    Returns the self-contained diff stored on an update request.

    `proposed` is keyed by API field name. Missing or None values keep the
    place's current value. Blank strings keep the current value for required
    fields and clear optional ones.
    """
    diff: Dict[str, Any] = {}
    for api_name, attr in MUTABLE_FIELDS.items():
        current = getattr(place, attr)
        value = proposed.get(api_name)
        if value is None:
            diff[api_name] = current
            continue

        value = value.strip()
        if not value:
            diff[api_name] = current if api_name in REQUIRED_UPDATE_FIELDS else None
        elif api_name == "category":
            diff[api_name] = normalize_category(value)
        else:
            diff[api_name] = value
    return diff


def apply_update_diff(place: Place, updates: Dict[str, Any]) -> List[str]:
    """Writes the diff's keys onto the place. Unknown keys are ignored. Returns changed API names."""
    changed = []
    for api_name, value in updates.items():
        attr = MUTABLE_FIELDS.get(api_name)
        if attr is None:
            continue
        # Rows stored before proposals were self-contained may carry blanks
        if api_name in REQUIRED_UPDATE_FIELDS and not value:
            continue
        if getattr(place, attr) != value:
            setattr(place, attr, value)
            changed.append(api_name)
    place.updated_at = utcnow()
    return changed


class UpdateService:
    async def propose_update(
        self,
        db: AsyncSession,
        place_id: uuid.UUID,
        proposed: Dict[str, Optional[str]],
        requester: User,
    ) -> PlaceUpdate:
        """
        Files a pending update request for an owned place.

        Raises:
            NotFoundError: no such place
            NotOwnerError: requester does not own the place
        """
        place = await db.get(Place, place_id)
        if place is None:
            raise NotFoundError(resource="place", resource_id=str(place_id))
        ensure_place_owner(requester.id, place, message="Only the place owner can request updates")

        update = PlaceUpdate(
            place_id=place.id,
            place_name=place.name,
            submitted_by=requester.id,
            updates=build_update_diff(place, proposed),
            status=STATUS_PENDING,
            admin_notes="",
            applied=False,
            created_at=utcnow(),
        )
        db.add(update)
        await db.flush()

        logger.info("Update request %s filed for place %s by %s", update.id, place.id, requester.id)
        return update

    async def list_mine(self, db: AsyncSession, user_id: uuid.UUID) -> List[PlaceUpdate]:
        result = await db.execute(
            select(PlaceUpdate)
            .where(PlaceUpdate.submitted_by == user_id)
            .order_by(desc(PlaceUpdate.created_at))
        )
        return list(result.scalars().all())

    async def list_all(
        self, db: AsyncSession, status: Optional[str] = None
    ) -> Tuple[List[PlaceUpdate], Dict[uuid.UUID, User], Set[uuid.UUID]]:
        """Admin listing with submitters resolved and the set of place ids that still exist."""
        status = validate_status_filter(status)
        query = select(PlaceUpdate).order_by(desc(PlaceUpdate.created_at))
        if status:
            query = query.where(PlaceUpdate.status == status)
        result = await db.execute(query)
        updates = list(result.scalars().all())

        submitters = await load_users(db, [u.submitted_by for u in updates])
        place_ids = {u.place_id for u in updates}
        existing: Set[uuid.UUID] = set()
        if place_ids:
            found = await db.execute(select(Place.id).where(Place.id.in_(place_ids)))
            existing = set(found.scalars().all())
        return updates, submitters, existing

    async def review(
        self,
        db: AsyncSession,
        update_id: uuid.UUID,
        decision: Optional[str],
        notes: Optional[str],
        reviewer: User,
    ) -> ModerationResult[PlaceUpdate]:
        """
        Approves or rejects an update request; approval applies the diff.

        Raises:
            InvalidDecisionError: decision is not approved/rejected
            NotFoundError: no such update request
            InvalidTransitionError: request already holds the other decision
        """
        decision = validate_decision(decision)

        result = await db.execute(
            select(PlaceUpdate)
            .where(PlaceUpdate.id == update_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        update = result.scalar_one_or_none()
        if update is None:
            raise NotFoundError(resource="update request", resource_id=str(update_id))

        if not begin_transition(update.status, decision):
            return ModerationResult(record=update, changed=False, applied=update.applied)

        stamp_decision(update, decision, notes, reviewer.id)
        logger.info("Update request %s %s by %s", update.id, decision, reviewer.id)

        if decision == STATUS_APPROVED:
            place_result = await db.execute(
                select(Place).where(Place.id == update.place_id).with_for_update()
            )
            place = place_result.scalar_one_or_none()
            if place is None:
                update.applied = False
                logger.warning(
                    "Update request %s approved but place %s no longer exists; nothing applied",
                    update.id, update.place_id,
                )
            else:
                changed = apply_update_diff(place, update.updates or {})
                update.applied = True
                logger.info("Update request %s applied to place %s: %s", update.id, place.id, changed)

        await db.flush()
        return ModerationResult(record=update, changed=True, applied=update.applied)


update_service = UpdateService()
