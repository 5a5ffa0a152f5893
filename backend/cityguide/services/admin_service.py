"""
CityGuide Backend — Admin Service
===================================

What:  User moderation (list, ban/unban, role change, delete) and the
       dashboard counters.
Who:   /api/admin/users and /api/admin/stats.

Deleting a user removes their submissions and favorites in the same
transaction. Their places and reviews stay: reviews keep the author name
snapshot, places keep a dangling owner_id that no longer matches anyone.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, desc, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.database import utcnow
from cityguide.exceptions import NotFoundError, ValidationError
from cityguide.models.favorite import Favorite
from cityguide.models.place import Place
from cityguide.models.place_update import PlaceUpdate
from cityguide.models.submission import (
    STATUS_APPROVED,
    STATUS_PENDING,
    STATUS_REJECTED,
    PlaceSubmission,
)
from cityguide.models.user import ROLES, User
from cityguide.schemas.admin import CountBucket, StatsResponse
from cityguide.services.authorization import ensure_not_self

logger = logging.getLogger(__name__)


class AdminService:
    async def list_users(self, db: AsyncSession) -> List[User]:
        result = await db.execute(select(User).order_by(desc(User.created_at)))
        return list(result.scalars().all())

    async def update_user(
        self,
        db: AsyncSession,
        user_id: uuid.UUID,
        is_active: Optional[bool],
        role: Optional[str],
        acting_user: User,
    ) -> User:
        """
        Bans/unbans and changes roles. Fields left as None are not touched.

        Raises:
            ValidationError: role is not one of user/admin
            NotFoundError: no such user
        """
        if role is not None and role not in ROLES:
            raise ValidationError(
                message=f"Invalid role '{role}'. Must be one of: {', '.join(ROLES)}",
                field="role",
            )

        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))

        if is_active is not None:
            user.is_active = is_active
        if role is not None:
            user.role = role
        user.updated_at = utcnow()
        await db.flush()

        logger.info(
            "User %s updated by %s (is_active=%s, role=%s)",
            user.id, acting_user.id, user.is_active, user.role,
        )
        return user

    async def delete_user(self, db: AsyncSession, user_id: uuid.UUID, acting_user: User) -> None:
        """
        Raises:
            SelfDeletionError: an admin tried to delete their own account
            NotFoundError: no such user
        """
        ensure_not_self(acting_user, user_id)

        user = await db.get(User, user_id)
        if user is None:
            raise NotFoundError(resource="user", resource_id=str(user_id))

        submissions = await db.execute(
            delete(PlaceSubmission).where(PlaceSubmission.submitted_by == user_id)
        )
        favorites = await db.execute(delete(Favorite).where(Favorite.user_id == user_id))
        await db.delete(user)
        await db.flush()

        logger.info(
            "User %s deleted by %s (%d submissions, %d favorites removed)",
            user_id, acting_user.id, submissions.rowcount, favorites.rowcount,
        )

    async def get_stats(self, db: AsyncSession) -> StatsResponse:
        async def count(model, *conditions) -> int:
            result = await db.execute(select(func.count()).select_from(model).where(*conditions))
            return result.scalar() or 0

        async def group_places(column) -> List[CountBucket]:
            counted = func.count(Place.id).label("count")
            result = await db.execute(
                select(column, counted).group_by(column).order_by(desc(counted), column)
            )
            return [CountBucket(name=name, count=n) for name, n in result.all()]

        return StatsResponse(
            total_users=await count(User),
            active_users=await count(User, User.is_active.is_(True)),
            banned_users=await count(User, User.is_active.is_(False)),
            total_places=await count(Place),
            pending_submissions=await count(PlaceSubmission, PlaceSubmission.status == STATUS_PENDING),
            approved_submissions=await count(PlaceSubmission, PlaceSubmission.status == STATUS_APPROVED),
            rejected_submissions=await count(PlaceSubmission, PlaceSubmission.status == STATUS_REJECTED),
            pending_updates=await count(PlaceUpdate, PlaceUpdate.status == STATUS_PENDING),
            places_by_category=await group_places(Place.category),
            places_by_city=await group_places(Place.city),
        )


admin_service = AdminService()
