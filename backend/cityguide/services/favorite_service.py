"""
CityGuide Backend — Favorite Service
======================================

What:  Add, list and remove a user's favorite places.
Who:   /api/favorites routes.

A (user, place) pair is unique. A second add is a DuplicateFavoriteError,
both from the pre-check and, under a race, from the unique constraint.
A favorite can only be removed by the user who created it; someone else's
favorite id is reported as not found.
"""

import logging
import uuid
from typing import List

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.exceptions import DuplicateFavoriteError, NotFoundError
from cityguide.models.favorite import Favorite
from cityguide.models.place import Place

logger = logging.getLogger(__name__)


class FavoriteService:
    async def add_favorite(
        self, db: AsyncSession, user_id: uuid.UUID, place_id: uuid.UUID
    ) -> Favorite:
        place = await db.get(Place, place_id)
        if place is None:
            raise NotFoundError(resource="place", resource_id=str(place_id))

        existing = await db.execute(
            select(Favorite.id).where(Favorite.user_id == user_id, Favorite.place_id == place_id)
        )
        if existing.first() is not None:
            raise DuplicateFavoriteError(context={"place_id": str(place_id)})

        favorite = Favorite(user_id=user_id, place_id=place_id, place=place)
        db.add(favorite)
        try:
            await db.flush()
        except IntegrityError:
            raise DuplicateFavoriteError(context={"place_id": str(place_id)}) from None

        logger.info("User %s favorited place %s", user_id, place_id)
        return favorite

    async def list_favorites(self, db: AsyncSession, user_id: uuid.UUID) -> List[Favorite]:
        """Newest first; each favorite comes with its place loaded."""
        result = await db.execute(
            select(Favorite).where(Favorite.user_id == user_id).order_by(desc(Favorite.created_at))
        )
        return list(result.unique().scalars().all())

    async def remove_favorite(
        self, db: AsyncSession, user_id: uuid.UUID, favorite_id: uuid.UUID
    ) -> None:
        result = await db.execute(
            select(Favorite).where(Favorite.id == favorite_id, Favorite.user_id == user_id)
        )
        favorite = result.unique().scalar_one_or_none()
        if favorite is None:
            raise NotFoundError(resource="favorite", resource_id=str(favorite_id))

        await db.delete(favorite)
        await db.flush()
        logger.info("User %s removed favorite %s", user_id, favorite_id)


favorite_service = FavoriteService()
