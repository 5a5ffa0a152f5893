"""
CityGuide Backend — Place Service
===================================

What:  Read side of the place store (list, search, detail, cities, owned places)
       plus place deletion.
Who:   /api/places, /api/cities, /api/my-places, /api/admin/places.

Query shape (list and search share it):
    SELECT * FROM places
    WHERE [city = :city] [AND rating >= :min_rating]
          [AND (name ILIKE %kw% OR category ILIKE %kw% OR description ILIKE %kw%)]
    ORDER BY <sort column> DESC, id
    LIMIT :limit OFFSET (:page - 1) * :limit

    Sort is always descending, over a fixed set of columns. The keyword is
    matched literally: LIKE wildcards in user input are escaped.

Deletion:
    Reviews go with the place through the ORM cascade. Favorites are deleted
    explicitly in the same transaction. Update requests are kept as audit records.
"""

import logging
import uuid
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy import delete, desc, distinct, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.exceptions import NotFoundError, ValidationError
from cityguide.models.favorite import Favorite
from cityguide.models.place import Place
from cityguide.models.user import User
from cityguide.schemas.common import Pagination
from cityguide.services.authorization import ensure_can_modify_place

logger = logging.getLogger(__name__)

# API sort key → column
SORT_FIELDS = {
    "rating": Place.rating,
    "averageRating": Place.average_rating,
    "totalReviews": Place.total_reviews,
    "createdAt": Place.created_at,
    "name": Place.name,
}
DEFAULT_SORT = "rating"


def resolve_sort(sort: Optional[str]):
    key = sort or DEFAULT_SORT
    column = SORT_FIELDS.get(key)
    if column is None:
        raise ValidationError(
            message=f"Invalid sort field '{key}'. Must be one of: {', '.join(SORT_FIELDS)}",
            field="sort",
        )
    return column


class PlaceService:
    async def search_places(
        self,
        db: AsyncSession,
        keyword: Optional[str] = None,
        city: Optional[str] = None,
        min_rating: Optional[float] = None,
        page: int = 1,
        limit: int = 10,
        sort: Optional[str] = None,
    ) -> Tuple[List[Place], Pagination]:
        """
        Filtered, sorted, paginated place listing.

        GET /api/places is this call without keyword and min_rating.

        Raises:
            ValidationError: unknown sort key
        """
        sort_column = resolve_sort(sort)

        conditions = []
        if city:
            conditions.append(Place.city == city)
        if min_rating is not None:
            conditions.append(Place.rating >= min_rating)
        keyword = (keyword or "").strip()
        if keyword:
            conditions.append(
                or_(
                    Place.name.icontains(keyword, autoescape=True),
                    Place.category.icontains(keyword, autoescape=True),
                    Place.description.icontains(keyword, autoescape=True),
                )
            )

        count_result = await db.execute(select(func.count(Place.id)).where(*conditions))
        total = count_result.scalar() or 0

        result = await db.execute(
            select(Place)
            .where(*conditions)
            .order_by(desc(sort_column), Place.id)
            .limit(limit)
            .offset((page - 1) * limit)
        )
        places = list(result.scalars().all())

        logger.debug(
            "Place query keyword=%r city=%r min_rating=%r page=%d → %d of %d",
            keyword, city, min_rating, page, len(places), total,
        )
        return places, Pagination.build(page=page, limit=limit, total_items=total)

    async def get_place(self, db: AsyncSession, place_id: uuid.UUID) -> Place:
        place = await db.get(Place, place_id)
        if place is None:
            raise NotFoundError(resource="place", resource_id=str(place_id))
        return place

    async def list_cities(self, db: AsyncSession) -> List[str]:
        result = await db.execute(select(distinct(Place.city)).order_by(Place.city))
        return [city for city in result.scalars().all() if city]

    async def list_owned_places(self, db: AsyncSession, owner_id: uuid.UUID) -> List[Place]:
        result = await db.execute(
            select(Place).where(Place.owner_id == owner_id).order_by(desc(Place.created_at))
        )
        return list(result.scalars().all())

    async def list_all_places(self, db: AsyncSession) -> Tuple[List[Place], Dict[uuid.UUID, User]]:
        """All places, newest first, with the owning users resolved for display."""
        result = await db.execute(select(Place).order_by(desc(Place.created_at)))
        places = list(result.scalars().all())
        owners = await load_users(db, [p.owner_id for p in places if p.owner_id is not None])
        return places, owners

    async def delete_place(self, db: AsyncSession, place_id: uuid.UUID, acting_user: User) -> None:
        """
        Deletes a place, its reviews and every favorite pointing at it.

        Raises:
            NotFoundError: no such place
            NotOwnerError: acting user is neither admin nor the owner
        """
        place = await self.get_place(db, place_id)
        ensure_can_modify_place(acting_user, place)

        fav_result = await db.execute(delete(Favorite).where(Favorite.place_id == place_id))
        await db.delete(place)
        await db.flush()

        logger.info(
            "Place %s deleted by %s (%d reviews, %d favorites removed)",
            place_id, acting_user.id, len(place.reviews), fav_result.rowcount,
        )


async def load_users(db: AsyncSession, user_ids: Sequence[uuid.UUID]) -> Dict[uuid.UUID, User]:
    """Batch lookup used to attach submitter/owner details to admin listings."""
    ids = set(user_ids)
    if not ids:
        return {}
    result = await db.execute(select(User).where(User.id.in_(ids)))
    return {user.id: user for user in result.scalars().all()}


place_service = PlaceService()
