"""
CityGuide Backend — Ownership / Authorization Gate
====================================================

What:  Predicates deciding whether an acting user may mutate a place, and
       `ensure_*` helpers that raise the matching exception.
Who:   Route dependencies (admin checks) and services (owner checks).

Rules:
    can_modify_place   admin, or the place's owner          (delete)
    is_place_owner     the place's owner only               (reply, propose update)
    can_access_admin   role == admin, evaluated after the ban check

Unowned places (owner_id NULL) have no owner: is_place_owner is always False.
"""

import uuid
from typing import Optional

from cityguide.exceptions import (
    AccountBannedError,
    AdminRequiredError,
    NotOwnerError,
    SelfDeletionError,
)
from cityguide.models.place import Place
from cityguide.models.user import ROLE_ADMIN, User


def is_place_owner(user_id: Optional[uuid.UUID], place: Place) -> bool:
    return place.owner_id is not None and user_id is not None and place.owner_id == user_id


def can_modify_place(user: User, place: Place) -> bool:
    return user.role == ROLE_ADMIN or is_place_owner(user.id, place)


def can_access_admin_routes(user: User) -> bool:
    return user.role == ROLE_ADMIN


def ensure_active(user: User) -> None:
    if not user.is_active:
        raise AccountBannedError(context={"user_id": str(user.id)})


def ensure_admin(user: User) -> None:
    """Ban check first, so a banned admin gets AccountBannedError."""
    ensure_active(user)
    if not can_access_admin_routes(user):
        raise AdminRequiredError(context={"user_id": str(user.id)})


def ensure_place_owner(user_id: uuid.UUID, place: Place, message: Optional[str] = None) -> None:
    if not is_place_owner(user_id, place):
        raise NotOwnerError(
            message=message or "Only the place owner can perform this action",
            context={"place_id": str(place.id), "user_id": str(user_id)},
        )


def ensure_can_modify_place(user: User, place: Place) -> None:
    if not can_modify_place(user, place):
        raise NotOwnerError(
            message="You do not have permission to modify this place",
            context={"place_id": str(place.id), "user_id": str(user.id)},
        )


def ensure_not_self(acting_user: User, target_user_id: uuid.UUID) -> None:
    if acting_user.id == target_user_id:
        raise SelfDeletionError(context={"user_id": str(target_user_id)})
