"""Schemas for the admin user table and dashboard counters."""

import uuid
from datetime import datetime
from typing import List, Optional

from cityguide.schemas.common import CamelModel


class UserAdminResponse(CamelModel):
    id: uuid.UUID
    name: str
    email: str
    role: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class UserAdminUpdate(CamelModel):
    """Ban/unban via is_active, promote/demote via role. Omitted fields are left alone."""

    is_active: Optional[bool] = None
    role: Optional[str] = None


class CountBucket(CamelModel):
    name: str
    count: int


class StatsResponse(CamelModel):
    total_users: int
    active_users: int
    banned_users: int
    total_places: int
    pending_submissions: int
    approved_submissions: int
    rejected_submissions: int
    pending_updates: int
    places_by_category: List[CountBucket]
    places_by_city: List[CountBucket]
