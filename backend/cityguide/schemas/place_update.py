"""Schemas for owner update requests (PATCH /api/my-places/{id}, /api/my-updates, /api/admin/updates)."""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from cityguide.schemas.common import CamelModel
from cityguide.schemas.place import OwnerSummary


class PlaceUpdateCreate(CamelModel):
    """Any subset of the mutable place fields; omitted ones keep the place's current value."""

    name: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    address: Optional[str] = None
    contact_number: Optional[str] = None
    website: Optional[str] = None


class PlaceUpdateResponse(CamelModel):
    id: uuid.UUID
    place_id: uuid.UUID
    place_name: str
    submitted_by: uuid.UUID
    updates: Dict[str, Any]
    status: str
    admin_notes: str = ""
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    applied: bool
    created_at: datetime


class AdminPlaceUpdateResponse(PlaceUpdateResponse):
    submitter: Optional[OwnerSummary] = None
    place_exists: bool = True
