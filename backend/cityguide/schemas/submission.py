"""
CityGuide Backend — Submission and Moderation Schemas
======================================================

What:  Request/response bodies for place submissions and for the moderation
       decision shared by submissions and update requests.

Required-field checks for SubmissionCreate happen in SubmissionService, which
reports them all with one message; every field is optional at this layer.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import Field

from cityguide.schemas.common import CamelModel
from cityguide.schemas.place import OwnerSummary


class SubmissionCreate(CamelModel):
    name: Optional[str] = None
    category: Optional[str] = None
    city: Optional[str] = None
    description: Optional[str] = None
    address: Optional[str] = None
    image: Optional[str] = None
    contact_number: Optional[str] = None
    website: Optional[str] = None
    note_for_admin: Optional[str] = None


class SubmissionResponse(CamelModel):
    id: uuid.UUID
    name: str
    category: str
    city: str
    description: str
    address: str
    image: str
    contact_number: Optional[str] = None
    website: Optional[str] = None
    note_for_admin: Optional[str] = None
    submitted_by: uuid.UUID
    status: str
    admin_notes: str = ""
    reviewed_by: Optional[uuid.UUID] = None
    reviewed_at: Optional[datetime] = None
    place_id: Optional[uuid.UUID] = Field(
        default=None, description="Place created when the submission was approved"
    )
    created_at: datetime
    updated_at: datetime


class AdminSubmissionResponse(SubmissionResponse):
    submitter: Optional[OwnerSummary] = None


class ModerationDecision(CamelModel):
    """
    Body of PATCH /api/admin/submissions/{id} and /api/admin/updates/{id}.

    `status` is a plain string so an out-of-range value is reported as
    InvalidDecisionError rather than a generic validation failure.
    """

    status: Optional[str] = None
    admin_notes: Optional[str] = None


class ReconcileResponse(CamelModel):
    materialized: int
    place_ids: List[uuid.UUID]
