"""
CityGuide Backend — Moderation State Machine
==============================================

What:  The transition rules shared by place submissions and update requests.

    pending ──approved──▶ approved
       └─────rejected──▶ rejected

    pending → approved | rejected   performs the transition
    X → X (X terminal)              no-op; approval replay may repair side effects
    approved ↔ rejected             InvalidTransitionError

Who:   SubmissionService and UpdateService.
"""

import uuid
from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from cityguide.database import utcnow
from cityguide.exceptions import InvalidDecisionError, InvalidTransitionError, ValidationError
from cityguide.models.submission import DECISIONS, STATUS_PENDING, STATUSES

R = TypeVar("R")


@dataclass
class ModerationResult(Generic[R]):
    """
    Outcome of one moderation call.

    changed: the status moved out of pending during this call
    applied: the approval's side effect reached its target (always False for rejections)
    """

    record: R
    changed: bool
    applied: bool = False


def validate_decision(decision: Optional[str]) -> str:
    if decision not in DECISIONS:
        raise InvalidDecisionError(decision=decision)
    return decision


def validate_status_filter(status: Optional[str]) -> Optional[str]:
    if status and status not in STATUSES:
        raise ValidationError(
            message=f"Invalid status filter '{status}'. Must be one of: {', '.join(STATUSES)}",
            field="status",
        )
    return status or None


def begin_transition(current: str, decision: str) -> bool:
    """
    True when the record is pending and should move to `decision`.
    False when it already holds `decision`.

    Raises:
        InvalidTransitionError: the record holds the other terminal status
    """
    if current == STATUS_PENDING:
        return True
    if current == decision:
        return False
    raise InvalidTransitionError(current=current, requested=decision)


def stamp_decision(record, decision: str, notes: Optional[str], reviewer_id: uuid.UUID) -> None:
    """Writes status, notes and reviewer fields on a submission or update request."""
    record.status = decision
    record.admin_notes = (notes or "").strip()
    record.reviewed_by = reviewer_id
    record.reviewed_at = utcnow()
