"""
CityGuide Backend — Custom Exception Hierarchy
================================================

What:  Application-specific exceptions for every failure the API can report.
How:   Each exception carries a user-safe message and an optional context dict.
       Global exception handlers (registered in main.py) map each family to an
       HTTP status and the `{success: false, error, message}` envelope.
Who:   Raised by services and route dependencies; caught by global handlers.

Exception Hierarchy:
    CityGuideError (base)
    ├── ValidationError               → 400 Bad Request
    │   ├── InvalidDecisionError
    │   └── EmptyReplyError
    ├── AuthenticationError           → 401 Unauthorized
    ├── InvalidTokenError             → 403 Forbidden
    ├── AccountBannedError            → 403 Forbidden
    ├── AuthorizationError            → 403 Forbidden
    │   ├── NotOwnerError
    │   └── AdminRequiredError
    ├── NotFoundError                 → 404 Not Found
    │   └── ReviewNotFoundError
    ├── ConflictError                 → 400 Bad Request
    │   ├── DuplicateReviewError
    │   ├── DuplicateFavoriteError
    │   ├── EmailTakenError
    │   ├── SelfDeletionError
    │   └── InvalidTransitionError
    ├── FileStorageError              → 500 Internal Server Error
    ├── DatabaseError                 → 500 Internal Server Error
    └── RateLimitExceededError        → 429 Too Many Requests
"""

from typing import Any, Dict, Optional


class CityGuideError(Exception):
    """
    Base exception for all CityGuide application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged, returned only where a handler opts in)
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


# ── 400: client input ─────────────────────────────────────────────────────


class ValidationError(CityGuideError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, rating out of range, bad file type or size.
    HTTP:    400 Bad Request

    Example response:
        {
            "success": false,
            "error": "validation_error",
            "message": "Rating must be an integer between 1 and 5",
            "details": {"field": "rating"}
        }
    """

    error_code = "validation_error"

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class InvalidDecisionError(ValidationError):
    """A moderation decision outside {approved, rejected}."""

    error_code = "invalid_decision"

    def __init__(self, decision: Any = None):
        super().__init__(
            message="Invalid status. Must be approved or rejected.",
            field="status",
            context={"decision": decision},
        )


class EmptyReplyError(ValidationError):
    error_code = "empty_reply"

    def __init__(self):
        super().__init__(message="Reply text is required", field="reply")


# ── 401 / 403: identity and permissions ───────────────────────────────────


class AuthenticationError(CityGuideError):
    """
    Raised when the caller cannot be identified.

    When:    No bearer token, wrong email/password, token for a deleted user.
    HTTP:    401 Unauthorized
    """

    error_code = "authentication_error"

    def __init__(
        self,
        message: str = "Access denied. No token provided.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class InvalidTokenError(CityGuideError):
    """A bearer token was supplied but failed signature or expiry checks (403)."""

    error_code = "invalid_token"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Invalid or expired token", context=context)


class AccountBannedError(CityGuideError):
    """
    Raised for authenticated users whose account is deactivated.

    Checked before any role check, so a banned admin is rejected here too.
    HTTP:    403 Forbidden
    """

    error_code = "account_banned"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            message="Your account has been banned. Please contact support.",
            context=context,
        )


class AuthorizationError(CityGuideError):
    """Authenticated, but not allowed to perform this action (403)."""

    error_code = "forbidden"

    def __init__(
        self,
        message: str = "You do not have permission to perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotOwnerError(AuthorizationError):
    """The acting user does not own the place being mutated."""

    error_code = "not_owner"

    def __init__(
        self,
        message: str = "Only the place owner can perform this action",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class AdminRequiredError(AuthorizationError):
    error_code = "admin_required"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Access denied. Admin privileges required.", context=context)


# ── 404 ───────────────────────────────────────────────────────────────────


class NotFoundError(CityGuideError):
    """
    Raised when a requested resource does not exist.

    SQLAlchemy returns None for missing rows; services convert that None into
    this exception so routes never deal with it.
    HTTP:    404 Not Found
    """

    error_code = "not_found"

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource.capitalize()} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class ReviewNotFoundError(NotFoundError):
    error_code = "review_not_found"

    def __init__(self, review_id: Optional[str] = None):
        super().__init__(resource="review", resource_id=review_id)


# ── Conflicts (reported as 400 to match the public API contract) ──────────


class ConflictError(CityGuideError):
    """The request collides with existing state (duplicate or illegal transition)."""

    error_code = "conflict"

    def __init__(
        self,
        message: str = "The request conflicts with existing data",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DuplicateReviewError(ConflictError):
    error_code = "duplicate_review"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="You have already reviewed this place", context=context)


class DuplicateFavoriteError(ConflictError):
    error_code = "duplicate_favorite"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="Place already in favorites", context=context)


class EmailTakenError(ConflictError):
    error_code = "email_taken"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="User already exists with this email", context=context)


class SelfDeletionError(ConflictError):
    error_code = "self_deletion"

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(message="You cannot delete your own account", context=context)


class InvalidTransitionError(ConflictError):
    """
    Raised when a moderation decision would move a request out of a terminal state.

    Repeating the same decision is a no-op and never raises this.
    """

    error_code = "invalid_transition"

    def __init__(self, current: str, requested: str, context: Optional[Dict[str, Any]] = None):
        ctx = context or {}
        ctx.update({"current_status": current, "requested_status": requested})
        super().__init__(
            message=f"Request is already {current} and cannot be changed to {requested}",
            context=ctx,
        )
        self.current = current
        self.requested = requested


# ── Infrastructure ────────────────────────────────────────────────────────


class FileStorageError(CityGuideError):
    """
    Raised when file system operations fail.

    When:    Disk full, permission denied, directory not writable, I/O error.
    HTTP:    500 Internal Server Error (path details stay in context, never in the response)
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "File storage operation failed",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class DatabaseError(CityGuideError):
    """
    Raised when database operations fail unexpectedly.

    The message returned to the client is always generic. Constraint names and
    SQL stay in the server log.
    HTTP:    500 Internal Server Error
    """

    error_code = "server_error"

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class RateLimitExceededError(CityGuideError):
    """
    Raised when a client exceeds the per-IP request rate limit.

    HTTP:    429 Too Many Requests, with a Retry-After header
    """

    error_code = "rate_limit_exceeded"

    def __init__(
        self,
        retry_after: int = 60,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = (
            f"Too many requests. Please wait {retry_after} seconds before retrying."
        )
        ctx = context or {}
        ctx["retry_after"] = retry_after
        super().__init__(message=message, context=ctx)
        self.retry_after = retry_after
