"""
CityGuide Backend — Shared Response Envelope and Base Schema
=============================================================

What:  The `{success, message, data, pagination}` envelope every endpoint returns,
       plus the camelCase base model all request/response schemas inherit.
How:   Field names are snake_case in Python and camelCase on the wire via an
       alias generator. FastAPI serializes response models by alias, and
       `populate_by_name` lets services build schemas with Python names.
Who:   Every route module (response_model=ApiResponse[...]) and the global
       exception handlers (ErrorResponse).

Wire format:
    success:  {"success": true, "message": "...", "data": {...}, "pagination": {...}}
    failure:  {"success": false, "error": "not_found", "message": "Place not found",
               "details": {...}, "requestId": "..."}
"""

import math
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

T = TypeVar("T")


class CamelModel(BaseModel):
    """Base for all API schemas: camelCase aliases, readable from ORM objects."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class Pagination(CamelModel):
    """
    Page metadata for offset-paginated lists.

    total_pages is 0 when there are no items, so has_next is false on page 1.
    """

    current_page: int = Field(description="1-based page number that was returned")
    total_pages: int = Field(description="ceil(total_items / limit)")
    total_items: int = Field(description="Number of items matching the filters")
    has_next: bool
    has_prev: bool

    @classmethod
    def build(cls, page: int, limit: int, total_items: int) -> "Pagination":
        total_pages = math.ceil(total_items / limit) if limit else 0
        return cls(
            current_page=page,
            total_pages=total_pages,
            total_items=total_items,
            has_next=page < total_pages,
            has_prev=page > 1,
        )


class ApiResponse(CamelModel, Generic[T]):
    """
    Success envelope.

    Example:
        ApiResponse[PlaceResponse](data=place, message="Review added successfully")
    """

    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None
    pagination: Optional[Pagination] = None


class ErrorResponse(CamelModel):
    """
    Standardized error body for all failures, documented on each route.

    Fields:
        error:      Machine-readable code (e.g. "not_owner", "duplicate_review")
        message:    Human-readable description, safe to show to users
        details:    Optional extra context (e.g. the offending field)
        request_id: Correlation ID for tracing the failure in server logs
    """

    success: bool = False
    error: str
    message: str
    details: Optional[dict] = None
    request_id: Optional[str] = None


class HealthResponse(CamelModel):
    """
    Liveness and dependency status returned by GET /api/health.

    A process that cannot reach its database is reported as degraded rather
    than healthy.
    """

    status: str = Field(description="healthy or degraded")
    version: str
    database: str = Field(description="connected or disconnected")
    uptime_seconds: float
