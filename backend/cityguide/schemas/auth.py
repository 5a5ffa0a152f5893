"""Request and response schemas for /api/auth."""

import uuid

from pydantic import Field

from cityguide.schemas.common import CamelModel


class RegisterRequest(CamelModel):
    name: str = Field(min_length=1, max_length=120)
    email: str = Field(min_length=3, max_length=255)
    password: str = Field(description="At least 6 characters, at most 72 bytes")


class LoginRequest(CamelModel):
    email: str
    password: str


class UserPublic(CamelModel):
    """The profile fields echoed back to the account holder."""

    id: uuid.UUID
    name: str
    email: str
    role: str


class AuthPayload(CamelModel):
    token: str = Field(description="Bearer token, valid for JWT_EXPIRY_DAYS")
    user: UserPublic
