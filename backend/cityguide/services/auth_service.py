"""
CityGuide Backend — Authentication Service
============================================

What:  Account registration, credential checks and bearer-token resolution.
How:   Passwords are hashed with bcrypt (cost from BCRYPT_ROUNDS). Emails are
       stored lower-cased so lookups are case-insensitive.
Who:   /api/auth routes and dependencies.get_current_user.

Failure mapping:
    missing fields / short password   → ValidationError      (400)
    email already registered          → EmailTakenError      (400)
    unknown email or wrong password   → AuthenticationError  (401), same message
    token valid but user deleted      → AuthenticationError  (401)
    user banned                       → AccountBannedError   (403)
"""

import logging
import uuid
from typing import Optional, Tuple

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cityguide.config import settings
from cityguide.exceptions import (
    AccountBannedError,
    AuthenticationError,
    EmailTakenError,
    ValidationError,
)
from cityguide.models.user import ROLE_USER, User
from cityguide.services.token_service import token_service

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# bcrypt only looks at the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72

INVALID_CREDENTIALS = "Invalid email or password"


def normalize_email(email: str) -> str:
    return email.strip().lower()


def hash_password(password: str) -> str:
    salt = bcrypt.gensalt(rounds=settings.bcrypt_rounds)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        logger.warning("Unreadable password hash encountered during login")
        return False


def validate_password(password: str) -> None:
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            message=f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            field="password",
        )
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(
            message=f"Password must be at most {MAX_PASSWORD_BYTES} bytes",
            field="password",
        )


class AuthService:
    """Stateless; every method receives the request's session."""

    async def register(
        self, db: AsyncSession, name: str, email: str, password: str
    ) -> Tuple[User, str]:
        """
        Creates a regular user and returns it with a fresh token.

        Raises:
            ValidationError: a field is blank or the password is out of bounds
            EmailTakenError: the lower-cased email already exists
        """
        name = (name or "").strip()
        email = normalize_email(email or "")
        if not name or not email or not password:
            raise ValidationError(message="Please provide name, email, and password")
        validate_password(password)

        if await self.get_by_email(db, email) is not None:
            raise EmailTakenError(context={"email": email})

        user = User(
            name=name,
            email=email,
            password_hash=hash_password(password),
            role=ROLE_USER,
            is_active=True,
        )
        db.add(user)
        try:
            await db.flush()
        except IntegrityError:
            # Lost a race with a concurrent registration for the same email
            raise EmailTakenError(context={"email": email}) from None

        logger.info("User registered: %s", user.id)
        return user, self.issue_token(user)

    async def login(self, db: AsyncSession, email: str, password: str) -> Tuple[User, str]:
        """
        Verifies credentials and returns the user with a fresh token.

        Banned accounts may still log in; every authenticated request after
        that fails with AccountBannedError.
        """
        email = normalize_email(email or "")
        if not email or not password:
            raise ValidationError(message="Please provide email and password")

        user = await self.get_by_email(db, email)
        if user is None or not verify_password(password, user.password_hash):
            raise AuthenticationError(message=INVALID_CREDENTIALS)

        logger.info("User logged in: %s", user.id)
        return user, self.issue_token(user)

    async def resolve_token(self, db: AsyncSession, token: str) -> User:
        """
        Maps a bearer token to an active user row.

        Raises:
            InvalidTokenError: signature or expiry check failed
            AuthenticationError: the user no longer exists
            AccountBannedError: the user is banned
        """
        claims = token_service.verify(token)
        try:
            user_id = uuid.UUID(str(claims["userId"]))
        except ValueError:
            raise AuthenticationError(message="User not found") from None

        user = await db.get(User, user_id)
        if user is None:
            raise AuthenticationError(message="User not found", context={"user_id": str(user_id)})
        if not user.is_active:
            logger.warning("Banned user attempted access: %s", user.id)
            raise AccountBannedError(context={"user_id": str(user.id)})
        return user

    async def get_by_email(self, db: AsyncSession, email: str) -> Optional[User]:
        result = await db.execute(select(User).where(User.email == normalize_email(email)))
        return result.scalar_one_or_none()

    @staticmethod
    def issue_token(user: User) -> str:
        return token_service.issue(
            user_id=str(user.id), email=user.email, name=user.name, role=user.role
        )


auth_service = AuthService()
