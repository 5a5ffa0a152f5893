"""
CityGuide Backend — Access Token Service
==========================================

What:  Issues and verifies the HS256 bearer tokens returned by register/login.
How:   PyJWT. Claims are userId, email, name, role plus iat/exp; expiry is
       JWT_EXPIRY_DAYS after issue.
Who:   AuthService (issue), dependencies.get_current_user (verify).

The role claim is informational only. Every authenticated request re-reads the
user row, so bans and role changes take effect without re-issuing tokens.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from cityguide.config import settings
from cityguide.exceptions import InvalidTokenError

REQUIRED_CLAIMS = ("userId", "exp")


class TokenService:
    def __init__(
        self,
        secret: Optional[str] = None,
        algorithm: Optional[str] = None,
        expires_delta: Optional[timedelta] = None,
    ):
        self.secret = secret or settings.jwt_secret
        self.algorithm = algorithm or settings.jwt_algorithm
        self.expires_delta = expires_delta or timedelta(days=settings.jwt_expiry_days)

        if not self.secret:
            raise ValueError("JWT secret is not set.")

    def issue(self, user_id: str, email: str, name: str, role: str) -> str:
        """Signs an access token for the given user."""
        now = datetime.now(timezone.utc)
        payload = {
            "userId": user_id,
            "email": email,
            "name": name,
            "role": role,
            "iat": int(now.timestamp()),
            "exp": int((now + self.expires_delta).timestamp()),
        }
        return jwt.encode(payload, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Checks signature and expiry and returns the claims.

        Raises:
            InvalidTokenError: bad signature, expired, malformed or missing userId.
        """
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[self.algorithm],
                options={"require": list(REQUIRED_CLAIMS)},
            )
        except jwt.PyJWTError as e:
            raise InvalidTokenError(context={"reason": type(e).__name__}) from None

        if not payload.get("userId"):
            raise InvalidTokenError(context={"reason": "missing userId"})
        return payload


token_service = TokenService()
