"""Bearer token handling for caller identities."""

from datetime import datetime, timedelta, timezone
from typing import Any

from jose import JWTError, jwt

from formproof.forms import Caller
from formproof.logging_config import get_logger
from formproof.settings import Settings, settings as default_settings

logger = get_logger(__name__)

JWT_EXPIRE_HOURS = 2


class TokenService:
    """Issues and verifies JWTs whose ``sub`` claim is the caller identity."""

    def __init__(self, settings: Settings | None = None):
        settings = settings or default_settings
        self.secret_key = settings.jwt_secret_key
        self.algorithm = settings.jwt_algorithm
        self.logger = get_logger(__name__)

    def create_access_token(
        self,
        uid: str,
        email: str = "",
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create JWT access token.

        Args:
            uid: Caller identity
            email: Optional email claim
            expires_delta: Optional expiration time

        Returns:
            JWT token string
        """
        if expires_delta is None:
            expires_delta = timedelta(hours=JWT_EXPIRE_HOURS)

        now = datetime.now(timezone.utc)
        payload = {
            "sub": uid,
            "email": email,
            "exp": now + expires_delta,
            "iat": now,
        }
        return jwt.encode(payload, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str) -> dict[str, Any] | None:
        """Verify and decode JWT token.

        Returns:
            Token payload or None if invalid
        """
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            self.logger.debug("token_verification_failed", error=str(e))
            return None

    def get_caller(self, token: str) -> Caller | None:
        """Resolve the caller identity carried by a token."""
        payload = self.verify_token(token)
        if not payload:
            return None

        uid = payload.get("sub")
        if not uid or not isinstance(uid, str):
            return None

        return Caller(uid=uid, email=payload.get("email") or "")
