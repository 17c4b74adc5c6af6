"""
Taskboard API - Token Codec

Issues and verifies the signed, expiring identity tokens handed out on
register/login. The codec holds an immutable TokenSettings value, so one
instance can serve concurrent requests without locking.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import jwt, JWTError

from taskboard.config import settings


@dataclass(frozen=True)
class TokenSettings:
    """Signing configuration, fixed at startup."""

    secret_key: str
    algorithm: str = "HS256"
    expires_delta: timedelta = timedelta(days=7)

    @classmethod
    def from_settings(cls) -> "TokenSettings":
        return cls(
            secret_key=settings.JWT_SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            expires_delta=timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
        )


@dataclass(frozen=True)
class TokenClaims:
    """Decoded contents of a valid token."""

    user_id: int
    email: str
    issued_at: datetime
    expires_at: datetime


class TokenCodec:
    """JWT encode/verify bound to one secret."""

    def __init__(self, token_settings: TokenSettings):
        self._settings = token_settings

    def issue(
        self,
        user_id: int,
        email: str,
        expires_delta: Optional[timedelta] = None,
    ) -> str:
        """Create a signed token for the given identity."""
        if expires_delta is None:
            expires_delta = self._settings.expires_delta

        now = datetime.now(timezone.utc)
        to_encode = {
            "userId": user_id,
            "email": email,
            "iat": now,
            "exp": now + expires_delta,
        }
        return jwt.encode(
            to_encode,
            self._settings.secret_key,
            algorithm=self._settings.algorithm,
        )

    def verify(self, token: Optional[str]) -> Optional[TokenClaims]:
        """
        Decode and validate a token.

        Returns None for blank input, a malformed token, a bad signature, an
        expired token or a payload without a usable identity. Never raises.
        """
        if not isinstance(token, str) or not token.strip():
            return None

        try:
            payload = jwt.decode(
                token,
                self._settings.secret_key,
                algorithms=[self._settings.algorithm],
            )
        except JWTError:
            return None

        user_id = payload.get("userId")
        email = payload.get("email")
        issued_at = payload.get("iat")
        expires_at = payload.get("exp")
        if isinstance(user_id, bool) or not isinstance(user_id, int):
            return None
        if not isinstance(email, str):
            return None
        if not isinstance(issued_at, (int, float)) or not isinstance(expires_at, (int, float)):
            return None

        return TokenClaims(
            user_id=user_id,
            email=email,
            issued_at=datetime.fromtimestamp(issued_at, tz=timezone.utc),
            expires_at=datetime.fromtimestamp(expires_at, tz=timezone.utc),
        )


# Process-wide codec, built once from the environment
token_codec = TokenCodec(TokenSettings.from_settings())


def get_token_codec() -> TokenCodec:
    """Dependency to get the token codec."""
    return token_codec
