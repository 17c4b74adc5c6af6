import logging
from dataclasses import dataclass
from typing import Optional

import bcrypt

from taskboard.config import settings
from taskboard.auth.repository import UserRepositoryInterface, EMAIL_TAKEN_MESSAGE
from taskboard.auth.schemas import UserRegisterRequest, UserLoginRequest, UserResponse
from taskboard.auth.tokens import TokenCodec
from taskboard.errors import ConflictError, UnauthorizedError

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"

# bcrypt only looks at the first 72 bytes of a password
_BCRYPT_MAX_BYTES = 72


@dataclass
class AuthResult:
    user: UserResponse
    token: str


class AuthService:
    """Authentication service with password hashing and token issuance."""

    def __init__(
        self,
        repository: UserRepositoryInterface,
        token_codec: TokenCodec,
        rounds: Optional[int] = None,
    ):
        self.repository = repository
        self.token_codec = token_codec
        self.rounds = rounds or settings.BCRYPT_ROUNDS

    def hash_password(self, password: str) -> str:
        """Hash a password using bcrypt with a fresh salt."""
        password_bytes = password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(password_bytes, salt).decode("utf-8")

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash."""
        password_bytes = plain_password.encode("utf-8")[:_BCRYPT_MAX_BYTES]
        hashed_bytes = hashed_password.encode("utf-8")
        try:
            return bcrypt.checkpw(password_bytes, hashed_bytes)
        except ValueError:
            # Stored value is not a bcrypt hash
            logger.warning("Stored password hash is malformed")
            return False

    async def register(self, request: UserRegisterRequest) -> AuthResult:
        """Register a new user and issue a token.

        Raises ConflictError when the email (case-insensitive) is taken. The
        repository raises the same error if a concurrent registration wins
        the race after the existence check.
        """
        email = request.email.strip()
        if await self.repository.exists_by_email(email):
            raise ConflictError(EMAIL_TAKEN_MESSAGE)

        user = await self.repository.create({
            "firstname": request.firstname,
            "lastname": request.lastname,
            "email": email,
            "password_hash": self.hash_password(request.password),
            "mobile_phone": request.mobile_phone,
            "country": request.country,
            "city": request.city,
            "address": request.address,
        })
        logger.info("Registered user id=%s", user.id)

        token = self.token_codec.issue(user_id=user.id, email=user.email)
        return AuthResult(user=UserResponse.from_user(user), token=token)

    async def login(self, request: UserLoginRequest) -> AuthResult:
        """Authenticate by email and password.

        Unknown email and wrong password fail with the same message.
        """
        user = await self.repository.get_by_email(request.email.strip())
        if user is None or not self.verify_password(request.password, user.password_hash):
            logger.warning("Failed login attempt")
            raise UnauthorizedError(INVALID_CREDENTIALS_MESSAGE)

        logger.info("User id=%s logged in", user.id)
        token = self.token_codec.issue(user_id=user.id, email=user.email)
        return AuthResult(user=UserResponse.from_user(user), token=token)
