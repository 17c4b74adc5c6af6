"""
Taskboard API - Auth Dependencies

Bearer extraction, the request auth gate and FastAPI dependency providers.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from fastapi.responses import JSONResponse
from motor.motor_asyncio import AsyncIOMotorDatabase

from taskboard.database import get_database
from taskboard.auth.repository import MongoUserRepository, UserRepositoryInterface
from taskboard.auth.service import AuthService
from taskboard.auth.tokens import TokenClaims, TokenCodec, get_token_codec
from taskboard.errors import UnauthorizedError, error_response


BEARER_PREFIX = "Bearer "
AUTH_REQUIRED_MESSAGE = "Authentication required"


def extract_bearer(header: Optional[str]) -> Optional[str]:
    """
    Pull the token out of an ``Authorization`` header value.

    Only the exact ``"Bearer "`` prefix is accepted. The remainder is returned
    as-is, so ``"Bearer  abc"`` yields ``" abc"``.
    """
    # TODO: decide whether to trim the token once existing clients are checked
    # for a double space after "Bearer"; kept verbatim for compatibility.
    if not header or not header.startswith(BEARER_PREFIX):
        return None
    return header[len(BEARER_PREFIX):]


def authenticate(request: Request, codec: TokenCodec) -> Optional[TokenClaims]:
    """Resolve the request's identity, or None."""
    token = extract_bearer(request.headers.get("Authorization"))
    if token is None:
        return None
    return codec.verify(token)


def check_auth(request: Request, codec: TokenCodec) -> Optional[UnauthorizedError]:
    """
    Auth gate for protected operations.

    Returns the error to report when the request is not authenticated. On
    success the claims are stored on ``request.state.identity`` and None is
    returned.
    """
    claims = authenticate(request, codec)
    if claims is None:
        return UnauthorizedError(AUTH_REQUIRED_MESSAGE)
    request.state.identity = claims
    return None


def require_auth(request: Request, codec: TokenCodec) -> Optional[JSONResponse]:
    """The gate as a response: a 401 when it objects, otherwise None."""
    error = check_auth(request, codec)
    if error is None:
        return None
    return error_response(error)


async def get_current_identity(
    request: Request,
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> TokenClaims:
    """Dependency that lets a route run only for authenticated requests."""
    error = check_auth(request, codec)
    if error is not None:
        raise error
    return request.state.identity


def get_user_repository(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> UserRepositoryInterface:
    """Dependency to get the MongoDB user repository."""
    return MongoUserRepository(db)


def get_auth_service(
    repository: Annotated[UserRepositoryInterface, Depends(get_user_repository)],
    codec: Annotated[TokenCodec, Depends(get_token_codec)],
) -> AuthService:
    """Dependency to get AuthService instance."""
    return AuthService(repository, codec)


# Type alias for cleaner dependency injection
CurrentIdentity = Annotated[TokenClaims, Depends(get_current_identity)]
