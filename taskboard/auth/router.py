"""
Taskboard API - Authentication Router

Endpoints for user registration and login.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, status

from taskboard.auth.dependencies import get_auth_service
from taskboard.auth.schemas import UserRegisterRequest, UserLoginRequest, AuthResponse
from taskboard.auth.service import AuthService


router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post(
    "/register",
    response_model=AuthResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new user",
)
async def register(
    request: UserRegisterRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Register a new user and return it with an access token.

    - Firstname and lastname must be at least 2 characters
    - Password must be at least 6 characters
    - Email must be unique (case-insensitive)
    """
    result = await auth_service.register(request)
    return AuthResponse(user=result.user, token=result.token)


@router.post(
    "/login",
    response_model=AuthResponse,
    summary="Login and get access token",
)
async def login(
    request: UserLoginRequest,
    auth_service: Annotated[AuthService, Depends(get_auth_service)],
) -> AuthResponse:
    """
    Authenticate user and return a token.

    Use the returned token in the Authorization header:
    `Authorization: Bearer <token>`
    """
    result = await auth_service.login(request)
    return AuthResponse(user=result.user, token=result.token)
