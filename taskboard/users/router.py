"""
Taskboard API - Users Router

Profile endpoints and the user directory. All endpoints are JWT-protected.
"""

from typing import Annotated, List

from fastapi import APIRouter, Depends

from taskboard.auth.dependencies import CurrentIdentity, get_user_repository
from taskboard.auth.repository import UserRepositoryInterface
from taskboard.auth.schemas import UserResponse
from taskboard.users.schemas import ProfileUpdateRequest
from taskboard.users.service import UserService


router = APIRouter(tags=["Users"])


async def get_user_service(
    repository: Annotated[UserRepositoryInterface, Depends(get_user_repository)]
) -> UserService:
    """Dependency to get user service instance."""
    return UserService(repository)


@router.get(
    "/profile",
    response_model=UserResponse,
    summary="Get the current user's profile",
)
async def get_profile(
    identity: CurrentIdentity,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    """Returns 404 if the token's user no longer exists."""
    return await service.get_profile(identity.user_id)


@router.put(
    "/profile",
    response_model=UserResponse,
    summary="Update the current user's profile",
)
async def update_profile(
    request: ProfileUpdateRequest,
    identity: CurrentIdentity,
    service: Annotated[UserService, Depends(get_user_service)],
) -> UserResponse:
    return await service.update_profile(identity.user_id, request)


@router.get(
    "/users",
    response_model=List[UserResponse],
    summary="List users",
)
async def list_users(
    identity: CurrentIdentity,
    service: Annotated[UserService, Depends(get_user_service)],
) -> List[UserResponse]:
    """All registered users, newest first. Used to pick task assignees."""
    return await service.list_users()
