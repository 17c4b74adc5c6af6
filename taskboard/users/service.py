"""
Taskboard API - User Service

Business logic for profile reads and updates and the user directory.
"""

import logging
from typing import List

from taskboard.auth.models import PROFILE_FIELDS
from taskboard.auth.repository import UserRepositoryInterface
from taskboard.auth.schemas import UserResponse
from taskboard.errors import NotFoundError, ValidationError
from taskboard.users.schemas import ProfileUpdateRequest

logger = logging.getLogger(__name__)

EMAIL_IN_USE_MESSAGE = "Email is already in use"


class UserService:
    """Service layer for user profiles."""

    def __init__(self, repository: UserRepositoryInterface):
        self.repository = repository

    async def get_profile(self, user_id: int) -> UserResponse:
        user = await self.repository.get_by_id(user_id)
        if user is None:
            raise NotFoundError("User")
        return UserResponse.from_user(user)

    async def update_profile(self, user_id: int, request: ProfileUpdateRequest) -> UserResponse:
        """
        Apply a profile update for ``user_id``.

        Taking an email another user already has is a validation failure; if
        another user claims it between the check and the write, the repository
        raises ConflictError instead.
        """
        if await self.repository.get_by_id(user_id) is None:
            raise NotFoundError("User")

        owner = await self.repository.get_by_email(request.email)
        if owner is not None and owner.id != user_id:
            raise ValidationError(
                "Validation failed",
                details=[{"path": ["email"], "message": EMAIL_IN_USE_MESSAGE}],
            )

        changes = {
            key: value
            for key, value in request.model_dump(exclude_unset=True).items()
            if key in PROFILE_FIELDS
        }
        user = await self.repository.update(user_id, changes)
        if user is None:
            raise NotFoundError("User")

        logger.info("Updated profile for user id=%s fields=%s", user_id, sorted(changes))
        return UserResponse.from_user(user)

    async def list_users(self) -> List[UserResponse]:
        """All users, newest first, without password hashes."""
        users = await self.repository.list_all()
        return [UserResponse.from_user(user) for user in users]
