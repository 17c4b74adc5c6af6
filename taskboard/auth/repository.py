"""
Taskboard API - User Repository

Repository pattern for user data access.
Includes MongoDB implementation for runtime and an in-memory one for testing.
"""

import itertools
import logging
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Optional, List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from taskboard.auth.models import User
from taskboard.database import next_sequence
from taskboard.errors import ConflictError

logger = logging.getLogger(__name__)

EMAIL_TAKEN_MESSAGE = "User with this email already exists"


class UserRepositoryInterface(ABC):
    """Abstract interface for user repository.

    Email lookups are case-insensitive. ``create`` and ``update`` raise
    ConflictError when the store rejects a duplicate email, so callers do not
    depend on a check-then-write pre-check alone.
    """

    @abstractmethod
    async def create(self, fields: dict) -> User:
        """Create a new user, assigning its ID."""
        pass

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[User]:
        pass

    @abstractmethod
    async def get_by_email(self, email: str) -> Optional[User]:
        pass

    @abstractmethod
    async def exists_by_email(self, email: str) -> bool:
        pass

    @abstractmethod
    async def update(self, user_id: int, fields: dict) -> Optional[User]:
        pass

    @abstractmethod
    async def list_all(self) -> List[User]:
        """All users, newest first."""
        pass


class MongoUserRepository(UserRepositoryInterface):
    """MongoDB implementation of the user repository."""

    COLLECTION_NAME = "users"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.COLLECTION_NAME]

    async def create(self, fields: dict) -> User:
        user_id = await next_sequence(self.db, self.COLLECTION_NAME)
        user = User.create(user_id=user_id, **fields)
        try:
            await self.collection.insert_one(user.to_dict())
        except DuplicateKeyError:
            logger.info("Rejected duplicate email on insert for user id=%s", user_id)
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        doc = await self.collection.find_one({"_id": user_id})
        if doc is None:
            return None
        return User.from_dict(doc)

    async def get_by_email(self, email: str) -> Optional[User]:
        doc = await self.collection.find_one({"email_lower": email.strip().lower()})
        if doc is None:
            return None
        return User.from_dict(doc)

    async def exists_by_email(self, email: str) -> bool:
        count = await self.collection.count_documents(
            {"email_lower": email.strip().lower()}, limit=1
        )
        return count > 0

    async def update(self, user_id: int, fields: dict) -> Optional[User]:
        updates = dict(fields)
        if "email" in updates:
            updates["email_lower"] = updates["email"].lower()
        updates["updated_at"] = datetime.now(timezone.utc)
        try:
            doc = await self.collection.find_one_and_update(
                {"_id": user_id},
                {"$set": updates},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        if doc is None:
            return None
        return User.from_dict(doc)

    async def list_all(self) -> List[User]:
        cursor = self.collection.find().sort([("created_at", -1), ("_id", -1)])
        users: List[User] = []
        async for doc in cursor:
            users.append(User.from_dict(doc))
        return users


class InMemoryUserRepository(UserRepositoryInterface):
    """
    In-memory implementation for CI-safe testing.
    """

    def __init__(self):
        self._users: dict[int, User] = {}
        self._ids = itertools.count(1)

    def clear(self) -> None:
        self._users.clear()
        self._ids = itertools.count(1)

    def _find_email(self, email: str) -> Optional[User]:
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user
        return None

    async def create(self, fields: dict) -> User:
        if self._find_email(fields["email"]) is not None:
            raise ConflictError(EMAIL_TAKEN_MESSAGE)
        user = User.create(user_id=next(self._ids), **fields)
        self._users[user.id] = user
        return user

    async def get_by_id(self, user_id: int) -> Optional[User]:
        return self._users.get(user_id)

    async def get_by_email(self, email: str) -> Optional[User]:
        return self._find_email(email)

    async def exists_by_email(self, email: str) -> bool:
        return self._find_email(email) is not None

    async def update(self, user_id: int, fields: dict) -> Optional[User]:
        user = self._users.get(user_id)
        if user is None:
            return None

        if "email" in fields:
            other = self._find_email(fields["email"])
            if other is not None and other.id != user_id:
                raise ConflictError(EMAIL_TAKEN_MESSAGE)

        for key, value in fields.items():
            if hasattr(user, key):
                setattr(user, key, value)

        user.updated_at = datetime.now(timezone.utc)
        return user

    async def list_all(self) -> List[User]:
        return sorted(
            self._users.values(),
            key=lambda u: (u.created_at, u.id),
            reverse=True,
        )
