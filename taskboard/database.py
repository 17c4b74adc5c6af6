"""
Taskboard API - Database Module

MongoDB connection management using Motor (async driver).
"""

import logging

from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase
from pymongo import ASCENDING, DESCENDING, ReturnDocument

from taskboard.config import settings

logger = logging.getLogger(__name__)

COUNTERS_COLLECTION = "counters"


class Database:
    """MongoDB database connection manager."""

    client: AsyncIOMotorClient | None = None
    db: AsyncIOMotorDatabase | None = None

    async def connect(self) -> None:
        """Connect to MongoDB."""
        # Timestamps are read back as UTC-aware datetimes
        self.client = AsyncIOMotorClient(settings.MONGODB_URI, tz_aware=True)
        self.db = self.client[settings.MONGODB_DATABASE]
        logger.info("Connected to MongoDB database %s", settings.MONGODB_DATABASE)

    async def disconnect(self) -> None:
        """Disconnect from MongoDB."""
        if self.client:
            self.client.close()
            self.client = None
            self.db = None

    async def ensure_indexes(self) -> None:
        """
        Create the indexes the repositories rely on.

        The unique index on ``users.email_lower`` is what turns two racing
        registrations for the same address into a DuplicateKeyError.
        """
        db = self.get_database()
        await db["users"].create_index([("email_lower", ASCENDING)], unique=True)
        await db["users"].create_index([("created_at", DESCENDING)])
        await db["tasks"].create_index([("created_at", DESCENDING), ("_id", DESCENDING)])
        await db["tasks"].create_index([("status", ASCENDING), ("priority", ASCENDING)])
        await db["tasks"].create_index([("assignee_id", ASCENDING)])

    def get_database(self) -> AsyncIOMotorDatabase:
        """Get the database instance."""
        if self.db is None:
            raise RuntimeError("Database not connected. Call connect() first.")
        return self.db


async def next_sequence(db: AsyncIOMotorDatabase, name: str) -> int:
    """Atomically allocate the next integer id for a collection."""
    counter = await db[COUNTERS_COLLECTION].find_one_and_update(
        {"_id": name},
        {"$inc": {"seq": 1}},
        upsert=True,
        return_document=ReturnDocument.AFTER,
    )
    return counter["seq"]


# Singleton database instance
database = Database()


async def get_database() -> AsyncIOMotorDatabase:
    """Dependency to get the database instance."""
    return database.get_database()
