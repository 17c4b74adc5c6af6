"""
Taskboard API - Task Repository

Repository pattern for task data access.
Includes MongoDB implementation for runtime and interface for testing.
"""

import dataclasses
import itertools
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, List

from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument

from taskboard.auth.repository import UserRepositoryInterface
from taskboard.database import next_sequence
from taskboard.tasks.enums import TaskStatus, TaskPriority
from taskboard.tasks.models import Assignee, Task


@dataclass
class TaskFilters:
    """Conjunctive list filters. The created_at bounds are inclusive."""

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None

    def matches(self, task: Task) -> bool:
        if self.status is not None and task.status != self.status:
            return False
        if self.priority is not None and task.priority != self.priority:
            return False
        created_at = task.created_at
        if created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        if self.created_from is not None and created_at < self.created_from:
            return False
        if self.created_to is not None and created_at > self.created_to:
            return False
        return True


def _storable(updates: dict) -> dict:
    """Enums are stored by value."""
    return {
        key: value.value if isinstance(value, Enum) else value
        for key, value in updates.items()
    }


class TaskRepositoryInterface(ABC):
    """
    Abstract interface for task repository.

    Enables swapping implementations (MongoDB for runtime, in-memory for tests).
    Reads return tasks with the assignee's public fields joined in.
    """

    @abstractmethod
    async def create(self, fields: dict) -> Task:
        """Create a task, assigning its ID."""
        pass

    @abstractmethod
    async def get_by_id(self, task_id: int) -> Optional[Task]:
        pass

    @abstractmethod
    async def list(
        self,
        filters: TaskFilters,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Task]:
        """List matching tasks, most recently created first."""
        pass

    @abstractmethod
    async def count(self, filters: TaskFilters) -> int:
        pass

    @abstractmethod
    async def update(self, task_id: int, updates: dict) -> Optional[Task]:
        pass

    @abstractmethod
    async def delete(self, task_id: int) -> bool:
        pass


class TaskRepository(TaskRepositoryInterface):
    """
    MongoDB implementation of the task repository.

    The assignee join is a ``$lookup`` into the users collection.
    """

    COLLECTION_NAME = "tasks"
    USERS_COLLECTION = "users"

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.COLLECTION_NAME]

    @staticmethod
    def _query(filters: TaskFilters) -> dict:
        query: dict = {}
        if filters.status is not None:
            query["status"] = filters.status.value
        if filters.priority is not None:
            query["priority"] = filters.priority.value
        if filters.created_from is not None or filters.created_to is not None:
            query["created_at"] = {}
            if filters.created_from is not None:
                query["created_at"]["$gte"] = filters.created_from
            if filters.created_to is not None:
                query["created_at"]["$lte"] = filters.created_to
        return query

    def _join_assignee(self) -> list[dict]:
        return [
            {
                "$lookup": {
                    "from": self.USERS_COLLECTION,
                    "localField": "assignee_id",
                    "foreignField": "_id",
                    "as": "assignee",
                }
            },
            {"$project": {"assignee.password_hash": 0, "assignee.email_lower": 0}},
        ]

    async def _aggregate(self, pipeline: list[dict]) -> List[Task]:
        tasks: List[Task] = []
        async for doc in self.collection.aggregate(pipeline):
            tasks.append(Task.from_dict(doc))
        return tasks

    async def create(self, fields: dict) -> Task:
        task_id = await next_sequence(self.db, self.COLLECTION_NAME)
        task = Task.create(task_id=task_id, **fields)
        await self.collection.insert_one(task.to_dict())
        return task

    async def get_by_id(self, task_id: int) -> Optional[Task]:
        pipeline = [{"$match": {"_id": task_id}}, {"$limit": 1}, *self._join_assignee()]
        tasks = await self._aggregate(pipeline)
        return tasks[0] if tasks else None

    async def list(
        self,
        filters: TaskFilters,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Task]:
        pipeline: list[dict] = [
            {"$match": self._query(filters)},
            {"$sort": {"created_at": -1, "_id": -1}},
        ]
        if skip:
            pipeline.append({"$skip": skip})
        if limit is not None:
            pipeline.append({"$limit": limit})
        pipeline.extend(self._join_assignee())
        return await self._aggregate(pipeline)

    async def count(self, filters: TaskFilters) -> int:
        return await self.collection.count_documents(self._query(filters))

    async def update(self, task_id: int, updates: dict) -> Optional[Task]:
        updates = _storable(updates)
        updates["updated_at"] = datetime.now(timezone.utc)

        result = await self.collection.find_one_and_update(
            {"_id": task_id},
            {"$set": updates},
            return_document=ReturnDocument.AFTER,
        )
        if result is None:
            return None
        return await self.get_by_id(task_id)

    async def delete(self, task_id: int) -> bool:
        result = await self.collection.delete_one({"_id": task_id})
        return result.deleted_count > 0


class InMemoryTaskRepository(TaskRepositoryInterface):
    """
    In-memory implementation for CI-safe testing.

    Joins assignees through the given user repository when one is provided.
    """

    def __init__(self, users: Optional[UserRepositoryInterface] = None):
        self._tasks: dict[int, Task] = {}
        self._ids = itertools.count(1)
        self._users = users

    def clear(self) -> None:
        self._tasks.clear()
        self._ids = itertools.count(1)

    async def _with_assignee(self, task: Task) -> Task:
        assignee = None
        if task.assignee_id is not None and self._users is not None:
            user = await self._users.get_by_id(task.assignee_id)
            if user is not None:
                assignee = Assignee(
                    id=user.id,
                    firstname=user.firstname,
                    lastname=user.lastname,
                    email=user.email,
                )
        return dataclasses.replace(task, assignee=assignee)

    async def create(self, fields: dict) -> Task:
        task = Task.create(task_id=next(self._ids), **fields)
        self._tasks[task.id] = task
        return dataclasses.replace(task)

    async def get_by_id(self, task_id: int) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None:
            return None
        return await self._with_assignee(task)

    async def list(
        self,
        filters: TaskFilters,
        skip: int = 0,
        limit: Optional[int] = None,
    ) -> List[Task]:
        results = [task for task in self._tasks.values() if filters.matches(task)]
        results.sort(key=lambda t: (t.created_at, t.id), reverse=True)
        end = None if limit is None else skip + limit
        return [await self._with_assignee(task) for task in results[skip:end]]

    async def count(self, filters: TaskFilters) -> int:
        return sum(1 for t in self._tasks.values() if filters.matches(t))

    async def update(self, task_id: int, updates: dict) -> Optional[Task]:
        task = self._tasks.get(task_id)
        if task is None:
            return None

        for key, value in updates.items():
            if hasattr(task, key):
                setattr(task, key, value)

        task.updated_at = datetime.now(timezone.utc)
        return await self._with_assignee(task)

    async def delete(self, task_id: int) -> bool:
        if task_id not in self._tasks:
            return False
        del self._tasks[task_id]
        return True
