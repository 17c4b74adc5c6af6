"""
Taskboard API - Task Service

Business logic for task operations: assignee checks, deadline rules,
partial updates and filtered pagination.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Optional, List, Callable, Union

from taskboard.auth.repository import UserRepositoryInterface
from taskboard.errors import NotFoundError, ValidationError
from taskboard.tasks.models import TASK_FIELDS
from taskboard.tasks.repository import TaskFilters, TaskRepositoryInterface
from taskboard.tasks.schemas import (
    DEADLINE_IN_PAST_MESSAGE,
    Pagination,
    TaskCreateRequest,
    TaskPage,
    TaskResponse,
)
from taskboard.validation import as_utc

logger = logging.getLogger(__name__)


class TaskService:
    """Service layer for task business logic."""

    def __init__(
        self,
        repository: TaskRepositoryInterface,
        user_repository: UserRepositoryInterface,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize the task service.

        Args:
            repository: Task repository implementation
            user_repository: Used to check that assignees exist
            clock: Optional clock function for testing (returns current datetime)
        """
        self.repository = repository
        self.user_repository = user_repository
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    def _now(self) -> datetime:
        """Get current time using the configured clock."""
        return self._clock()

    def _check_deadline(self, deadline: Optional[datetime]) -> None:
        if deadline is not None and as_utc(deadline) <= self._now():
            raise ValidationError(
                "Validation failed",
                details=[{"path": ["deadline"], "message": DEADLINE_IN_PAST_MESSAGE}],
            )

    async def _check_assignee(self, assignee_id: Optional[int]) -> None:
        if assignee_id is None:
            return
        if await self.user_repository.get_by_id(assignee_id) is None:
            raise NotFoundError("Assignee")

    async def create_task(self, request: TaskCreateRequest) -> TaskResponse:
        """Create a task. The assignee, when given, must exist."""
        self._check_deadline(request.deadline)
        await self._check_assignee(request.assignee_id)

        task = await self.repository.create({
            "title": request.title,
            "description": request.description,
            "type": request.type,
            "status": request.status,
            "priority": request.priority,
            "deadline": as_utc(request.deadline),
            "assignee_id": request.assignee_id,
        })
        logger.info("Created task id=%s", task.id)

        # Re-read to pick up the joined assignee
        created = await self.repository.get_by_id(task.id)
        return TaskResponse.from_task(created or task)

    async def get_task(self, task_id: int) -> Optional[TaskResponse]:
        """Get a task with its assignee, or None."""
        task = await self.repository.get_by_id(task_id)
        if task is None:
            return None
        return TaskResponse.from_task(task)

    async def update_task(self, task_id: int, changes: dict) -> TaskResponse:
        """
        Apply a partial update.

        ``changes`` holds only the keys the caller supplied; every other field
        keeps its stored value. The deadline rule is checked against the
        service clock at update time.
        """
        current = await self.repository.get_by_id(task_id)
        if current is None:
            raise NotFoundError("Task")

        updates = {key: value for key, value in changes.items() if key in TASK_FIELDS}

        if "deadline" in updates:
            updates["deadline"] = as_utc(updates["deadline"])
            self._check_deadline(updates["deadline"])

        if "assignee_id" in updates and updates["assignee_id"] != current.assignee_id:
            await self._check_assignee(updates["assignee_id"])

        if not updates:
            # No updates provided, just return current task
            return TaskResponse.from_task(current)

        task = await self.repository.update(task_id, updates)
        if task is None:
            # Deleted between the read and the write
            raise NotFoundError("Task")

        logger.info("Updated task id=%s fields=%s", task_id, sorted(updates))
        return TaskResponse.from_task(task)

    async def delete_task(self, task_id: int) -> bool:
        """Delete a task. Returns False when it does not exist."""
        deleted = await self.repository.delete(task_id)
        if deleted:
            logger.info("Deleted task id=%s", task_id)
        return deleted

    async def count_tasks(self, filters: TaskFilters) -> int:
        """Count tasks matching the filters."""
        return await self.repository.count(filters)

    async def list_tasks(
        self,
        filters: TaskFilters,
        page: Optional[int] = None,
        limit: Optional[int] = None,
    ) -> Union[List[TaskResponse], TaskPage]:
        """
        List tasks newest first.

        Without page/limit the whole filtered set is returned. With either of
        them a TaskPage envelope is returned instead.
        """
        if page is None and limit is None:
            tasks = await self.repository.list(filters)
            return [TaskResponse.from_task(task) for task in tasks]

        page = page or 1
        limit = limit or 20
        total = await self.count_tasks(filters)
        tasks = await self.repository.list(filters, skip=(page - 1) * limit, limit=limit)
        total_pages = math.ceil(total / limit)

        return TaskPage(
            items=[TaskResponse.from_task(task) for task in tasks],
            pagination=Pagination(
                total=total,
                page=page,
                limit=limit,
                total_pages=total_pages,
                has_next=page < total_pages,
                has_prev=page > 1,
            ),
        )
