"""
Taskboard API - Task Models

Internal task model for database operations.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from taskboard.tasks.enums import TaskStatus, TaskPriority, TaskType


def _utcnow() -> datetime:
    """Get current UTC time as timezone-aware datetime."""
    return datetime.now(timezone.utc)


# Fields a create or update may set
TASK_FIELDS = ("title", "description", "status", "priority", "type", "deadline", "assignee_id")


@dataclass
class Assignee:
    """Public profile of the user a task is assigned to."""

    id: int
    firstname: str
    lastname: str
    email: str

    @classmethod
    def from_dict(cls, data: dict) -> "Assignee":
        return cls(
            id=data["_id"],
            firstname=data["firstname"],
            lastname=data["lastname"],
            email=data["email"],
        )


@dataclass
class Task:
    """Task entity for database storage.

    ``assignee`` is filled in by repository reads and is never stored.
    """

    id: int
    title: str
    status: TaskStatus = TaskStatus.TODO
    priority: TaskPriority = TaskPriority.MEDIUM
    description: Optional[str] = None
    type: Optional[TaskType] = None
    deadline: Optional[datetime] = None
    assignee_id: Optional[int] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    assignee: Optional[Assignee] = None

    @classmethod
    def create(
        cls,
        task_id: int,
        title: str,
        status: TaskStatus = TaskStatus.TODO,
        priority: TaskPriority = TaskPriority.MEDIUM,
        description: Optional[str] = None,
        type: Optional[TaskType] = None,
        deadline: Optional[datetime] = None,
        assignee_id: Optional[int] = None,
    ) -> "Task":
        """Create a new task with the given sequence ID."""
        now = _utcnow()
        return cls(
            id=task_id,
            title=title,
            status=status,
            priority=priority,
            description=description,
            type=type,
            deadline=deadline,
            assignee_id=assignee_id,
            created_at=now,
            updated_at=now,
        )

    def to_dict(self) -> dict:
        """Convert task to dictionary for MongoDB storage."""
        return {
            "_id": self.id,
            "title": self.title,
            "status": self.status.value,
            "priority": self.priority.value,
            "description": self.description,
            "type": self.type.value if self.type else None,
            "deadline": self.deadline,
            "assignee_id": self.assignee_id,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create task from MongoDB document, with an optional joined assignee."""
        assignee_docs = data.get("assignee") or []
        return cls(
            id=data["_id"],
            title=data["title"],
            status=TaskStatus(data["status"]),
            priority=TaskPriority(data["priority"]),
            description=data.get("description"),
            type=TaskType(data["type"]) if data.get("type") else None,
            deadline=data.get("deadline"),
            assignee_id=data.get("assignee_id"),
            created_at=data["created_at"],
            updated_at=data["updated_at"],
            assignee=Assignee.from_dict(assignee_docs[0]) if assignee_docs else None,
        )
