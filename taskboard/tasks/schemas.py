"""
Taskboard API - Task Schemas

Pydantic models for task API requests and responses.
"""

from datetime import datetime
from typing import Annotated, Optional, List

from pydantic import Field, StringConstraints, ValidationInfo, field_validator

from taskboard.tasks.enums import TaskStatus, TaskPriority, TaskType
from taskboard.tasks.models import Task
from taskboard.validation import MAX_ID, CamelModel, as_utc, validation_now


TitleStr = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

DEADLINE_IN_PAST_MESSAGE = "Deadline must be in the future"

MAX_PAGE_SIZE = 100
# Keeps the skip offset, (page - 1) * limit, within MAX_ID
MAX_PAGE = MAX_ID // MAX_PAGE_SIZE


def _future_deadline(value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
    value = as_utc(value)
    if value is not None and value <= validation_now(info):
        raise ValueError(DEADLINE_IN_PAST_MESSAGE)
    return value


class TaskCreateRequest(CamelModel):
    """Request model for creating a task."""

    title: TitleStr = Field(description="Task title")
    description: Optional[str] = Field(default=None, max_length=5000, description="Task description")
    type: Optional[TaskType] = Field(default=None, description="Work item type")
    status: TaskStatus = Field(default=TaskStatus.TODO, description="Task status")
    priority: TaskPriority = Field(default=TaskPriority.MEDIUM, description="Task priority")
    deadline: Optional[datetime] = Field(default=None, description="Task deadline, must be in the future")
    assignee_id: Optional[int] = Field(default=None, ge=0, le=MAX_ID, description="Assigned user ID")

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        return _future_deadline(value, info)


class TaskUpdateRequest(CamelModel):
    """Request model for updating a task.

    Only keys present in the payload are applied. Nullable fields accept an
    explicit null to clear them; title, status and priority do not.
    """

    title: Optional[TitleStr] = Field(default=None, description="Task title")
    description: Optional[str] = Field(default=None, max_length=5000, description="Task description")
    type: Optional[TaskType] = Field(default=None, description="Work item type")
    status: Optional[TaskStatus] = Field(default=None, description="Task status")
    priority: Optional[TaskPriority] = Field(default=None, description="Task priority")
    deadline: Optional[datetime] = Field(default=None, description="Task deadline, must be in the future")
    assignee_id: Optional[int] = Field(default=None, ge=0, le=MAX_ID, description="Assigned user ID")

    @field_validator("title", "status", "priority")
    @classmethod
    def not_null(cls, value):
        if value is None:
            raise ValueError("Field cannot be null")
        return value

    @field_validator("deadline")
    @classmethod
    def deadline_in_future(cls, value: Optional[datetime], info: ValidationInfo) -> Optional[datetime]:
        return _future_deadline(value, info)

    def changes(self) -> dict:
        """The supplied fields, keyed by attribute name."""
        return self.model_dump(exclude_unset=True)


class TaskPathParams(CamelModel):
    """Path parameters for single-task routes."""

    id: int = Field(gt=0, le=MAX_ID)


class TaskListQuery(CamelModel):
    """Query parameters for listing tasks."""

    status: Optional[TaskStatus] = None
    priority: Optional[TaskPriority] = None
    created_from: Optional[datetime] = None
    created_to: Optional[datetime] = None
    page: int = Field(default=1, ge=1, le=MAX_PAGE)
    limit: int = Field(default=20, ge=1, le=MAX_PAGE_SIZE)

    @field_validator("created_from", "created_to")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return as_utc(value)

    @property
    def paginated(self) -> bool:
        """True when the caller asked for a page explicitly."""
        return bool({"page", "limit"} & self.model_fields_set)


class AssigneeResponse(CamelModel):
    """Public fields of a task's assignee."""

    id: int
    firstname: str
    lastname: str
    email: str


class TaskResponse(CamelModel):
    """Response model for a single task."""

    id: int = Field(description="Task ID")
    title: str = Field(description="Task title")
    description: Optional[str] = Field(default=None, description="Task description")
    type: Optional[TaskType] = Field(default=None, description="Work item type")
    status: TaskStatus = Field(description="Task status")
    priority: TaskPriority = Field(description="Task priority")
    deadline: Optional[datetime] = Field(default=None, description="Task deadline")
    assignee_id: Optional[int] = Field(default=None, description="Assigned user ID")
    assignee: Optional[AssigneeResponse] = Field(default=None, description="Assigned user")
    created_at: datetime = Field(description="Creation timestamp")
    updated_at: datetime = Field(description="Last update timestamp")

    @classmethod
    def from_task(cls, task: Task) -> "TaskResponse":
        assignee = None
        if task.assignee is not None:
            assignee = AssigneeResponse(
                id=task.assignee.id,
                firstname=task.assignee.firstname,
                lastname=task.assignee.lastname,
                email=task.assignee.email,
            )
        return cls(
            id=task.id,
            title=task.title,
            description=task.description,
            type=task.type,
            status=task.status,
            priority=task.priority,
            deadline=task.deadline,
            assignee_id=task.assignee_id,
            assignee=assignee,
            created_at=task.created_at,
            updated_at=task.updated_at,
        )


class Pagination(CamelModel):
    """Page metadata for paginated listings."""

    total: int = Field(description="Tasks matching the filters before paging")
    page: int
    limit: int
    total_pages: int
    has_next: bool
    has_prev: bool


class TaskPage(CamelModel):
    """Envelope for a paginated task listing."""

    items: List[TaskResponse]
    pagination: Pagination
