"""
Taskboard API - Task Router

CRUD endpoints for task management.
All endpoints are JWT-protected.
"""

from typing import Annotated, List, Union

from fastapi import APIRouter, Depends, Request, Response, status
from motor.motor_asyncio import AsyncIOMotorDatabase

from taskboard.database import get_database
from taskboard.auth.dependencies import CurrentIdentity, get_user_repository
from taskboard.auth.repository import UserRepositoryInterface
from taskboard.errors import NotFoundError
from taskboard.tasks.repository import TaskFilters, TaskRepository, TaskRepositoryInterface
from taskboard.tasks.schemas import (
    TaskCreateRequest,
    TaskListQuery,
    TaskPage,
    TaskPathParams,
    TaskResponse,
    TaskUpdateRequest,
)
from taskboard.tasks.service import TaskService
from taskboard.validation import parse


router = APIRouter(prefix="/tasks", tags=["Tasks"])


async def get_task_repository(
    db: Annotated[AsyncIOMotorDatabase, Depends(get_database)]
) -> TaskRepositoryInterface:
    """Dependency to get task repository instance."""
    return TaskRepository(db)


async def get_task_service(
    repository: Annotated[TaskRepositoryInterface, Depends(get_task_repository)],
    user_repository: Annotated[UserRepositoryInterface, Depends(get_user_repository)],
) -> TaskService:
    """Dependency to get task service instance."""
    return TaskService(repository, user_repository)


def get_task_id(task_id: str) -> int:
    """Coerce the path segment to a positive integer ID."""
    return parse(TaskPathParams, {"id": task_id}).id


TaskId = Annotated[int, Depends(get_task_id)]


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new task",
)
async def create_task(
    request: TaskCreateRequest,
    identity: CurrentIdentity,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    """
    Create a new task.

    Status defaults to `todo` and priority to `medium`.
    Returns 404 if `assigneeId` names a user that does not exist.
    """
    return await service.create_task(request)


@router.get(
    "",
    response_model=Union[TaskPage, List[TaskResponse]],
    summary="List tasks",
)
async def list_tasks(
    request: Request,
    identity: CurrentIdentity,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> Union[TaskPage, List[TaskResponse]]:
    """
    Filter by `status`, `priority`, `createdFrom` and `createdTo`.

    Contract:
    - Without `page`/`limit`: every matching task, newest first
    - With `page` or `limit`: `{items, pagination}` envelope, limit at most 100
    """
    query = parse(TaskListQuery, dict(request.query_params))
    filters = TaskFilters(
        status=query.status,
        priority=query.priority,
        created_from=query.created_from,
        created_to=query.created_to,
    )
    if not query.paginated:
        return await service.list_tasks(filters)
    return await service.list_tasks(filters, page=query.page, limit=query.limit)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get a task by ID",
)
async def get_task(
    identity: CurrentIdentity,
    task_id: TaskId,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    """
    Get a specific task by ID, with its assignee.

    Returns 404 if the task doesn't exist.
    """
    task = await service.get_task(task_id)
    if task is None:
        raise NotFoundError("Task")
    return task


@router.put(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update a task",
)
async def update_task(
    identity: CurrentIdentity,
    task_id: TaskId,
    request: TaskUpdateRequest,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> TaskResponse:
    """
    Update a task by ID.

    Only provided fields will be updated.
    Returns 404 if the task or the new assignee doesn't exist.
    """
    return await service.update_task(task_id, request.changes())


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    response_class=Response,
    summary="Delete a task",
)
async def delete_task(
    identity: CurrentIdentity,
    task_id: TaskId,
    service: Annotated[TaskService, Depends(get_task_service)],
) -> Response:
    """
    Delete a task by ID.

    Returns 404 if the task doesn't exist, including when it was already deleted.
    """
    deleted = await service.delete_task(task_id)
    if not deleted:
        raise NotFoundError("Task")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
