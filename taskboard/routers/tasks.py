"""Task management API router.

Every route depends on CurrentSession, so an unauthenticated request is
rejected with 401 before any task lookup happens.
"""

from uuid import UUID

from fastapi import APIRouter, status

from taskboard.deps import CurrentSession, DbSession
from taskboard.logger import async_log_timing, get_logger
from taskboard.schemas import (
    MessageResponse,
    TaskCreate,
    TaskResponse,
    TaskUpdate,
)
from taskboard.services import TaskNotFoundError, TaskValidationError, task_service
from taskboard.utils import raise_bad_request, raise_not_found

router = APIRouter(prefix="/tasks", tags=["tasks"])
logger = get_logger(__name__)


def _parse_task_id(task_id: str) -> UUID:
    """A malformed id cannot name a task the caller owns."""
    try:
        return UUID(task_id)
    except ValueError as exc:
        logger.debug("Malformed task id", task_id=task_id)
        raise_not_found("Task", cause=exc)


@router.get("", response_model=list[TaskResponse])
async def list_tasks(db: DbSession, session: CurrentSession) -> list[TaskResponse]:
    """List the caller's tasks, newest first."""
    async with async_log_timing(
        "list_tasks", logger=logger, level="debug", user_id=str(session.user.id)
    ) as timing:
        tasks = await task_service.list_tasks(db, session.user.id)
        timing["count"] = len(tasks)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.get("/{task_id}", response_model=TaskResponse)
async def get_task(task_id: str, db: DbSession, session: CurrentSession) -> TaskResponse:
    """Get a single task."""
    try:
        task = await task_service.get_task(db, session.user.id, _parse_task_id(task_id))
    except TaskNotFoundError as e:
        logger.debug("Task not found", task_id=task_id)
        raise_not_found("Task", cause=e)

    return TaskResponse.model_validate(task)


@router.post("", response_model=TaskResponse, status_code=status.HTTP_201_CREATED)
async def create_task(
    task_data: TaskCreate,
    db: DbSession,
    session: CurrentSession,
) -> TaskResponse:
    """Create a new pending task."""
    try:
        task = await task_service.create_task(db, session.user.id, task_data)
    except TaskValidationError as e:
        raise_bad_request(str(e), cause=e)

    await db.commit()
    return TaskResponse.model_validate(task)


@router.put("/{task_id}", response_model=TaskResponse)
async def update_task(
    task_id: str,
    task_data: TaskUpdate,
    db: DbSession,
    session: CurrentSession,
) -> TaskResponse:
    """Update title, description and/or status. Omitted fields are unchanged."""
    try:
        task = await task_service.update_task(
            db, session.user.id, _parse_task_id(task_id), task_data
        )
    except TaskValidationError as e:
        raise_bad_request(str(e), cause=e)
    except TaskNotFoundError as e:
        logger.debug("Task not found for update", task_id=task_id)
        raise_not_found("Task", cause=e)

    await db.commit()
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", response_model=MessageResponse)
async def delete_task(task_id: str, db: DbSession, session: CurrentSession) -> MessageResponse:
    """Delete a task."""
    try:
        await task_service.delete_task(db, session.user.id, _parse_task_id(task_id))
    except TaskNotFoundError as e:
        logger.debug("Task not found for deletion", task_id=task_id)
        raise_not_found("Task", cause=e)

    await db.commit()
    return MessageResponse(message="Task deleted successfully")


@router.patch("/{task_id}/toggle", response_model=TaskResponse)
async def toggle_task(task_id: str, db: DbSession, session: CurrentSession) -> TaskResponse:
    """Flip the task between pending and completed."""
    try:
        task = await task_service.toggle_task_status(
            db, session.user.id, _parse_task_id(task_id)
        )
    except TaskNotFoundError as e:
        logger.debug("Task not found for toggle", task_id=task_id)
        raise_not_found("Task", cause=e)

    await db.commit()
    return TaskResponse.model_validate(task)
