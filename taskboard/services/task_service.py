"""Task management service.

Every query filters on the caller's user id. A task owned by someone else
is reported exactly like a missing one.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.logger import get_logger
from taskboard.models import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, Task, TaskStatus
from taskboard.schemas.task import TaskCreate, TaskUpdate

logger = get_logger(__name__)


class TaskServiceError(Exception):
    """Base exception for task service errors."""


class TaskNotFoundError(TaskServiceError):
    """Task does not exist or is not owned by the caller."""

    def __init__(self, task_id: UUID | str) -> None:
        self.task_id = task_id
        super().__init__("Task not found")


class TaskValidationError(TaskServiceError):
    """Task input rejected before any write."""


def _clean_title(title: str | None) -> str:
    if title is None or not title.strip():
        raise TaskValidationError("Task title is required")
    title = title.strip()
    if len(title) > TITLE_MAX_LENGTH:
        raise TaskValidationError(f"Task title cannot exceed {TITLE_MAX_LENGTH} characters")
    return title


def _clean_description(description: str | None) -> str:
    description = (description or "").strip()
    if len(description) > DESCRIPTION_MAX_LENGTH:
        raise TaskValidationError(
            f"Task description cannot exceed {DESCRIPTION_MAX_LENGTH} characters"
        )
    return description


def _clean_status(value: Any) -> TaskStatus:
    try:
        return TaskStatus(value)
    except ValueError as exc:
        raise TaskValidationError("Invalid status value") from exc


def _owned(user_id: UUID, task_id: UUID):
    return select(Task).where(Task.id == task_id).where(Task.user_id == user_id)


async def list_tasks(db: AsyncSession, user_id: UUID) -> list[Task]:
    result = await db.execute(
        select(Task).where(Task.user_id == user_id).order_by(Task.created_at.desc())
    )
    return list(result.scalars().all())


async def get_task(db: AsyncSession, user_id: UUID, task_id: UUID) -> Task:
    result = await db.execute(_owned(user_id, task_id))
    task = result.scalar_one_or_none()

    if not task:
        raise TaskNotFoundError(task_id)

    return task


async def create_task(db: AsyncSession, user_id: UUID, task_data: TaskCreate) -> Task:
    task = Task(
        user_id=user_id,
        title=_clean_title(task_data.title),
        description=_clean_description(task_data.description),
        status=TaskStatus.PENDING,
    )
    db.add(task)
    await db.flush()
    await db.refresh(task)
    logger.info("Task created", task_id=str(task.id), user_id=str(user_id))
    return task


async def update_task(
    db: AsyncSession, user_id: UUID, task_id: UUID, task_data: TaskUpdate
) -> Task:
    """Apply only the fields present in task_data.

    Input is validated in full before the task is looked up, so a rejected
    update never touches the store.
    """
    update_data = task_data.model_dump(exclude_unset=True)
    changes: dict[str, Any] = {}
    if "title" in update_data:
        changes["title"] = _clean_title(update_data["title"])
    if "description" in update_data:
        changes["description"] = _clean_description(update_data["description"])
    if "status" in update_data:
        changes["status"] = _clean_status(update_data["status"])

    task = await get_task(db, user_id, task_id)
    for field, value in changes.items():
        setattr(task, field, value)

    await db.flush()
    await db.refresh(task)
    return task


async def delete_task(db: AsyncSession, user_id: UUID, task_id: UUID) -> None:
    task = await get_task(db, user_id, task_id)
    await db.delete(task)
    await db.flush()
    logger.info("Task deleted", task_id=str(task_id), user_id=str(user_id))


async def toggle_task_status(db: AsyncSession, user_id: UUID, task_id: UUID) -> Task:
    """Flip pending <-> completed under a row lock."""
    result = await db.execute(_owned(user_id, task_id).with_for_update())
    task = result.scalar_one_or_none()

    if not task:
        raise TaskNotFoundError(task_id)

    task.status = task.status.flipped()
    await db.flush()
    await db.refresh(task)
    return task
