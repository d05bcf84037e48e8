"""Pydantic schemas for tasks."""

from uuid import UUID

from pydantic import BaseModel

from taskboard.models.task import TaskStatus
from taskboard.schemas.base import BaseResponse, UTCDateTime


class TaskCreate(BaseModel):
    """Schema for creating a task."""

    title: str
    description: str | None = None


class TaskUpdate(BaseModel):
    """Schema for a partial task update.

    Only fields present in the request body are applied; use
    ``model_dump(exclude_unset=True)`` to tell "absent" from "null".
    """

    title: str | None = None
    description: str | None = None
    status: TaskStatus | None = None


class TaskResponse(BaseResponse):
    """Schema for task response."""

    id: UUID
    user_id: UUID
    title: str
    description: str
    status: TaskStatus
    created_at: UTCDateTime
    updated_at: UTCDateTime
