"""SQLAlchemy models package."""

from taskboard.models.task import DESCRIPTION_MAX_LENGTH, TITLE_MAX_LENGTH, Task, TaskStatus
from taskboard.models.user import User

__all__ = [
    "DESCRIPTION_MAX_LENGTH",
    "TITLE_MAX_LENGTH",
    "Task",
    "TaskStatus",
    "User",
]
