"""Task list view model.

Holds the fetched task list, the active filter and a queue of
notifications. Every successful mutation is followed by a full refetch
instead of patching the local list.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Literal, TypeVar
from uuid import UUID

from taskboard.client.api import ApiError, TaskboardClient
from taskboard.client.session import SessionState
from taskboard.logger import get_logger
from taskboard.models.task import TaskStatus
from taskboard.schemas import TaskResponse

logger = get_logger(__name__)

T = TypeVar("T")

NotificationKind = Literal["success", "warning", "error"]


class TaskFilter(str, Enum):
    ALL = "all"
    PENDING = "pending"
    COMPLETED = "completed"


@dataclass(frozen=True)
class Notification:
    kind: NotificationKind
    title: str
    message: str


class ViewBusyError(RuntimeError):
    """Raised when a mutation is started while another is still running."""


class TaskListView:
    """State behind the task list screen."""

    def __init__(self, client: TaskboardClient, session: SessionState) -> None:
        self.client = client
        self.session = session
        self.tasks: list[TaskResponse] = []
        self.filter = TaskFilter.ALL
        self.loaded = False
        self.busy = False
        self.load_error: str | None = None
        self.notifications: list[Notification] = []

    # --- derived state, no requests ---

    @property
    def visible(self) -> list[TaskResponse]:
        if self.filter is TaskFilter.ALL:
            return list(self.tasks)
        return [task for task in self.tasks if task.status.value == self.filter.value]

    @property
    def counts(self) -> dict[TaskFilter, int]:
        pending = sum(1 for task in self.tasks if task.status is TaskStatus.PENDING)
        return {
            TaskFilter.ALL: len(self.tasks),
            TaskFilter.PENDING: pending,
            TaskFilter.COMPLETED: len(self.tasks) - pending,
        }

    def set_filter(self, value: TaskFilter | str) -> None:
        self.filter = TaskFilter(value)

    def notify(self, kind: NotificationKind, title: str, message: str) -> Notification:
        notification = Notification(kind=kind, title=title, message=message)
        self.notifications.append(notification)
        return notification

    # --- requests ---

    async def load(self) -> list[TaskResponse]:
        """Fetch the full list from the server."""
        if not self.session.is_authenticated:
            raise ApiError("Please log in to view your tasks", 401)
        try:
            self.tasks = await self.client.list_tasks()
        except ApiError as exc:
            self.load_error = exc.message
            raise
        self.load_error = None
        self.loaded = True
        return self.tasks

    async def _mutate(
        self,
        action: Callable[[], Awaitable[T]],
        on_success: Callable[[T], tuple[NotificationKind, str, str]],
        failure_title: str,
    ) -> T | None:
        if self.busy:
            raise ViewBusyError("Another change is still being saved")

        self.busy = True
        try:
            try:
                result = await action()
            except ApiError as exc:
                logger.debug("Task mutation failed", status_code=exc.status_code)
                self.notify("error", failure_title, exc.message)
                return None

            self.notify(*on_success(result))
            try:
                await self.load()
            except ApiError as exc:
                self.notify("error", "Failed to Load Tasks", exc.message)
            return result
        finally:
            self.busy = False

    async def create(self, title: str, description: str = "") -> TaskResponse | None:
        if not title.strip():
            self.notify("error", "Failed to Create Task", "Task title is required")
            return None
        return await self._mutate(
            lambda: self.client.create_task(title.strip(), description.strip()),
            lambda _: ("success", "Task Created!", "Your new task has been added successfully."),
            "Failed to Create Task",
        )

    async def update(self, task_id: UUID | str, **fields: Any) -> TaskResponse | None:
        return await self._mutate(
            lambda: self.client.update_task(task_id, **fields),
            lambda _: ("warning", "Task Updated!", "Your task has been updated successfully."),
            "Failed to Update Task",
        )

    async def delete(self, task_id: UUID | str) -> str | None:
        return await self._mutate(
            lambda: self.client.delete_task(task_id),
            lambda _: ("error", "Task Deleted!", "The task has been removed successfully."),
            "Failed to Delete Task",
        )

    async def toggle(self, task_id: UUID | str) -> TaskResponse | None:
        return await self._mutate(
            lambda: self.client.toggle_task(task_id),
            lambda task: (
                "success",
                f"Task {task.status.value}!",
                f"Task has been marked as {task.status.value}.",
            ),
            "Failed to Update Status",
        )
