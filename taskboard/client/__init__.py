"""Client application for the Taskboard API."""

from taskboard.client.api import GENERIC_ERROR_MESSAGE, ApiError, TaskboardClient
from taskboard.client.session import SessionState, SessionStatus
from taskboard.client.views import Notification, TaskFilter, TaskListView, ViewBusyError

__all__ = [
    "GENERIC_ERROR_MESSAGE",
    "ApiError",
    "Notification",
    "SessionState",
    "SessionStatus",
    "TaskFilter",
    "TaskListView",
    "TaskboardClient",
    "ViewBusyError",
]
