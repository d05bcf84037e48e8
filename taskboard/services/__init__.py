"""Domain services."""

from taskboard.services import auth_service, task_service
from taskboard.services.auth_service import AuthError, AuthServiceError, RegistrationError
from taskboard.services.task_service import (
    TaskNotFoundError,
    TaskServiceError,
    TaskValidationError,
)

__all__ = [
    "AuthError",
    "AuthServiceError",
    "RegistrationError",
    "TaskNotFoundError",
    "TaskServiceError",
    "TaskValidationError",
    "auth_service",
    "task_service",
]
