from taskboard.schemas.auth import LoginRequest, LoginResponse, RegisterRequest, SessionResponse
from taskboard.schemas.base import MessageResponse
from taskboard.schemas.task import TaskCreate, TaskResponse, TaskUpdate
from taskboard.schemas.user import UserResponse

__all__ = [
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RegisterRequest",
    "SessionResponse",
    "TaskCreate",
    "TaskResponse",
    "TaskUpdate",
    "UserResponse",
]
