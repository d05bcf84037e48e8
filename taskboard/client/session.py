"""Client-side session state."""

from enum import Enum

from taskboard.client.api import ApiError, TaskboardClient
from taskboard.logger import get_logger
from taskboard.schemas import UserResponse

logger = get_logger(__name__)


class SessionStatus(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    AUTHENTICATED = "authenticated"
    ANONYMOUS = "anonymous"


class SessionState:
    """Who the client is logged in as.

    Lifecycle: uninitialized -> loading -> authenticated | anonymous. Views
    receive an instance explicitly and should render nothing user-specific
    while ``is_loading`` is true.
    """

    def __init__(self, client: TaskboardClient) -> None:
        self.client = client
        self.status = SessionStatus.UNINITIALIZED
        self.user: UserResponse | None = None

    @property
    def is_loading(self) -> bool:
        return self.status in (SessionStatus.UNINITIALIZED, SessionStatus.LOADING)

    @property
    def is_authenticated(self) -> bool:
        return self.status is SessionStatus.AUTHENTICATED and self.user is not None

    def _set_user(self, user: UserResponse | None) -> None:
        self.user = user
        self.status = SessionStatus.AUTHENTICATED if user else SessionStatus.ANONYMOUS

    async def initialize(self) -> None:
        """Ask the server whether the stored cookie still names a user."""
        self.status = SessionStatus.LOADING
        try:
            user = await self.client.me()
        except ApiError as exc:
            logger.debug("Session check failed", status_code=exc.status_code)
            user = None
        self._set_user(user)

    async def login(self, email: str, password: str) -> UserResponse:
        """Log in; on failure the session is left unchanged and ApiError propagates."""
        try:
            user = await self.client.login(email, password)
        except ApiError as exc:
            message = exc.message if exc.status_code else "Login failed"
            raise ApiError(message, exc.status_code) from exc
        self._set_user(user)
        return user

    async def register(self, username: str, email: str, password: str) -> UserResponse:
        """Create an account. Registration does not log the user in."""
        return await self.client.register(username, email, password)

    async def logout(self) -> None:
        """End the session locally no matter what the server says."""
        try:
            await self.client.logout()
        except ApiError as exc:
            logger.warning("Logout request failed", error=exc.message)
        finally:
            self._set_user(None)
