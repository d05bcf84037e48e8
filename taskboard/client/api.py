"""HTTP client for the Taskboard API.

The server sets the session cookie on login; the underlying httpx cookie
jar replays it on every later call, so callers never handle the token.
"""

from typing import Any
from uuid import UUID

import httpx

from taskboard.logger import get_logger
from taskboard.schemas import TaskResponse, UserResponse

logger = get_logger(__name__)

GENERIC_ERROR_MESSAGE = "Something went wrong. Please try again."


class ApiError(Exception):
    """A request failed; message is the server's text when it sent one."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code

    @property
    def is_unauthorized(self) -> bool:
        return self.status_code == 401


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return GENERIC_ERROR_MESSAGE
    if isinstance(body, dict):
        detail = body.get("detail") or body.get("message")
        if isinstance(detail, str) and detail:
            return detail
    return GENERIC_ERROR_MESSAGE


class TaskboardClient:
    """Async wrapper around the Taskboard REST routes."""

    def __init__(
        self,
        base_url: str,
        *,
        cookies: dict[str, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._http = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            cookies=cookies,
            timeout=timeout,
            transport=transport,
            headers={"Content-Type": "application/json"},
        )

    async def __aenter__(self) -> "TaskboardClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    @property
    def cookies(self) -> dict[str, str]:
        """Current cookie values, for persisting a session between runs."""
        return {cookie.name: cookie.value for cookie in self._http.cookies.jar}

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = await self._http.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("API request failed", method=method, path=path, error=str(exc))
            raise ApiError(GENERIC_ERROR_MESSAGE) from exc

        if response.is_error:
            raise ApiError(_error_message(response), response.status_code)
        return response

    # --- auth ---

    async def register(self, username: str, email: str, password: str) -> UserResponse:
        response = await self._request(
            "POST",
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
        return UserResponse.model_validate(response.json())

    async def login(self, email: str, password: str) -> UserResponse:
        response = await self._request(
            "POST", "/auth/login", json={"email": email, "password": password}
        )
        return UserResponse.model_validate(response.json()["user"])

    async def logout(self) -> None:
        try:
            await self._request("POST", "/auth/logout")
        finally:
            # The server clears the cookie too; drop ours even if that call failed
            self._http.cookies.clear()

    async def me(self) -> UserResponse:
        response = await self._request("GET", "/auth/me")
        return UserResponse.model_validate(response.json()["user"])

    # --- tasks ---

    async def list_tasks(self) -> list[TaskResponse]:
        response = await self._request("GET", "/tasks")
        return [TaskResponse.model_validate(item) for item in response.json()]

    async def get_task(self, task_id: UUID | str) -> TaskResponse:
        response = await self._request("GET", f"/tasks/{task_id}")
        return TaskResponse.model_validate(response.json())

    async def create_task(self, title: str, description: str | None = None) -> TaskResponse:
        body: dict[str, Any] = {"title": title}
        if description is not None:
            body["description"] = description
        response = await self._request("POST", "/tasks", json=body)
        return TaskResponse.model_validate(response.json())

    async def update_task(self, task_id: UUID | str, **fields: Any) -> TaskResponse:
        """Send only the given fields (title, description, status)."""
        response = await self._request("PUT", f"/tasks/{task_id}", json=fields)
        return TaskResponse.model_validate(response.json())

    async def delete_task(self, task_id: UUID | str) -> str:
        response = await self._request("DELETE", f"/tasks/{task_id}")
        return response.json()["message"]

    async def toggle_task(self, task_id: UUID | str) -> TaskResponse:
        response = await self._request("PATCH", f"/tasks/{task_id}/toggle")
        return TaskResponse.model_validate(response.json())
