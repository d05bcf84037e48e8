"""Tests for the HTTP client."""

import json

import httpx
import pytest

from taskboard.client import GENERIC_ERROR_MESSAGE, ApiError, TaskboardClient
from taskboard.models import TaskStatus


def _mock_client(handler) -> TaskboardClient:
    return TaskboardClient("http://api.test/api", transport=httpx.MockTransport(handler))


@pytest.mark.asyncio
async def test_register_does_not_start_session(api_client):
    user = await api_client.register("dana", "dana@example.com", "password123")

    assert user.email == "dana@example.com"
    assert api_client.cookies == {}
    with pytest.raises(ApiError) as exc_info:
        await api_client.me()
    assert exc_info.value.is_unauthorized


@pytest.mark.asyncio
async def test_login_keeps_cookie(api_client):
    await api_client.register("dana", "dana@example.com", "password123")

    user = await api_client.login("dana@example.com", "password123")

    assert user.username == "dana"
    assert "token" in api_client.cookies
    assert (await api_client.me()).id == user.id


@pytest.mark.asyncio
async def test_task_lifecycle(api_client):
    await api_client.register("dana", "dana@example.com", "password123")
    await api_client.login("dana@example.com", "password123")

    created = await api_client.create_task("Buy milk")
    assert created.status is TaskStatus.PENDING
    assert created.description == ""

    updated = await api_client.update_task(created.id, description="2 litres")
    assert updated.description == "2 litres"
    assert updated.title == "Buy milk"

    toggled = await api_client.toggle_task(created.id)
    assert toggled.status is TaskStatus.COMPLETED

    assert [task.id for task in await api_client.list_tasks()] == [created.id]
    assert (await api_client.get_task(created.id)).status is TaskStatus.COMPLETED

    assert await api_client.delete_task(created.id) == "Task deleted successfully"
    assert await api_client.list_tasks() == []


@pytest.mark.asyncio
async def test_server_message_is_surfaced(api_client):
    await api_client.register("dana", "dana@example.com", "password123")
    await api_client.login("dana@example.com", "password123")

    with pytest.raises(ApiError) as exc_info:
        await api_client.create_task("   ")

    assert exc_info.value.message == "Task title is required"
    assert exc_info.value.status_code == 400


@pytest.mark.asyncio
async def test_logout_drops_cookie(api_client):
    await api_client.register("dana", "dana@example.com", "password123")
    await api_client.login("dana@example.com", "password123")

    await api_client.logout()

    assert api_client.cookies == {}


@pytest.mark.asyncio
async def test_logout_drops_cookie_even_on_failure():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(503, text="unavailable")

    async with TaskboardClient(
        "http://api.test/api",
        cookies={"token": "abc"},
        transport=httpx.MockTransport(handler),
    ) as client:
        with pytest.raises(ApiError):
            await client.logout()

        assert client.cookies == {}


@pytest.mark.asyncio
async def test_non_json_error_uses_generic_message():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="<html>bad gateway</html>")

    async with _mock_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.list_tasks()

    assert exc_info.value.message == GENERIC_ERROR_MESSAGE
    assert exc_info.value.status_code == 502


@pytest.mark.asyncio
async def test_message_field_is_used():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(409, json={"message": "Conflict!"})

    async with _mock_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.me()

    assert exc_info.value.message == "Conflict!"


@pytest.mark.asyncio
async def test_network_error_uses_generic_message():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with _mock_client(handler) as client:
        with pytest.raises(ApiError) as exc_info:
            await client.list_tasks()

    assert exc_info.value.message == GENERIC_ERROR_MESSAGE
    assert exc_info.value.status_code is None
    assert not exc_info.value.is_unauthorized


@pytest.mark.asyncio
async def test_update_sends_only_given_fields():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json={
                "id": "8c3c8c58-6b0c-4d2a-9a58-0b7f0f3c1d11",
                "user_id": "1d7b0d47-52a3-4f1b-8c88-3b8c0a5f6e22",
                "title": "t",
                "description": "",
                "status": "completed",
                "created_at": "2024-01-01T00:00:00Z",
                "updated_at": "2024-01-01T00:00:00Z",
            },
        )

    async with _mock_client(handler) as client:
        await client.update_task("8c3c8c58-6b0c-4d2a-9a58-0b7f0f3c1d11", status="completed")

    assert seen["method"] == "PUT"
    assert seen["path"] == "/api/tasks/8c3c8c58-6b0c-4d2a-9a58-0b7f0f3c1d11"
    assert seen["body"] == {"status": "completed"}
