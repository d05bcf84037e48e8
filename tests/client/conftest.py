"""Fixtures for client-side tests."""

from datetime import UTC, datetime, timedelta
from uuid import uuid4

import httpx
import pytest
import pytest_asyncio

from taskboard.client import SessionState, TaskboardClient
from taskboard.models import TaskStatus
from taskboard.schemas import TaskResponse


@pytest_asyncio.fixture
async def api_client(app):
    """TaskboardClient wired to the in-process app."""
    async with TaskboardClient("http://test/api", transport=httpx.ASGITransport(app=app)) as client:
        yield client


@pytest_asyncio.fixture
async def logged_in(api_client):
    """Authenticated SessionState for a fresh account."""
    session = SessionState(api_client)
    await session.register("carol", "carol@example.com", "password123")
    await session.login("carol@example.com", "password123")
    return session


@pytest.fixture
def make_task():
    """Build TaskResponse values without a server; ``age`` in minutes."""
    owner = uuid4()

    def _make(title: str, status: TaskStatus = TaskStatus.PENDING, age: int = 0) -> TaskResponse:
        stamp = datetime(2024, 1, 1, tzinfo=UTC) - timedelta(minutes=age)
        return TaskResponse(
            id=uuid4(),
            user_id=owner,
            title=title,
            description="",
            status=status,
            created_at=stamp,
            updated_at=stamp,
        )

    return _make
