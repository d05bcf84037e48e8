"""Test fixtures and configuration."""

import logging
import os
import sys

# Settings are read once at import; pin them before any taskboard module loads
os.environ["ENVIRONMENT"] = "testing"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.pop("REDIS_URL", None)

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
import structlog  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import NullPool  # noqa: E402

from taskboard import database  # noqa: E402
from taskboard.database import init_db  # noqa: E402
from taskboard.rate_limit import login_rate_limiter, register_rate_limiter  # noqa: E402

DEFAULT_PASSWORD = "secret123"


# --- Structlog Configuration for Tests ---
@pytest.fixture(autouse=True, scope="session")
def configure_structlog_for_tests():
    """Route structlog through stdlib so caplog/capsys see records."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.dev.ConsoleRenderer(colors=False),
        foreign_pre_chain=processors[:-1],
    )
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG)

    yield

    structlog.reset_defaults()


@pytest.fixture(autouse=True)
def reset_rate_limiters():
    """Each test starts with empty login/registration windows."""
    login_rate_limiter.clear()
    register_rate_limiter.clear()
    yield
    login_rate_limiter.clear()
    register_rate_limiter.clear()


@pytest_asyncio.fixture
async def db_engine(tmp_path):
    """Fresh SQLite database file per test.

    NullPool gives every session its own connection, so request-scoped
    sessions in the app behave like they do against a server database.
    """
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'taskboard.db'}",
        poolclass=NullPool,
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(autouse=True)
async def patch_database_connection(db_engine):
    """Point the app's get_db dependency at the test engine."""
    test_maker = async_sessionmaker(db_engine, class_=AsyncSession, expire_on_commit=False)
    previous = database.set_test_session_maker(test_maker)
    yield test_maker
    database.set_test_session_maker(previous)


@pytest_asyncio.fixture
async def db(patch_database_connection):
    """Session for arranging and inspecting data directly."""
    async with patch_database_connection() as session:
        yield session


@pytest.fixture
def app():
    from taskboard.main import app as fastapi_app

    return fastapi_app


@pytest.fixture
def make_client(app):
    """Factory for independent API clients (separate cookie jars)."""

    def _make(*, raise_app_exceptions: bool = True, **kwargs) -> AsyncClient:
        transport = ASGITransport(app=app, raise_app_exceptions=raise_app_exceptions)
        return AsyncClient(transport=transport, base_url="http://test", **kwargs)

    return _make


@pytest_asyncio.fixture
async def public_client(make_client):
    """Client without a session."""
    async with make_client() as client:
        yield client


async def register_and_login(
    client: AsyncClient,
    email: str,
    username: str = "tester",
    password: str = DEFAULT_PASSWORD,
) -> dict:
    """Register an account and log the client in; returns the login body."""
    response = await client.post(
        "/api/auth/register",
        json={"email": email, "username": username, "password": password},
    )
    assert response.status_code == 201, response.text
    response = await client.post("/api/auth/login", json={"email": email, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


@pytest_asyncio.fixture
async def auth_client(make_client):
    """Client logged in as alice via the session cookie."""
    async with make_client() as client:
        client.login_body = await register_and_login(client, "alice@example.com", "alice")
        yield client


@pytest_asyncio.fixture
async def other_client(make_client):
    """Client logged in as bob, a second independent user."""
    async with make_client() as client:
        client.login_body = await register_and_login(client, "bob@example.com", "bob")
        yield client


@pytest.fixture
def signup():
    """The register-then-login helper, for tests that need extra accounts."""
    return register_and_login
