"""Tests for the auth service against a real (SQLite) session."""

from datetime import timedelta
from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.security import TokenSigner, verify_password
from taskboard.services import auth_service
from taskboard.services.auth_service import AuthError, RegistrationError


@pytest.fixture
def signer():
    return TokenSigner(secret_key="unit-test-secret", expire_minutes=5)


@pytest.mark.asyncio
async def test_register_user_normalizes_and_hashes(db: AsyncSession):
    user = await auth_service.register_user(db, "  Carol@Example.COM ", " carol ", "hunter22")

    assert user.id is not None
    assert user.email == "carol@example.com"
    assert user.username == "carol"
    assert verify_password("hunter22", user.hashed_password)


@pytest.mark.asyncio
async def test_register_user_duplicate(db: AsyncSession):
    await auth_service.register_user(db, "dup@example.com", "first", "password1")
    await db.commit()

    with pytest.raises(RegistrationError, match="Email already registered"):
        await auth_service.register_user(db, "DUP@example.com", "second", "password2")


@pytest.mark.asyncio
async def test_register_user_password_too_long(db: AsyncSession):
    with pytest.raises(RegistrationError, match="72 bytes"):
        await auth_service.register_user(db, "long@example.com", "longpw", "x" * 73)


@pytest.mark.asyncio
async def test_login_round_trip(db: AsyncSession, signer):
    registered = await auth_service.register_user(db, "dave@example.com", "dave", "password1")
    await db.commit()

    user, token = await auth_service.login(db, "Dave@Example.com", "password1", signer)
    resolved = await auth_service.resolve_session(db, token, signer)

    assert user.id == registered.id
    assert resolved.id == registered.id


@pytest.mark.asyncio
async def test_authenticate_same_error_for_unknown_and_wrong(db: AsyncSession):
    await auth_service.register_user(db, "erin@example.com", "erin", "password1")
    await db.commit()

    with pytest.raises(AuthError) as wrong:
        await auth_service.authenticate(db, "erin@example.com", "nope-nope")
    with pytest.raises(AuthError) as unknown:
        await auth_service.authenticate(db, "nobody@example.com", "password1")

    assert str(wrong.value) == str(unknown.value) == auth_service.INVALID_CREDENTIALS


@pytest.mark.asyncio
@pytest.mark.parametrize("token", [None, ""])
async def test_resolve_session_without_token(db: AsyncSession, signer, token):
    with pytest.raises(AuthError, match="Not authenticated"):
        await auth_service.resolve_session(db, token, signer)


@pytest.mark.asyncio
async def test_resolve_session_wrong_secret(db: AsyncSession, signer):
    registered = await auth_service.register_user(db, "frank@example.com", "frank", "password1")
    token = TokenSigner(secret_key="someone-else").create_access_token({"sub": str(registered.id)})

    with pytest.raises(AuthError, match="Invalid or expired token"):
        await auth_service.resolve_session(db, token, signer)


@pytest.mark.asyncio
async def test_resolve_session_expired(db: AsyncSession, signer):
    token = signer.create_access_token({"sub": str(uuid4())}, expires_delta=timedelta(seconds=-5))

    with pytest.raises(AuthError, match="Invalid or expired token"):
        await auth_service.resolve_session(db, token, signer)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    ("claims", "message"),
    [
        ({}, "Token missing subject"),
        ({"sub": "not-a-uuid"}, "Invalid user ID format in token"),
        ({"sub": str(uuid4())}, "User not found"),
    ],
)
async def test_resolve_session_bad_subject(db: AsyncSession, signer, claims, message):
    token = signer.create_access_token(claims)

    with pytest.raises(AuthError, match=message):
        await auth_service.resolve_session(db, token, signer)
