"""Authentication service: registration, credential checks and session resolution."""

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.logger import get_logger
from taskboard.models import User
from taskboard.security import TokenSigner, hash_password, verify_password

logger = get_logger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50
PASSWORD_MIN_LENGTH = 6
# bcrypt only considers the first 72 bytes
PASSWORD_MAX_BYTES = 72

INVALID_CREDENTIALS = "Invalid email or password"


class AuthServiceError(Exception):
    """Base exception for auth service errors."""


class RegistrationError(AuthServiceError):
    """Registration input rejected (duplicate email, short username or password)."""


class AuthError(AuthServiceError):
    """Credentials or session token could not be verified."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


def _validate_registration(username: str, password: str) -> str:
    username = username.strip()
    if len(username) < USERNAME_MIN_LENGTH:
        raise RegistrationError(f"Username must be at least {USERNAME_MIN_LENGTH} characters")
    if len(username) > USERNAME_MAX_LENGTH:
        raise RegistrationError(f"Username cannot exceed {USERNAME_MAX_LENGTH} characters")
    if len(password) < PASSWORD_MIN_LENGTH:
        raise RegistrationError(f"Password must be at least {PASSWORD_MIN_LENGTH} characters")
    if len(password.encode("utf-8")) > PASSWORD_MAX_BYTES:
        raise RegistrationError(f"Password cannot exceed {PASSWORD_MAX_BYTES} bytes")
    return username


async def get_user_by_email(db: AsyncSession, email: str) -> User | None:
    result = await db.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def register_user(db: AsyncSession, email: str, username: str, password: str) -> User:
    """Create a user with a hashed password. Does not issue a session."""
    username = _validate_registration(username, password)
    email = normalize_email(email)

    if await get_user_by_email(db, email) is not None:
        raise RegistrationError("Email already registered")

    user = User(email=email, username=username, hashed_password=hash_password(password))
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        # Another request registered the same email between check and insert
        await db.rollback()
        raise RegistrationError("Email already registered") from exc

    await db.refresh(user)
    logger.info("User registered", user_id=str(user.id))
    return user


async def authenticate(db: AsyncSession, email: str, password: str) -> User:
    """Return the user owning these credentials.

    Unknown email and wrong password raise the same AuthError so callers
    cannot tell which accounts exist.
    """
    user = await get_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        raise AuthError(INVALID_CREDENTIALS)
    return user


def issue_token(user: User, signer: TokenSigner) -> str:
    return signer.create_access_token(data={"sub": str(user.id)})


async def login(
    db: AsyncSession, email: str, password: str, signer: TokenSigner
) -> tuple[User, str]:
    """Verify credentials and issue a session token."""
    user = await authenticate(db, email, password)
    return user, issue_token(user, signer)


async def resolve_session(
    db: AsyncSession, token: str | None, signer: TokenSigner
) -> User:
    """Resolve a session token to a live user."""
    if not token:
        raise AuthError("Not authenticated")

    payload = signer.decode_access_token(token)
    if not payload:
        raise AuthError("Invalid or expired token")

    subject = payload.get("sub")
    if not subject:
        raise AuthError("Token missing subject")

    try:
        user_id = UUID(str(subject))
    except ValueError as exc:
        raise AuthError("Invalid user ID format in token") from exc

    user = await db.get(User, user_id)
    if user is None:
        raise AuthError("User not found")
    return user
