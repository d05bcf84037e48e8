"""Authentication helpers for request-scoped user context."""

from dataclasses import dataclass

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from taskboard.config import settings
from taskboard.database import get_db
from taskboard.logger import get_logger
from taskboard.models import User
from taskboard.security import TokenSigner, get_token_signer
from taskboard.services import AuthError, auth_service
from taskboard.utils import raise_unauthorized

logger = get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthenticatedSession:
    """Caller identity, only ever built after the token resolved to a live user."""

    user: User
    token: str


def extract_token(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None,
) -> str | None:
    """Read the session token; the cookie wins over the Authorization header."""
    cookie_token = request.cookies.get(settings.session_cookie_name)
    if cookie_token:
        return cookie_token
    if credentials is not None and credentials.scheme.lower() == "bearer":
        return credentials.credentials
    return None


async def get_current_session(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
    db: AsyncSession = Depends(get_db),
    signer: TokenSigner = Depends(get_token_signer),
) -> AuthenticatedSession:
    """Resolve the current session or reject the request with 401."""
    token = extract_token(request, credentials)
    try:
        user = await auth_service.resolve_session(db, token, signer)
    except AuthError as exc:
        logger.debug("Session resolution failed", reason=str(exc))
        raise_unauthorized(str(exc), cause=exc)

    return AuthenticatedSession(user=user, token=token)
