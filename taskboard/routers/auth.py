"""Authentication API router."""

from fastapi import APIRouter, Depends, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.exc import SQLAlchemyError

from taskboard.auth import bearer_scheme, extract_token
from taskboard.config import settings
from taskboard.deps import CurrentSession, DbSession, Signer
from taskboard.logger import get_logger, log_exception
from taskboard.rate_limit import RateLimiter, login_rate_limiter, register_rate_limiter
from taskboard.schemas import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    RegisterRequest,
    SessionResponse,
    UserResponse,
)
from taskboard.services import AuthError, RegistrationError, auth_service
from taskboard.utils import raise_bad_request, raise_too_many_requests, raise_unauthorized

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


def _get_client_ip(request: Request) -> str:
    """Extract client IP, honouring X-Forwarded-For only behind a trusted proxy."""
    if settings.trust_proxy:
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def _check_rate_limit(request: Request, limiter: RateLimiter, error_msg: str) -> None:
    allowed, retry_after = limiter.is_allowed(_get_client_ip(request))
    if not allowed:
        raise_too_many_requests(error_msg, retry_after=retry_after)


def _set_session_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.access_token_max_age,
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
        path="/",
    )


@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    data: RegisterRequest,
    db: DbSession,
) -> UserResponse:
    """Register a new user. The caller still has to log in afterwards."""
    _check_rate_limit(
        request,
        register_rate_limiter,
        "Too many registration attempts. Please try again later.",
    )

    try:
        user = await auth_service.register_user(db, data.email, data.username, data.password)
    except RegistrationError as exc:
        raise_bad_request(str(exc), cause=exc)

    await db.commit()
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    response: Response,
    data: LoginRequest,
    db: DbSession,
    signer: Signer,
) -> LoginResponse:
    """Login with email and password; sets the session cookie."""
    _check_rate_limit(
        request,
        login_rate_limiter,
        "Too many login attempts. Please try again later.",
    )
    client_ip = _get_client_ip(request)

    try:
        user, token = await auth_service.login(db, data.email, data.password, signer)
    except AuthError as exc:
        logger.warning("Failed login attempt", client_ip=client_ip)
        raise_unauthorized(str(exc), cause=exc)

    logger.info("Successful login", user_id=str(user.id), client_ip=client_ip)
    login_rate_limiter.reset(client_ip)

    _set_session_cookie(response, token)
    return LoginResponse(user=UserResponse.model_validate(user), access_token=token)


@router.post("/logout", response_model=MessageResponse)
async def logout(
    request: Request,
    response: Response,
    db: DbSession,
    signer: Signer,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> MessageResponse:
    """End the session. Succeeds whether or not a valid session was presented."""
    token = extract_token(request, credentials)
    if token:
        try:
            user = await auth_service.resolve_session(db, token, signer)
            logger.info("User logged out", user_id=str(user.id))
        except AuthError:
            logger.debug("Logout with stale or invalid session")
        except SQLAlchemyError as exc:
            log_exception(logger, exc, "Session lookup failed during logout", level="warning")

    response.delete_cookie(
        key=settings.session_cookie_name,
        path="/",
        httponly=True,
        secure=settings.session_cookie_secure,
        samesite="lax",
    )
    return MessageResponse(message="Logged out successfully")


@router.get("/me", response_model=SessionResponse)
async def get_me(session: CurrentSession) -> SessionResponse:
    """Get current authenticated user."""
    return SessionResponse(user=UserResponse.model_validate(session.user))
