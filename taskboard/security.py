"""Security utilities for JWT session tokens and password hashing."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

import bcrypt
import jwt

from taskboard.config import Settings, settings
from taskboard.logger import get_logger

logger = get_logger(__name__)


def hash_password(password: str) -> str:
    """Hash a password using bcrypt."""
    salt = bcrypt.gensalt()
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a password against its hash."""
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError:
        # Stored value is not a bcrypt hash
        logger.warning("Password hash has unexpected format")
        return False


@dataclass(frozen=True)
class TokenSigner:
    """Issues and verifies signed, time-bound session tokens.

    Holds the process-wide secret; construct once at startup from settings
    and pass it to whatever needs to sign or verify.
    """

    secret_key: str
    algorithm: str = "HS256"
    expire_minutes: int = 60 * 24 * 7

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenSigner":
        return cls(
            secret_key=config.secret_key,
            algorithm=config.jwt_algorithm,
            expire_minutes=config.access_token_expire_minutes,
        )

    def create_access_token(
        self, data: dict[str, Any], expires_delta: timedelta | None = None
    ) -> str:
        """Create a new JWT access token."""
        to_encode = data.copy()
        if expires_delta:
            expire = datetime.now(UTC) + expires_delta
        else:
            expire = datetime.now(UTC) + timedelta(minutes=self.expire_minutes)

        to_encode.update({"exp": expire})
        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def decode_access_token(self, token: str) -> dict[str, Any] | None:
        """Decode and validate a JWT access token."""
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.debug("JWT token expired")
            return None
        except jwt.PyJWTError as exc:
            logger.warning(
                "JWT decode failed",
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return None


token_signer = TokenSigner.from_settings(settings)


def get_token_signer() -> TokenSigner:
    """Dependency for the signer; tests swap it through app.dependency_overrides."""
    return token_signer
