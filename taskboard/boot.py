"""
Environment bootloader.

Used by:
1. Application startup (main.py) -> mode="critical"
2. CI -> mode="dry-run"
3. Manual smoke checks -> mode="full" via `python -m taskboard.boot`
"""

import asyncio
import sys
import time
from dataclasses import dataclass
from enum import Enum

import redis.asyncio as aioredis
from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine

from taskboard.config import settings
from taskboard.logger import get_logger

logger = get_logger(__name__)

INSECURE_SECRET_KEYS = {"dev_secret_key_change_in_prod", "", "secret"}


class BootMode(str, Enum):
    CRITICAL = "critical"  # Config + DB (fast fail for startup)
    FULL = "full"  # Config + DB + Redis
    DRY_RUN = "dry-run"  # Static config check only


@dataclass
class ServiceStatus:
    service: str
    status: str  # 'ok', 'warning', 'error', 'skipped'
    message: str
    duration_ms: float = 0.0


class Bootloader:
    """Handles environment validation and service connectivity checks."""

    @staticmethod
    async def validate(mode: BootMode = BootMode.CRITICAL) -> bool:
        """Run validation checks. Returns True if passed, False if failed.

        In CRITICAL mode a failure terminates the process.
        """
        logger.info("Bootloader starting validation", mode=mode.value)

        if not Bootloader._check_static_config():
            if mode == BootMode.CRITICAL:
                logger.critical("Static configuration check failed. Refusing to start.")
                sys.exit(1)
            return False

        if mode == BootMode.DRY_RUN:
            return True

        results = [await Bootloader._check_database()]
        if mode == BootMode.FULL:
            results.append(await Bootloader._check_redis())

        passed = True
        for res in results:
            if res.status == "error":
                passed = False
                logger.error(
                    "Service check failed",
                    service=res.service,
                    error=res.message,
                    duration_ms=res.duration_ms,
                )
            else:
                logger.info(
                    "Service check passed",
                    service=res.service,
                    status=res.status,
                    duration_ms=res.duration_ms,
                )

        if not passed:
            if mode == BootMode.CRITICAL:
                logger.critical("Critical service checks failed. Application cannot start.")
                sys.exit(1)
            return False

        logger.info("Bootloader validation successful")
        return True

    @staticmethod
    def _check_static_config() -> bool:
        """Reject configurations that must never reach production."""
        if not settings.database_url:
            logger.error("DATABASE_URL is empty")
            return False
        if settings.access_token_expire_minutes <= 0:
            logger.error("ACCESS_TOKEN_EXPIRE_MINUTES must be positive")
            return False
        if settings.secret_key in INSECURE_SECRET_KEYS:
            if settings.environment == "production":
                logger.error("SECRET_KEY must be set in production")
                return False
            logger.warning("Using development SECRET_KEY", environment=settings.environment)
        return True

    @staticmethod
    async def _check_database() -> ServiceStatus:
        """Verify database connectivity (SELECT 1)."""
        start = time.perf_counter()
        engine = None
        try:
            engine = create_async_engine(settings.database_url, echo=False)
            async with engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            duration_ms = (time.perf_counter() - start) * 1000
            return ServiceStatus("database", "ok", "Connection successful", duration_ms)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            return ServiceStatus("database", "error", str(e), duration_ms)
        finally:
            if engine:
                await engine.dispose()

    @staticmethod
    async def _check_redis() -> ServiceStatus:
        if not settings.redis_url:
            return ServiceStatus("redis", "skipped", "Not configured")

        start = time.perf_counter()
        try:
            client = aioredis.from_url(settings.redis_url, decode_responses=True)
            await client.ping()
            await client.aclose()
            duration_ms = (time.perf_counter() - start) * 1000
            return ServiceStatus("redis", "ok", "Ping successful", duration_ms)
        except Exception as e:
            duration_ms = (time.perf_counter() - start) * 1000
            return ServiceStatus("redis", "error", str(e), duration_ms)


if __name__ == "__main__":
    import argparse

    parser = argparse.ArgumentParser()
    parser.add_argument("--mode", type=str, default="full", choices=["critical", "full", "dry-run"])
    args = parser.parse_args()

    try:
        success = asyncio.run(Bootloader.validate(BootMode(args.mode)))
    except KeyboardInterrupt:
        print("\nAborted.")
        sys.exit(130)

    sys.exit(0 if success else 1)
