"""Rate limiting for the login and registration endpoints.

Sliding-window counters keyed by client IP. When REDIS_URL is configured
the window lives in a Redis sorted set so every worker shares it;
otherwise each process keeps its own in-memory window.

threading.Lock guards the in-memory state; the critical section is a few
dict operations, so holding it from async handlers does not stall the loop.
"""

import time
from collections import defaultdict
from dataclasses import dataclass, field
from threading import Lock

import redis

from taskboard.config import settings
from taskboard.logger import get_logger

logger = get_logger(__name__)


@dataclass
class RateLimitConfig:
    """Rate limit configuration."""

    max_requests: int = 5  # Maximum requests in window
    window_seconds: int = 60  # Time window in seconds
    block_seconds: int = 300  # Block duration after exceeding limit


@dataclass
class RateLimitState:
    """Window state for one key (in-memory backend)."""

    requests: list[float] = field(default_factory=list)
    blocked_until: float = 0.0


class RateLimiter:
    """Sliding-window rate limiter with optional Redis backend."""

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        *,
        namespace: str = "rl",
        redis_url: str | None = None,
    ) -> None:
        self.config = config or RateLimitConfig()
        self.namespace = namespace
        self._local_state: dict[str, RateLimitState] = defaultdict(RateLimitState)
        self._lock = Lock()
        self._redis: redis.Redis | None = None

        if redis_url:
            try:
                client = redis.from_url(redis_url, decode_responses=True)
                client.ping()
                self._redis = client
            except redis.RedisError as exc:
                logger.warning(
                    "Redis unavailable, using in-memory rate limiting",
                    namespace=namespace,
                    error=str(exc),
                )

    def is_allowed(self, key: str) -> tuple[bool, int]:
        """Record a request for key; return (allowed, retry_after_seconds)."""
        if self._redis is not None:
            return self._is_allowed_redis(key)
        return self._is_allowed_local(key)

    def _is_allowed_redis(self, key: str) -> tuple[bool, int]:
        now = time.time()
        window_key = f"{self.namespace}:{key}"
        block_key = f"{self.namespace}_block:{key}"

        try:
            blocked_until = self._redis.get(block_key)
            if blocked_until:
                remaining = int(float(blocked_until) - now)
                if remaining > 0:
                    return False, remaining

            pipe = self._redis.pipeline()
            pipe.zremrangebyscore(window_key, 0, now - self.config.window_seconds)
            pipe.zcard(window_key)
            pipe.zadd(window_key, {str(now): now})
            pipe.expire(window_key, self.config.window_seconds * 2)
            _, request_count, _, _ = pipe.execute()

            if request_count >= self.config.max_requests:
                self._redis.setex(
                    block_key,
                    self.config.block_seconds,
                    str(now + self.config.block_seconds),
                )
                return False, self.config.block_seconds

            return True, 0
        except redis.RedisError as exc:
            logger.warning("Redis error during rate limiting, falling back to local", error=str(exc))
            return self._is_allowed_local(key)

    def _is_allowed_local(self, key: str) -> tuple[bool, int]:
        now = time.time()
        with self._lock:
            state = self._local_state[key]
            if state.blocked_until > now:
                return False, max(1, int(state.blocked_until - now))

            window_start = now - self.config.window_seconds
            state.requests = [ts for ts in state.requests if ts >= window_start]

            if len(state.requests) >= self.config.max_requests:
                state.blocked_until = now + self.config.block_seconds
                return False, self.config.block_seconds

            state.requests.append(now)
            return True, 0

    def reset(self, key: str) -> None:
        """Forget all recorded requests for key."""
        if self._redis is not None:
            try:
                self._redis.delete(f"{self.namespace}:{key}", f"{self.namespace}_block:{key}")
            except redis.RedisError as exc:
                logger.warning("Redis error during reset, ignoring", error=str(exc))

        with self._lock:
            self._local_state.pop(key, None)

    def clear(self) -> None:
        """Drop all in-memory state."""
        with self._lock:
            self._local_state.clear()

    def close(self) -> None:
        """Close Redis connection."""
        if self._redis is not None:
            self._redis.close()


login_rate_limiter = RateLimiter(
    RateLimitConfig(max_requests=5, window_seconds=60, block_seconds=300),
    namespace="rl_login",
    redis_url=settings.redis_url,
)

register_rate_limiter = RateLimiter(
    RateLimitConfig(max_requests=5, window_seconds=3600, block_seconds=3600),
    namespace="rl_register",
    redis_url=settings.redis_url,
)
