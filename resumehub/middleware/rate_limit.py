"""
Rate Limiting Middleware

Fixed-window request limits stored in Redis, one counter per
(bucket, client) inside the tenant's key namespace.

Buckets:
- login:    5 attempts per 15 minutes
- upload:   10 resume uploads per hour
- analysis: 20 analysis submissions per hour
- api:      100 API calls per hour
- default:  60 requests per minute

If Redis is unreachable requests are let through and the outage is logged.
"""
import hashlib
import re
from typing import Dict, Optional, Tuple

import redis
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
import logging

from resumehub.config import get_settings
from resumehub.core.exceptions import RateLimitExceeded
from resumehub.core.tenancy import tenant_cache_prefix

logger = logging.getLogger(__name__)

# bucket -> (max attempts, window in seconds)
RATE_LIMITS: Dict[str, Tuple[int, int]] = {
    "login": (5, 15 * 60),
    "upload": (10, 60 * 60),
    "analysis": (20, 60 * 60),
    "api": (100, 60 * 60),
    "default": (60, 60),
}

EXCLUDED_PATHS = (
    "/docs",
    "/redoc",
    "/openapi.json",
    "/health",
)

_ANALYSIS_PATH = re.compile(r"^/api/v1/resumes/[^/]+/analysis$")


def classify_request(method: str, path: str) -> str:
    """Pick the rate limit bucket for a request."""
    path = path.rstrip("/")
    if method == "POST":
        if path == "/api/v1/auth/login":
            return "login"
        if path == "/api/v1/resumes":
            return "upload"
        if _ANALYSIS_PATH.match(path):
            return "analysis"
    if path.startswith("/api/"):
        return "api"
    return "default"


class RateLimitMiddleware(BaseHTTPMiddleware):

    def __init__(
        self,
        app,
        redis_client: Optional[redis.Redis] = None,
        redis_url: Optional[str] = None,
        cache_prefix: Optional[str] = None
    ):
        super().__init__(app)
        settings = get_settings()
        self.cache_prefix = cache_prefix or settings.CACHE_PREFIX

        try:
            self.redis_client = redis_client or redis.from_url(
                redis_url or settings.REDIS_URL,
                decode_responses=True,
                socket_connect_timeout=5
            )
            self.redis_client.ping()
            self.redis_available = True
            logger.info("Redis connection established for rate limiting")
        except (redis.ConnectionError, redis.TimeoutError) as e:
            logger.error(f"Redis connection failed, rate limiting disabled: {e}")
            self.redis_available = False

    async def dispatch(self, request: Request, call_next):
        if any(request.url.path.startswith(path) for path in EXCLUDED_PATHS):
            return await call_next(request)

        if not self.redis_available:
            return await call_next(request)

        bucket = classify_request(request.method, request.url.path)
        max_attempts, window = RATE_LIMITS[bucket]
        key = self._key(request, bucket)

        allowed, remaining, retry_after = await run_in_threadpool(self._hit, key, max_attempts, window)

        if not allowed:
            logger.warning(
                f"Rate limit exceeded for bucket {bucket}: {request.url.path}",
                extra={"tenant_id": getattr(request.state, "tenant_id", None)}
            )
            exc = RateLimitExceeded(retry_after)
            return JSONResponse(
                status_code=exc.status_code,
                content={"detail": exc.detail, "retry_after": retry_after, "type": "rate_limit_exceeded"},
                headers=exc.headers
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(max_attempts)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response

    def _key(self, request: Request, bucket: str) -> str:
        """Namespace by tenant, identify the client by IP and user agent."""
        client_ip = request.client.host if request.client else "unknown"
        signature = hashlib.sha256(
            "|".join([bucket, client_ip, request.headers.get("user-agent", "")]).encode("utf-8")
        ).hexdigest()
        tenant = getattr(request.state, "tenant", None)
        return f"{tenant_cache_prefix(self.cache_prefix, tenant)}:rate_limit:{signature}"

    def _hit(self, key: str, max_attempts: int, window: int) -> Tuple[bool, int, int]:
        """
        Count one request in the current window.

        Returns: (allowed, remaining, retry_after seconds)
        """
        try:
            attempts = self.redis_client.incr(key)

            # -1: counter without expiry, e.g. an earlier EXPIRE failed
            ttl = self.redis_client.ttl(key)
            if ttl is None or ttl < 0:
                self.redis_client.expire(key, window)
                ttl = window

            if attempts > max_attempts:
                return False, 0, max(ttl, 1)

            return True, max_attempts - attempts, 0

        except redis.RedisError as e:
            logger.error(f"Redis error in rate limiting: {e}")
            return True, max_attempts, 0
