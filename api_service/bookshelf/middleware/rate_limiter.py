"""
Redis-backed sliding window rate limiter (application level).

- Per authenticated user limit on top of a per-IP limit
- Skipped entirely when RATE_LIMIT_ENABLED is false (tests, local runs)

Uses Redis sorted sets for precise sliding window counting.
"""

from __future__ import annotations

import time

import redis.asyncio as redis
import structlog
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import JSONResponse, Response

from bookshelf.auth.jwt_handler import TokenKind, token_subject
from bookshelf.config import get_settings
from bookshelf.services.redis_pool import get_redis

logger = structlog.get_logger()

EXEMPT_PATHS = ("/health", "/live", "/metrics", "/ready")


class RateLimiterMiddleware(BaseHTTPMiddleware):
    def __init__(self, app):
        super().__init__(app)
        settings = get_settings()
        self.enabled = settings.rate_limit_enabled
        self.per_user_limit = settings.rate_limit_per_user
        self.per_ip_limit = settings.rate_limit_per_ip
        self.window_seconds = settings.rate_limit_window_seconds

    async def _check_rate_limit(self, key: str, limit: int) -> tuple[bool, int]:
        """
        Sliding window rate limiter using Redis sorted sets.
        Returns (allowed: bool, remaining: int).
        """
        try:
            r = await get_redis()
            now = time.time()
            window_start = now - self.window_seconds
            pipe = r.pipeline()

            pipe.zremrangebyscore(key, 0, window_start)
            pipe.zcard(key)
            pipe.zadd(key, {f"{now}": now})
            pipe.expire(key, self.window_seconds + 1)

            results = await pipe.execute()
            current_count = results[1]

            if current_count >= limit:
                return False, 0

            remaining = limit - current_count - 1
            return True, max(remaining, 0)

        except redis.RedisError:
            # Redis down: fail open
            logger.warning("rate_limiter_redis_error", key=key)
            return True, limit

    def _too_many(self, detail: str) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            content={"detail": detail, "retry_after": self.window_seconds},
            headers={"Retry-After": str(self.window_seconds)},
        )

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not self.enabled or request.url.path in EXEMPT_PATHS:
            return await call_next(request)

        client_ip = request.headers.get("X-Real-IP", request.client.host if request.client else "unknown")

        ip_allowed, ip_remaining = await self._check_rate_limit(
            f"ratelimit:ip:{client_ip}", self.per_ip_limit
        )
        if not ip_allowed:
            return self._too_many("Too many requests from this IP")

        auth_header = request.headers.get("Authorization", "")
        if auth_header.startswith("Bearer "):
            user_id = token_subject(auth_header.split(" ", 1)[1], TokenKind.ACCESS)
            if user_id is not None:
                user_allowed, _ = await self._check_rate_limit(
                    f"ratelimit:user:{user_id}", self.per_user_limit
                )
                if not user_allowed:
                    return self._too_many("Too many requests, user rate limit exceeded")

        response = await call_next(request)
        response.headers["X-RateLimit-Remaining-IP"] = str(ip_remaining)
        return response
