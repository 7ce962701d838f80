import hashlib
import logging

import redis.asyncio as redis
import redis.exceptions
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse

from live_translator.config import settings
from live_translator.middleware.auth import PUBLIC_PATHS

logger = logging.getLogger("live_translator")

WINDOW_S = 3600  # 1 hour


def quota_key(token: str) -> str:
    # Raw API keys never reach Redis
    digest = hashlib.sha256(token.encode()).hexdigest()[:32]
    return f"live_translator:rate:{digest}"


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request quota per API key, counted in Redis.

    Runs inside AuthMiddleware, so only accepted keys are counted.
    """

    def __init__(
        self,
        app,
        redis_url: str = "",
        limit: int | None = None,
        redis_client: redis.Redis | None = None,
    ):
        super().__init__(app)
        self._redis = redis_client
        self._redis_url = redis_url or settings.redis_url
        self._limit = limit if limit is not None else settings.rate_limit_per_hour

    def _client(self) -> redis.Redis:
        if self._redis is None:
            self._redis = redis.from_url(self._redis_url, decode_responses=True)
        return self._redis

    async def _count(self, token: str) -> int:
        key = quota_key(token)
        # NX keeps an open window from being extended, and heals a key left
        # without a TTL
        pipe = self._client().pipeline(transaction=True)
        pipe.incr(key)
        pipe.expire(key, WINDOW_S, nx=True)
        count, _ = await pipe.execute()
        return count

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS or request.method == "OPTIONS":
            return await call_next(request)

        scheme, _, token = request.headers.get("authorization", "").partition(" ")
        if scheme.lower() != "bearer" or not token:
            return await call_next(request)

        try:
            count = await self._count(token.strip())
        except (redis.exceptions.RedisError, OSError) as e:
            # Fail open
            logger.warning("Rate limiter unavailable: %s", e)
            return await call_next(request)

        if count > self._limit:
            logger.info("Rate limit hit (%d/%d per hour)", count, self._limit)
            return JSONResponse(
                status_code=429,
                content={
                    "error": "Rate limit exceeded",
                    "details": f"{self._limit} requests/hour",
                },
                headers={"Retry-After": str(WINDOW_S)},
            )

        return await call_next(request)
