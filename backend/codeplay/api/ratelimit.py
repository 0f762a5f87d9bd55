import logging
import time
from fastapi import HTTPException, Request, status
from redis import asyncio as aioredis
from codeplay.core.config import Settings

log = logging.getLogger("ratelimit")

RATE_LIMIT_MESSAGE = "Rate limit exceeded. Please wait a moment."


class MemoryWindow:
    """Fixed-window counter kept in process memory."""

    def __init__(self, limit: int, window_s: int, clock=time.monotonic):
        self.limit = limit
        self.window_s = window_s
        self.clock = clock
        self._hits: dict[str, tuple[float, int]] = {}
        self._swept = clock()

    def _sweep(self, now: float):
        # at most once per window, drop clients whose window has expired
        if now - self._swept < self.window_s:
            return
        self._swept = now
        self._hits = {
            k: v for k, v in self._hits.items() if now - v[0] < self.window_s
        }

    async def hit(self, key: str) -> bool:
        now = self.clock()
        self._sweep(now)
        started, count = self._hits.get(key, (now, 0))
        if now - started >= self.window_s:
            started, count = now, 0
        count += 1
        self._hits[key] = (started, count)
        return count <= self.limit

    async def aclose(self):
        self._hits.clear()


class RedisWindow:
    """Fixed-window counter shared between proxy replicas through redis."""

    def __init__(self, redis, limit: int, window_s: int, prefix: str):
        self.redis = redis
        self.limit = limit
        self.window_s = window_s
        self.prefix = prefix

    @classmethod
    def from_url(cls, url: str, limit: int, window_s: int, prefix: str):
        return cls(aioredis.from_url(url, decode_responses=True), limit, window_s, prefix)

    async def hit(self, key: str) -> bool:
        redis_key = f"{self.prefix}{key}"
        async with self.redis.pipeline(transaction=True) as pipe:
            pipe.incr(redis_key)
            pipe.expire(redis_key, self.window_s, nx=True)
            count, _ = await pipe.execute()
        return int(count) <= self.limit

    async def aclose(self):
        await self.redis.aclose()


def make_limiter(settings: Settings):
    if settings.RATE_LIMIT_BACKEND == "redis":
        return RedisWindow.from_url(
            settings.REDIS_URL,
            settings.RATE_LIMIT_MAX,
            settings.RATE_LIMIT_WINDOW_S,
            settings.RATE_LIMIT_PREFIX,
        )
    if settings.RATE_LIMIT_BACKEND != "memory":
        raise ValueError(f"unknown RATE_LIMIT_BACKEND {settings.RATE_LIMIT_BACKEND!r}")
    return MemoryWindow(settings.RATE_LIMIT_MAX, settings.RATE_LIMIT_WINDOW_S)


def client_key(request: Request) -> str:
    return request.client.host if request.client else "unknown"


async def enforce_rate_limit(request: Request):
    limiter = request.app.state.limiter
    key = client_key(request)
    if not await limiter.hit(key):
        log.warning("rate limit exceeded for %s", key, extra={"client": key})
        raise HTTPException(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMIT_MESSAGE)
