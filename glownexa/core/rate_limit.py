"""
Fixed-window rate limiting for API endpoints
"""
from fastapi import Request
from typing import Dict, Tuple
import math
import time
from functools import wraps
import asyncio
from glownexa.core.redis import get_redis
from glownexa.core.exceptions import RateLimitExceeded
import logging

logger = logging.getLogger(__name__)

class RateLimiter:
    """Rate limiter using Redis, with an in-process counter when Redis is down"""

    def __init__(self, requests: int, window: int, identifier_callback=None):
        """
        Initialize rate limiter

        Args:
            requests: Number of requests allowed per window
            window: Window length in seconds
            identifier_callback: Function to get identifier from request (default: IP address)
        """
        self.requests = requests
        self.window = window
        self.identifier_callback = identifier_callback or self._get_client_ip
        # key -> (window_started_at, request_count)
        self._local_windows: Dict[str, Tuple[float, int]] = {}
        self._last_sweep = 0.0
        self.clock = time.monotonic

    @staticmethod
    def _get_client_ip(request: Request) -> str:
        """Get client IP address from request"""
        # Check for forwarded IP (when behind proxy/load balancer)
        forwarded = request.headers.get("X-Forwarded-For")
        if forwarded:
            return forwarded.split(",")[0].strip()

        # Check for real IP header
        real_ip = request.headers.get("X-Real-IP")
        if real_ip:
            return real_ip

        # Fall back to direct client IP
        if request.client:
            return request.client.host

        return "unknown"

    def _key(self, request: Request) -> str:
        identifier = self.identifier_callback(request) if callable(self.identifier_callback) else self.identifier_callback
        return f"rate_limit:{request.url.path}:{identifier}"

    def _hit_redis(self, redis, key: str) -> Tuple[int, int]:
        # SET NX opens the window once; later hits only INCR so the expiry never slides
        pipe = redis.pipeline()
        pipe.set(key, 0, ex=self.window, nx=True)
        pipe.incr(key)
        pipe.ttl(key)
        results = pipe.execute()
        ttl = results[2] if results[2] and results[2] > 0 else self.window
        return results[1], ttl

    def _evict_expired(self, now: float):
        """Drop windows that have run out; at most one sweep per window length"""
        if now - self._last_sweep < self.window:
            return
        self._last_sweep = now
        expired = [
            key for key, (started_at, _) in self._local_windows.items()
            if now - started_at >= self.window
        ]
        for key in expired:
            del self._local_windows[key]

    def _hit_local(self, key: str) -> Tuple[int, int]:
        now = self.clock()
        self._evict_expired(now)
        started_at, count = self._local_windows.get(key, (now, 0))
        if now - started_at >= self.window:
            started_at, count = now, 0
        count += 1
        self._local_windows[key] = (started_at, count)
        remaining = max(1, math.ceil(self.window - (now - started_at)))
        return count, remaining

    async def check_rate_limit(self, request: Request) -> Tuple[bool, int]:
        """
        Count this request against the client's window

        Returns:
            (allowed, seconds until the window resets)
        """
        key = self._key(request)
        redis = get_redis()

        if redis:
            try:
                count, ttl = self._hit_redis(redis, key)
                return count <= self.requests, ttl
            except Exception as e:
                logger.error(f"Rate limiting error: {e}, falling back to in-memory window")
        else:
            logger.debug("Redis not available for rate limiting, using in-memory window")

        count, ttl = self._hit_local(key)
        return count <= self.requests, ttl

    def reset(self):
        """Forget all in-memory windows"""
        self._local_windows.clear()
        self._last_sweep = 0.0

    def __call__(self, func):
        """Decorator for rate limiting endpoints"""
        @wraps(func)
        async def wrapper(request: Request, *args, **kwargs):
            allowed, retry_after = await self.check_rate_limit(request)
            if not allowed:
                logger.warning(f"Rate limit exceeded for {self._key(request)}")
                raise RateLimitExceeded(retry_after=retry_after)

            # Call the actual endpoint
            if asyncio.iscoroutinefunction(func):
                return await func(request, *args, **kwargs)
            else:
                return func(request, *args, **kwargs)

        return wrapper


def rate_limit(requests: int = 10, window: int = 60, identifier_callback=None):
    """
    Decorator for rate limiting endpoints

    Args:
        requests: Number of requests allowed (default: 10)
        window: Time window in seconds (default: 60)
        identifier_callback: Function to get identifier from request

    Example:
        @router.post("/contact")
        @rate_limit(requests=6, window=60)  # 6 requests per minute
        async def send_contact_message(request: Request, ...):
            ...
    """
    limiter = RateLimiter(requests, window, identifier_callback)
    return limiter
