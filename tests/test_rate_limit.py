import pytest
from unittest.mock import MagicMock
from starlette.requests import Request

from glownexa.core import rate_limit as rate_limit_module
from glownexa.core.exceptions import RateLimitExceeded
from glownexa.core.rate_limit import RateLimiter

def make_request(headers=None, client=("127.0.0.1", 50000), path="/api/contact"):
    raw_headers = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    return Request({
        "type": "http",
        "method": "POST",
        "scheme": "http",
        "server": ("test", 80),
        "path": path,
        "root_path": "",
        "query_string": b"",
        "headers": raw_headers,
        "client": client,
    })

class TestClientIdentifier:
    def test_forwarded_for_first_hop(self):
        request = make_request({"X-Forwarded-For": "203.0.113.7, 10.0.0.1"})
        assert RateLimiter._get_client_ip(request) == "203.0.113.7"

    def test_real_ip(self):
        request = make_request({"X-Real-IP": "198.51.100.4"})
        assert RateLimiter._get_client_ip(request) == "198.51.100.4"

    def test_socket_peer(self):
        assert RateLimiter._get_client_ip(make_request()) == "127.0.0.1"

    def test_no_client(self):
        assert RateLimiter._get_client_ip(make_request(client=None)) == "unknown"

class TestInMemoryWindow:
    """Test the fallback used when Redis is down"""

    @pytest.mark.asyncio
    async def test_limit_within_window(self):
        limiter = RateLimiter(requests=2, window=60)
        request = make_request()

        assert (await limiter.check_rate_limit(request))[0] is True
        assert (await limiter.check_rate_limit(request))[0] is True
        allowed, retry_after = await limiter.check_rate_limit(request)

        assert allowed is False
        assert 0 < retry_after <= 60

    @pytest.mark.asyncio
    async def test_window_is_fixed(self):
        clock = [1000.0]
        limiter = RateLimiter(requests=1, window=60)
        limiter.clock = lambda: clock[0]
        request = make_request()

        assert (await limiter.check_rate_limit(request))[0] is True
        clock[0] += 30
        assert (await limiter.check_rate_limit(request))[0] is False
        # Rejected requests do not push the window forward
        clock[0] += 30
        assert (await limiter.check_rate_limit(request))[0] is True

    @pytest.mark.asyncio
    async def test_expired_windows_are_dropped(self):
        clock = [1000.0]
        limiter = RateLimiter(requests=6, window=60)
        limiter.clock = lambda: clock[0]

        for n in range(50):
            await limiter.check_rate_limit(make_request({"X-Forwarded-For": f"203.0.113.{n}"}))
        assert len(limiter._local_windows) == 50

        clock[0] += 30
        await limiter.check_rate_limit(make_request({"X-Forwarded-For": "198.51.100.1"}))
        clock[0] += 31
        await limiter.check_rate_limit(make_request({"X-Forwarded-For": "198.51.100.2"}))

        # Only the windows opened in the last minute survive the sweep
        assert set(limiter._local_windows) == {
            "rate_limit:/api/contact:198.51.100.1",
            "rate_limit:/api/contact:198.51.100.2",
        }

    @pytest.mark.asyncio
    async def test_paths_are_counted_separately(self):
        limiter = RateLimiter(requests=1, window=60)

        assert (await limiter.check_rate_limit(make_request(path="/api/contact")))[0] is True
        assert (await limiter.check_rate_limit(make_request(path="/api/v1/auth/login")))[0] is True

    @pytest.mark.asyncio
    async def test_reset(self):
        limiter = RateLimiter(requests=1, window=60)
        request = make_request()
        await limiter.check_rate_limit(request)

        limiter.reset()

        assert (await limiter.check_rate_limit(request))[0] is True

class TestRedisWindow:
    @pytest.mark.asyncio
    async def test_uses_redis_counter(self, monkeypatch):
        redis = MagicMock()
        redis.pipeline.return_value.execute.return_value = [None, 7, 42]
        monkeypatch.setattr(rate_limit_module, "get_redis", lambda: redis)
        limiter = RateLimiter(requests=6, window=60)

        allowed, retry_after = await limiter.check_rate_limit(make_request())

        assert allowed is False
        assert retry_after == 42
        pipe = redis.pipeline.return_value
        pipe.set.assert_called_once_with("rate_limit:/api/contact:127.0.0.1", 0, ex=60, nx=True)
        pipe.incr.assert_called_once_with("rate_limit:/api/contact:127.0.0.1")

    @pytest.mark.asyncio
    async def test_redis_error_falls_back_to_memory(self, monkeypatch):
        redis = MagicMock()
        redis.pipeline.return_value.execute.side_effect = ConnectionError("redis down")
        monkeypatch.setattr(rate_limit_module, "get_redis", lambda: redis)
        limiter = RateLimiter(requests=1, window=60)
        request = make_request()

        assert (await limiter.check_rate_limit(request))[0] is True
        assert (await limiter.check_rate_limit(request))[0] is False

class TestDecorator:
    @pytest.mark.asyncio
    async def test_raises_when_exceeded(self):
        limiter = RateLimiter(requests=1, window=60)

        @limiter
        async def endpoint(request):
            return "ok"

        request = make_request()
        assert await endpoint(request) == "ok"
        with pytest.raises(RateLimitExceeded) as exc_info:
            await endpoint(request)

        assert exc_info.value.message == "Too many requests, try again later."
        assert exc_info.value.retry_after > 0
