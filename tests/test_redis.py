import pytest
from unittest.mock import MagicMock

from glownexa.core import redis as redis_module
from glownexa.core.config import settings

@pytest.fixture(autouse=True)
def fresh_client(monkeypatch):
    monkeypatch.setattr(redis_module, "redis_client", None)
    monkeypatch.setattr(redis_module, "_retry_at", 0.0)
    monkeypatch.setattr(settings, "REDIS_URL", "redis://localhost:6379")

def test_blank_url_disables_redis(monkeypatch):
    from_url = MagicMock()
    monkeypatch.setattr(redis_module.redis, "from_url", from_url)
    monkeypatch.setattr(settings, "REDIS_URL", "")

    assert redis_module.get_redis() is None
    from_url.assert_not_called()

def test_connected_client_is_reused(monkeypatch):
    from_url = MagicMock()
    monkeypatch.setattr(redis_module.redis, "from_url", from_url)

    first = redis_module.get_redis()
    second = redis_module.get_redis()

    assert first is from_url.return_value
    assert second is first
    from_url.assert_called_once()

def test_failed_connect_waits_before_retrying(monkeypatch):
    from_url = MagicMock()
    from_url.return_value.ping.side_effect = redis_module.redis.ConnectionError("refused")
    monkeypatch.setattr(redis_module.redis, "from_url", from_url)

    assert redis_module.get_redis() is None
    assert redis_module.get_redis() is None
    assert from_url.call_count == 1
    assert redis_module._retry_at > 0

    # Interval elapsed
    monkeypatch.setattr(redis_module, "_retry_at", 0.0)
    assert redis_module.get_redis() is None
    assert from_url.call_count == 2

def test_close(monkeypatch):
    client = MagicMock()
    monkeypatch.setattr(redis_module, "redis_client", client)

    redis_module.close_redis()

    client.close.assert_called_once()
    assert redis_module.redis_client is None
