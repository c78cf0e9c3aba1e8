"""Tests for the Redis client helpers and the sliding-window limiter."""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app import redis as redis_module
from app.redis import RateLimiter, get_redis
from tests.conftest import REDIS_NOW


@pytest.fixture
def no_client(monkeypatch):
    monkeypatch.setattr(redis_module, "redis_client", None)
    monkeypatch.setattr(redis_module, "_unavailable_until", 0.0)


class TestGetRedis:
    """Tests for the optional Redis dependency."""

    @pytest.mark.asyncio
    async def test_returns_existing_client(self, monkeypatch, mock_redis):
        monkeypatch.setattr(redis_module, "redis_client", mock_redis)

        assert await get_redis() is mock_redis

    @pytest.mark.asyncio
    async def test_unreachable_returns_none(self, monkeypatch, no_client):
        """A failed connect yields None instead of an error."""
        connect = AsyncMock(side_effect=RedisConnectionError("refused"))
        monkeypatch.setattr(redis_module, "init_redis", connect)

        assert await get_redis() is None

    @pytest.mark.asyncio
    async def test_failed_connect_backs_off(self, monkeypatch, no_client):
        """After a failure the next calls do not try to connect again."""
        connect = AsyncMock(side_effect=RedisConnectionError("refused"))
        monkeypatch.setattr(redis_module, "init_redis", connect)

        await get_redis()
        await get_redis()

        assert connect.await_count == 1


class TestRateLimiter:
    """Tests for the sliding window arithmetic."""

    @pytest.mark.asyncio
    async def test_under_limit_allowed(self, mock_redis):
        mock_redis.pipeline.return_value.execute.return_value = [0, 3, 1, True]

        result = await RateLimiter(mock_redis).hit("api:1.2.3.4", max_requests=5)

        assert result.allowed is True
        assert result.remaining == 1
        assert result.retry_after == 0

    @pytest.mark.asyncio
    async def test_full_window_denied_until_oldest_expires(self, mock_redis):
        mock_redis.pipeline.return_value.execute.return_value = [0, 5, 1, True]
        mock_redis.zrange.return_value = [("first", REDIS_NOW - 15)]

        result = await RateLimiter(mock_redis).hit("api:1.2.3.4", max_requests=5)

        assert result.allowed is False
        assert result.remaining == 0
        assert result.retry_after == 45

    @pytest.mark.asyncio
    async def test_keys_are_namespaced(self, mock_redis):
        await RateLimiter(mock_redis).hit("login:1.2.3.4", max_requests=5)

        pipeline = mock_redis.pipeline.return_value
        pipeline.zcard.assert_called_once_with("rate_limit:login:1.2.3.4")

    @pytest.mark.asyncio
    async def test_reset_deletes_key(self, mock_redis):
        await RateLimiter(mock_redis).reset("login:1.2.3.4")

        mock_redis.delete.assert_awaited_once_with("rate_limit:login:1.2.3.4")
