"""Tests for the Redis-backed reminder ledger."""

import pytest
from unittest.mock import AsyncMock, patch

from redis.exceptions import ConnectionError as RedisConnectionError

from app.infra.redis import RedisReminderLedger


@pytest.fixture
def mock_redis():
    """Create mock Redis client."""
    return AsyncMock()


class TestRedisReminderLedger:
    """Test SET NX EX based reminder markers."""

    @pytest.mark.asyncio
    async def test_claim_sets_namespaced_key(self, mock_redis):
        """Test claim is an atomic set-if-absent with expiry."""
        mock_redis.set = AsyncMock(return_value=True)
        ledger = RedisReminderLedger(ttl_seconds=60)

        with patch("app.infra.redis.get_redis", AsyncMock(return_value=mock_redis)):
            claimed = await ledger.claim("a1:2025-01-10T10:00:24h")

        assert claimed is True
        mock_redis.set.assert_awaited_once_with(
            "hospital:v1:reminder:a1:2025-01-10T10:00:24h", "1", nx=True, ex=60
        )

    @pytest.mark.asyncio
    async def test_existing_marker_not_claimed(self, mock_redis):
        """Test SET NX returning None means already sent."""
        mock_redis.set = AsyncMock(return_value=None)
        ledger = RedisReminderLedger()

        with patch("app.infra.redis.get_redis", AsyncMock(return_value=mock_redis)):
            assert await ledger.claim("k") is False

    @pytest.mark.asyncio
    async def test_release_deletes_key(self, mock_redis):
        ledger = RedisReminderLedger()

        with patch("app.infra.redis.get_redis", AsyncMock(return_value=mock_redis)):
            await ledger.release("k")

        mock_redis.delete.assert_awaited_once_with("hospital:v1:reminder:k")

    @pytest.mark.asyncio
    async def test_falls_back_to_memory_without_redis(self, caplog):
        """Test markers are kept in process when Redis is unavailable."""
        ledger = RedisReminderLedger()

        with patch("app.infra.redis.get_redis", AsyncMock(return_value=None)):
            first = await ledger.claim("k")
            second = await ledger.claim("k")

        assert first is True
        assert second is False
        assert "in-memory reminder ledger" in caplog.text

    @pytest.mark.asyncio
    async def test_redis_error_falls_back(self, mock_redis):
        """Test command errors degrade to the in-memory ledger."""
        mock_redis.set = AsyncMock(side_effect=RedisConnectionError("down"))
        ledger = RedisReminderLedger()

        with patch("app.infra.redis.get_redis", AsyncMock(return_value=mock_redis)):
            assert await ledger.claim("k") is True
            assert await ledger.claim("k") is False
