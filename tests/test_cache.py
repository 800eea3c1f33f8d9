"""
Test Redis Cache Module
"""
import pytest
from unittest.mock import AsyncMock, patch
from roadwatch.core.cache import RedisCache, make_key

@pytest.fixture
def mock_redis():
    with patch("redis.asyncio.from_url") as mock:
        yield mock

@pytest.fixture
def fresh_cache():
    # Reset singleton
    RedisCache._instance = None
    RedisCache.client = None
    cache = RedisCache()
    yield cache
    RedisCache._instance = None
    RedisCache.client = None

@pytest.mark.asyncio
async def test_redis_connection(mock_redis, fresh_cache):
    mock_client = AsyncMock()
    mock_redis.return_value = mock_client

    await fresh_cache.connect("redis://cache:6379/1")

    mock_redis.assert_called_once()
    assert mock_redis.call_args[0][0] == "redis://cache:6379/1"
    mock_client.ping.assert_awaited_once()
    assert fresh_cache.client == mock_client

    await fresh_cache.close()
    mock_client.close.assert_awaited_once()
    assert fresh_cache.client is None

@pytest.mark.asyncio
async def test_failed_connection_disables_cache(mock_redis, fresh_cache):
    mock_client = AsyncMock()
    mock_client.ping.side_effect = ConnectionError("refused")
    mock_redis.return_value = mock_client

    await fresh_cache.connect()

    assert fresh_cache.client is None
    assert await fresh_cache.get("anything") is None

@pytest.mark.asyncio
async def test_redis_get_set(fresh_cache):
    fresh_cache.client = AsyncMock()

    # Test Set
    await fresh_cache.set("test_key", {"name": "本郷通り"}, ttl=60)
    fresh_cache.client.setex.assert_awaited_once_with("test_key", 60, '{"name": "本郷通り"}')

    # Test Get
    fresh_cache.client.get.return_value = '{"foo": "bar"}'
    result = await fresh_cache.get("test_key")
    assert result == {"foo": "bar"}

    # Test Miss
    fresh_cache.client.get.return_value = None
    result = await fresh_cache.get("missing")
    assert result is None

@pytest.mark.asyncio
async def test_errors_degrade_to_miss(fresh_cache):
    fresh_cache.client = AsyncMock()
    fresh_cache.client.get.side_effect = TimeoutError("slow")
    fresh_cache.client.setex.side_effect = TimeoutError("slow")

    assert await fresh_cache.get("k") is None
    await fresh_cache.set("k", {"a": 1})

def test_make_key():
    assert make_key("roads", "abc123") == "roadwatch:roads:abc123"
    assert make_key("topology", "abc123", 50.0) == "roadwatch:topology:abc123:50.0"
