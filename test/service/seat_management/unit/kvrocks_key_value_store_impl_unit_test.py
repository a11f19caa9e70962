"""
Unit tests for KvrocksKeyValueStoreImpl

The redis client is replaced by an AsyncMock; these tests pin the commands
issued and the translation of redis failures into store errors.
"""

from unittest.mock import AsyncMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from src.platform.state.kvrocks_client import kvrocks_client
from src.service.seat_management.domain.seat_errors import (
    StateStoreTimeoutError,
    StateStoreUnavailableError,
)
from src.service.seat_management.driven_adapter.state.kvrocks_key_value_store_impl import (
    KvrocksKeyValueStoreImpl,
)


@pytest.fixture
def mock_client(monkeypatch: pytest.MonkeyPatch) -> AsyncMock:
    client = AsyncMock()
    monkeypatch.setattr(kvrocks_client, 'get_client', lambda: client)
    return client


@pytest.fixture
def store() -> KvrocksKeyValueStoreImpl:
    return KvrocksKeyValueStoreImpl()


@pytest.mark.unit
class TestKvrocksCommands:
    @pytest.mark.asyncio
    async def test_set_if_absent_uses_set_nx_with_expiry(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        mock_client.set.return_value = True

        acquired = await store.set_if_absent(key='lock:product:1:A-1-1', value='7', ttl_seconds=300)

        assert acquired is True
        mock_client.set.assert_awaited_once_with('lock:product:1:A-1-1', '7', nx=True, ex=300)

    @pytest.mark.asyncio
    async def test_set_if_absent_reports_existing_key(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        mock_client.set.return_value = None

        assert await store.set_if_absent(key='k', value='v', ttl_seconds=1) is False

    @pytest.mark.asyncio
    async def test_hash_reads_decode_bytes(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        mock_client.hget.return_value = b'{"status":"AVAILABLE"}'
        mock_client.hgetall.return_value = {b'A-1-1': b'x', 'A-1-2': 'y'}

        assert await store.get_field(key='h', field='A-1-1') == '{"status":"AVAILABLE"}'
        assert await store.get_all_fields(key='h') == {'A-1-1': 'x', 'A-1-2': 'y'}

    @pytest.mark.asyncio
    async def test_put_fields_writes_mapping_in_one_command(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        await store.put_fields(key='h', mapping={'A-1-1': 'x', 'A-1-2': 'y'})

        mock_client.hset.assert_awaited_once_with('h', mapping={'A-1-1': 'x', 'A-1-2': 'y'})

    @pytest.mark.asyncio
    async def test_put_fields_skips_empty_mapping(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        await store.put_fields(key='h', mapping={})

        mock_client.hset.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_delete_and_put_field(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        await store.put_field(key='h', field='A-1-1', value='x')
        await store.delete(key='lock')

        mock_client.hset.assert_awaited_once_with('h', 'A-1-1', 'x')
        mock_client.delete.assert_awaited_once_with('lock')


@pytest.mark.unit
class TestKvrocksErrorTranslation:
    @pytest.mark.asyncio
    async def test_timeout_becomes_retryable_timeout_error(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock
    ) -> None:
        mock_client.get.side_effect = RedisTimeoutError('Timeout reading from socket')

        with pytest.raises(StateStoreTimeoutError) as exc_info:
            await store.get(key='k')

        assert exc_info.value.retryable is True
        assert exc_info.value.status_code == 503

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        'error', [RedisConnectionError('refused'), ResponseError('WRONGTYPE')]
    )
    async def test_other_redis_errors_become_unavailable(
        self, store: KvrocksKeyValueStoreImpl, mock_client: AsyncMock, error: Exception
    ) -> None:
        mock_client.hgetall.side_effect = error

        with pytest.raises(StateStoreUnavailableError) as exc_info:
            await store.get_all_fields(key='h')

        assert not isinstance(exc_info.value, StateStoreTimeoutError)
