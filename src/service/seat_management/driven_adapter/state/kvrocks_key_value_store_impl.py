"""
Kvrocks Key-Value Store Implementation

Thin async adapter over the shared Kvrocks connection pool. Redis-level
failures are translated into StateStoreUnavailableError so that callers
never have to know about redis exceptions.
"""

from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError

from src.platform.state.kvrocks_client import kvrocks_client
from src.service.seat_management.app.interface.i_key_value_store import IKeyValueStore
from src.service.seat_management.domain.seat_errors import (
    StateStoreTimeoutError,
    StateStoreUnavailableError,
)


def _decode(value: str | bytes | None) -> Optional[str]:
    if isinstance(value, bytes):
        return value.decode()
    return value


@contextmanager
def _translate_store_errors(command: str, key: str) -> Iterator[None]:
    try:
        yield
    except RedisTimeoutError as e:
        raise StateStoreTimeoutError(f'Kvrocks {command} {key} timed out') from e
    except RedisError as e:
        raise StateStoreUnavailableError(f'Kvrocks {command} {key} failed: {e}') from e


class KvrocksKeyValueStoreImpl(IKeyValueStore):
    async def get(self, *, key: str) -> Optional[str]:
        with _translate_store_errors('GET', key):
            client = kvrocks_client.get_client()
            return _decode(await client.get(key))

    async def set_if_absent(self, *, key: str, value: str, ttl_seconds: int) -> bool:
        with _translate_store_errors('SET NX', key):
            client = kvrocks_client.get_client()
            # Single command: existence check, write and expiry are atomic
            return bool(await client.set(key, value, nx=True, ex=ttl_seconds))

    async def delete(self, *, key: str) -> None:
        with _translate_store_errors('DEL', key):
            client = kvrocks_client.get_client()
            await client.delete(key)

    async def get_field(self, *, key: str, field: str) -> Optional[str]:
        with _translate_store_errors('HGET', key):
            client = kvrocks_client.get_client()
            return _decode(await client.hget(key, field))  # type: ignore

    async def put_field(self, *, key: str, field: str, value: str) -> None:
        with _translate_store_errors('HSET', key):
            client = kvrocks_client.get_client()
            await client.hset(key, field, value)  # type: ignore

    async def put_fields(self, *, key: str, mapping: Dict[str, str]) -> None:
        if not mapping:
            return
        with _translate_store_errors('HSET', key):
            client = kvrocks_client.get_client()
            await client.hset(key, mapping=mapping)  # type: ignore

    async def get_all_fields(self, *, key: str) -> Dict[str, str]:
        with _translate_store_errors('HGETALL', key):
            client = kvrocks_client.get_client()
            raw = await client.hgetall(key)  # type: ignore
        return {_decode(field): _decode(value) for field, value in raw.items()}  # type: ignore
