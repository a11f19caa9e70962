"""
Key-Value Store Interface

The small slice of Kvrocks the seat service relies on: string keys with
optional TTL, and hashes of string fields.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional


class IKeyValueStore(ABC):
    @abstractmethod
    async def get(self, *, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_if_absent(self, *, key: str, value: str, ttl_seconds: int) -> bool:
        """Write `value` only when `key` does not exist. Returns True if this call created it."""
        pass

    @abstractmethod
    async def delete(self, *, key: str) -> None:
        """Remove `key`. Deleting a missing key is not an error."""
        pass

    @abstractmethod
    async def get_field(self, *, key: str, field: str) -> Optional[str]:
        pass

    @abstractmethod
    async def put_field(self, *, key: str, field: str, value: str) -> None:
        pass

    @abstractmethod
    async def put_fields(self, *, key: str, mapping: Dict[str, str]) -> None:
        pass

    @abstractmethod
    async def get_all_fields(self, *, key: str) -> Dict[str, str]:
        pass
