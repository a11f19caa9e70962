"""
Seat State Handler Interface

Seat-level persistence on top of the key-value store: the per-product seat
catalog hash and the per-seat lock markers.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.service.seat_management.domain.seat_record import SeatRecord


class ISeatStateHandler(ABC):
    @abstractmethod
    async def save_seats(self, *, product_id: int, seats: List[SeatRecord]) -> None:
        """Write every record into the product's catalog, overwriting existing entries."""
        pass

    @abstractmethod
    async def get_seat(self, *, product_id: int, seat_id: str) -> Optional[SeatRecord]:
        pass

    @abstractmethod
    async def save_seat(self, *, product_id: int, seat: SeatRecord) -> None:
        pass

    @abstractmethod
    async def list_seats(self, *, product_id: int) -> List[SeatRecord]:
        pass

    @abstractmethod
    async def acquire_lock_marker(
        self, *, product_id: int, seat_id: str, holder: str, ttl_seconds: int
    ) -> bool:
        """Create the seat's lock marker if absent. Returns False when someone else holds it."""
        pass

    @abstractmethod
    async def release_lock_marker(self, *, product_id: int, seat_id: str) -> None:
        pass

    @abstractmethod
    async def get_lock_holder(self, *, product_id: int, seat_id: str) -> Optional[str]:
        pass
