"""
Seat State Handler Implementation

Stores each product's catalog as one hash (seatId -> JSON record) and each
seat lock as its own expiring key.
"""

from typing import List, Optional

from src.platform.logging.loguru_io import Logger
from src.service.seat_management.app.interface.i_key_value_store import IKeyValueStore
from src.service.seat_management.app.interface.i_seat_state_handler import ISeatStateHandler
from src.service.seat_management.domain.seat_record import SeatRecord
from src.service.seat_management.driven_adapter.state.key_str_generator import (
    make_lock_key,
    make_seats_key,
)


class SeatStateHandlerImpl(ISeatStateHandler):
    def __init__(self, *, key_value_store: IKeyValueStore) -> None:
        self.key_value_store = key_value_store

    async def save_seats(self, *, product_id: int, seats: List[SeatRecord]) -> None:
        await self.key_value_store.put_fields(
            key=make_seats_key(product_id=product_id),
            mapping={seat.seat_id: seat.to_json() for seat in seats},
        )

    async def get_seat(self, *, product_id: int, seat_id: str) -> Optional[SeatRecord]:
        raw = await self.key_value_store.get_field(
            key=make_seats_key(product_id=product_id), field=seat_id
        )
        if raw is None:
            return None
        return SeatRecord.from_json(seat_id=seat_id, raw=raw)

    async def save_seat(self, *, product_id: int, seat: SeatRecord) -> None:
        await self.key_value_store.put_field(
            key=make_seats_key(product_id=product_id), field=seat.seat_id, value=seat.to_json()
        )

    @Logger.io
    async def list_seats(self, *, product_id: int) -> List[SeatRecord]:
        fields = await self.key_value_store.get_all_fields(key=make_seats_key(product_id=product_id))
        return [SeatRecord.from_json(seat_id=seat_id, raw=raw) for seat_id, raw in fields.items()]

    async def acquire_lock_marker(
        self, *, product_id: int, seat_id: str, holder: str, ttl_seconds: int
    ) -> bool:
        return await self.key_value_store.set_if_absent(
            key=make_lock_key(product_id=product_id, seat_id=seat_id),
            value=holder,
            ttl_seconds=ttl_seconds,
        )

    async def release_lock_marker(self, *, product_id: int, seat_id: str) -> None:
        await self.key_value_store.delete(key=make_lock_key(product_id=product_id, seat_id=seat_id))

    async def get_lock_holder(self, *, product_id: int, seat_id: str) -> Optional[str]:
        return await self.key_value_store.get(
            key=make_lock_key(product_id=product_id, seat_id=seat_id)
        )
