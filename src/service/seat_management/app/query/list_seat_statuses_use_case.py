from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.seat_management.app.interface.i_seat_state_handler import ISeatStateHandler
from src.service.seat_management.domain.seat_record import SeatRecord, ensure_valid_product_id


class ListSeatStatusesUseCase:
    def __init__(self, *, seat_state_handler: ISeatStateHandler) -> None:
        self.seat_state_handler = seat_state_handler

    @classmethod
    @inject
    def depends(
        cls,
        seat_state_handler: ISeatStateHandler = Depends(Provide[Container.seat_state_handler]),
    ) -> Self:
        return cls(seat_state_handler=seat_state_handler)

    @Logger.io
    async def execute(self, *, product_id: int) -> List[SeatRecord]:
        """
        Stored records as-is. A LOCKED seat whose marker already expired is
        still reported LOCKED until a payment result or re-registration
        rewrites it. An unknown product yields an empty list.
        """
        ensure_valid_product_id(product_id)
        seats = await self.seat_state_handler.list_seats(product_id=product_id)
        return sorted(seats, key=lambda seat: seat.seat_id)
