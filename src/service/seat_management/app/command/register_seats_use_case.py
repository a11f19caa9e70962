from typing import List, Self

from dependency_injector.wiring import Provide, inject
from fastapi import Depends

from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.service.seat_management.app.dto.seat_dto import RegisterSeatsResult, SeatInfo
from src.service.seat_management.app.interface.i_seat_state_handler import ISeatStateHandler
from src.service.seat_management.domain.seat_record import SeatRecord, ensure_valid_product_id


class RegisterSeatsUseCase:
    """
    Register a product's seat catalog.

    Every seat is written as AVAILABLE. Registering a seat id that already
    exists overwrites it, status included; lock markers are left alone.
    """

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
    async def execute(self, *, product_id: int, seats: List[SeatInfo]) -> RegisterSeatsResult:
        ensure_valid_product_id(product_id)

        records = {
            record.seat_id: record
            for record in (
                SeatRecord.register(
                    section=seat.section,
                    row=seat.row,
                    seat_number=seat.seat_number,
                    grade=seat.grade,
                    price=seat.price,
                )
                for seat in seats
            )
        }
        await self.seat_state_handler.save_seats(
            product_id=product_id, seats=list(records.values())
        )

        Logger.base.info(f'🪑 [REGISTER] product={product_id} seats={len(records)}')
        return RegisterSeatsResult(product_id=product_id, registered_count=len(records))
