from src.platform.logging.loguru_io import Logger
from src.service.seat_management.app.dto.seat_dto import ReconcileOutcome
from src.service.seat_management.app.interface.i_seat_state_handler import ISeatStateHandler
from src.service.seat_management.domain.seat_status import SeatStatus


class ReleaseSeatLockUseCase:
    """
    Apply a failed payment: LOCKED -> AVAILABLE, then drop the lock marker.

    A RESERVED seat is never released by a late failure message.
    """

    def __init__(self, *, seat_state_handler: ISeatStateHandler) -> None:
        self.seat_state_handler = seat_state_handler

    @Logger.io
    async def execute(self, *, product_id: int, seat_id: str) -> ReconcileOutcome:
        seat = await self.seat_state_handler.get_seat(product_id=product_id, seat_id=seat_id)
        if seat is None:
            Logger.base.warning(
                f'⚠️ [RELEASE] Seat {seat_id} of product {product_id} not registered, ignoring'
            )
            return ReconcileOutcome.SEAT_NOT_FOUND

        if seat.status is SeatStatus.LOCKED:
            await self.seat_state_handler.save_seat(
                product_id=product_id, seat=seat.transition_to(SeatStatus.AVAILABLE)
            )
            outcome = ReconcileOutcome.RELEASED
        else:
            outcome = ReconcileOutcome.NOT_LOCKED

        await self.seat_state_handler.release_lock_marker(product_id=product_id, seat_id=seat_id)
        Logger.base.info(f'🔓 [RELEASE] product={product_id} seat={seat_id} outcome={outcome}')
        return outcome
