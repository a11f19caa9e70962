from src.platform.logging.loguru_io import Logger
from src.service.seat_management.app.dto.seat_dto import ReconcileOutcome
from src.service.seat_management.app.interface.i_seat_state_handler import ISeatStateHandler
from src.service.seat_management.domain.seat_status import SeatStatus


class ConfirmSeatReservationUseCase:
    """
    Apply a successful payment: mark the seat RESERVED, then drop the lock marker.

    A seat found AVAILABLE (its hold was reset by a re-registration) is still
    reserved for the paying user. Redelivered messages are absorbed: a seat
    that is already RESERVED is left untouched.
    """

    def __init__(self, *, seat_state_handler: ISeatStateHandler) -> None:
        self.seat_state_handler = seat_state_handler

    @Logger.io
    async def execute(self, *, product_id: int, seat_id: str) -> ReconcileOutcome:
        seat = await self.seat_state_handler.get_seat(product_id=product_id, seat_id=seat_id)
        if seat is None:
            Logger.base.warning(
                f'⚠️ [CONFIRM] Seat {seat_id} of product {product_id} not registered, ignoring'
            )
            return ReconcileOutcome.SEAT_NOT_FOUND

        if seat.status is SeatStatus.RESERVED:
            outcome = ReconcileOutcome.ALREADY_RESERVED
        else:
            if seat.status is SeatStatus.AVAILABLE:
                Logger.base.warning(
                    f'⚠️ [CONFIRM] Seat {seat_id} of product {product_id} lost its hold '
                    'before payment, reserving anyway'
                )
            await self.seat_state_handler.save_seat(
                product_id=product_id, seat=seat.settle_payment()
            )
            outcome = ReconcileOutcome.RESERVED

        await self.seat_state_handler.release_lock_marker(product_id=product_id, seat_id=seat_id)
        Logger.base.info(f'✅ [CONFIRM] product={product_id} seat={seat_id} outcome={outcome}')
        return outcome
