from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.platform.metrics.seat_metrics import metrics
from src.service.seat_management.app.command.confirm_seat_reservation_use_case import (
    ConfirmSeatReservationUseCase,
)
from src.service.seat_management.app.command.release_seat_lock_use_case import (
    ReleaseSeatLockUseCase,
)
from src.service.seat_management.app.dto.seat_dto import PaymentResultMessage, ReconcileOutcome


class HandlePaymentResultUseCase:
    """Route a payment result to confirmation or release."""

    def __init__(
        self,
        *,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        release_seat_lock_use_case: ReleaseSeatLockUseCase,
    ) -> None:
        self.confirm_seat_reservation_use_case = confirm_seat_reservation_use_case
        self.release_seat_lock_use_case = release_seat_lock_use_case
        self.tracer = trace.get_tracer(__name__)

    @Logger.io
    async def execute(self, *, message: PaymentResultMessage) -> ReconcileOutcome:
        with self.tracer.start_as_current_span(
            'use_case.handle_payment_result',
            attributes={
                'order.id': message.order_id,
                'product.id': message.product_id,
                'seat.id': message.seat_id,
                'payment.success': message.success,
            },
        ):
            if message.success:
                outcome = await self.confirm_seat_reservation_use_case.execute(
                    product_id=message.product_id, seat_id=message.seat_id
                )
            else:
                Logger.base.info(
                    f'💳 [PAYMENT] order={message.order_id} failed: {message.reason or "no reason"}'
                )
                outcome = await self.release_seat_lock_use_case.execute(
                    product_id=message.product_id, seat_id=message.seat_id
                )

        metrics.record_reconciliation(outcome=outcome)
        return outcome
