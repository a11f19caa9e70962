"""
Unit tests for payment result reconciliation

Confirm and release must be safe to apply more than once, and a late or
stale message must never move a seat backwards.
"""

import pytest
import pytest_asyncio

from src.service.seat_management.app.command.confirm_seat_reservation_use_case import (
    ConfirmSeatReservationUseCase,
)
from src.service.seat_management.app.command.handle_payment_result_use_case import (
    HandlePaymentResultUseCase,
)
from src.service.seat_management.app.command.lock_seat_use_case import LockSeatUseCase
from src.service.seat_management.app.command.register_seats_use_case import RegisterSeatsUseCase
from src.service.seat_management.app.command.release_seat_lock_use_case import (
    ReleaseSeatLockUseCase,
)
from src.service.seat_management.app.dto.seat_dto import PaymentResultMessage, ReconcileOutcome
from src.service.seat_management.domain.seat_errors import (
    SeatAlreadyReservedError,
    StateStoreTimeoutError,
)
from src.service.seat_management.domain.seat_status import SeatStatus
from src.service.seat_management.driven_adapter.state.seat_state_handler_impl import (
    SeatStateHandlerImpl,
)
from test.service.seat_management.fake_key_value_store import (
    InMemoryKeyValueStore,
    make_seat_info,
)


PRODUCT_ID = 1
SEAT_ID = 'A-1-1'


@pytest_asyncio.fixture
async def locked_seat(
    register_seats_use_case: RegisterSeatsUseCase, lock_seat_use_case: LockSeatUseCase
) -> None:
    await register_seats_use_case.execute(product_id=PRODUCT_ID, seats=[make_seat_info()])
    await lock_seat_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID, user_id=7)


async def _status(handler: SeatStateHandlerImpl) -> SeatStatus:
    seat = await handler.get_seat(product_id=PRODUCT_ID, seat_id=SEAT_ID)
    assert seat is not None
    return seat.status


def _message(*, success: bool, seat_id: str = SEAT_ID) -> PaymentResultMessage:
    return PaymentResultMessage(
        order_id=100,
        success=success,
        product_id=PRODUCT_ID,
        seat_id=seat_id,
        payment_id=500 if success else None,
        reason=None if success else 'card declined',
    )


@pytest.mark.unit
@pytest.mark.usefixtures('locked_seat')
class TestConfirmSeatReservation:
    @pytest.mark.asyncio
    async def test_locked_seat_becomes_reserved_and_marker_is_gone(
        self,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        outcome = await confirm_seat_reservation_use_case.execute(
            product_id=PRODUCT_ID, seat_id=SEAT_ID
        )

        assert outcome is ReconcileOutcome.RESERVED
        assert await _status(seat_state_handler) is SeatStatus.RESERVED
        assert await seat_state_handler.get_lock_holder(product_id=PRODUCT_ID, seat_id=SEAT_ID) is None

    @pytest.mark.asyncio
    async def test_redelivered_confirmation_is_a_no_op(
        self,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        seat_state_handler: SeatStateHandlerImpl,
        key_value_store: InMemoryKeyValueStore,
    ) -> None:
        await confirm_seat_reservation_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)
        key_value_store.calls.clear()

        outcome = await confirm_seat_reservation_use_case.execute(
            product_id=PRODUCT_ID, seat_id=SEAT_ID
        )

        assert outcome is ReconcileOutcome.ALREADY_RESERVED
        assert 'put_field' not in key_value_store.calls
        assert await _status(seat_state_handler) is SeatStatus.RESERVED

    @pytest.mark.asyncio
    async def test_reserved_seat_cannot_be_locked_again(
        self,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        lock_seat_use_case: LockSeatUseCase,
    ) -> None:
        await confirm_seat_reservation_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)

        with pytest.raises(SeatAlreadyReservedError):
            await lock_seat_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID, user_id=8)

    @pytest.mark.asyncio
    async def test_unknown_seat_is_ignored(
        self,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        outcome = await confirm_seat_reservation_use_case.execute(
            product_id=PRODUCT_ID, seat_id='Z-9-9'
        )

        assert outcome is ReconcileOutcome.SEAT_NOT_FOUND
        assert await _status(seat_state_handler) is SeatStatus.LOCKED

    @pytest.mark.asyncio
    async def test_seat_reset_by_re_registration_is_still_reserved(
        self,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        register_seats_use_case: RegisterSeatsUseCase,
        lock_seat_use_case: LockSeatUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        await register_seats_use_case.execute(product_id=PRODUCT_ID, seats=[make_seat_info()])
        assert await _status(seat_state_handler) is SeatStatus.AVAILABLE

        outcome = await confirm_seat_reservation_use_case.execute(
            product_id=PRODUCT_ID, seat_id=SEAT_ID
        )

        assert outcome is ReconcileOutcome.RESERVED
        assert await _status(seat_state_handler) is SeatStatus.RESERVED
        assert await seat_state_handler.get_lock_holder(product_id=PRODUCT_ID, seat_id=SEAT_ID) is None
        with pytest.raises(SeatAlreadyReservedError):
            await lock_seat_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID, user_id=8)


@pytest.mark.unit
@pytest.mark.usefixtures('locked_seat')
class TestReleaseSeatLock:
    @pytest.mark.asyncio
    async def test_locked_seat_becomes_available_and_lockable(
        self,
        release_seat_lock_use_case: ReleaseSeatLockUseCase,
        lock_seat_use_case: LockSeatUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        outcome = await release_seat_lock_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)

        assert outcome is ReconcileOutcome.RELEASED
        assert await _status(seat_state_handler) is SeatStatus.AVAILABLE
        result = await lock_seat_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID, user_id=8)
        assert result.user_id == 8

    @pytest.mark.asyncio
    async def test_redelivered_release_is_a_no_op(
        self,
        release_seat_lock_use_case: ReleaseSeatLockUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        await release_seat_lock_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)

        outcome = await release_seat_lock_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)

        assert outcome is ReconcileOutcome.NOT_LOCKED
        assert await _status(seat_state_handler) is SeatStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_late_failure_never_releases_a_reserved_seat(
        self,
        confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
        release_seat_lock_use_case: ReleaseSeatLockUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        await confirm_seat_reservation_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)

        outcome = await release_seat_lock_use_case.execute(product_id=PRODUCT_ID, seat_id=SEAT_ID)

        assert outcome is ReconcileOutcome.NOT_LOCKED
        assert await _status(seat_state_handler) is SeatStatus.RESERVED


@pytest.mark.unit
@pytest.mark.usefixtures('locked_seat')
class TestHandlePaymentResult:
    @pytest.mark.asyncio
    async def test_success_routes_to_confirmation(
        self,
        handle_payment_result_use_case: HandlePaymentResultUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        outcome = await handle_payment_result_use_case.execute(message=_message(success=True))

        assert outcome is ReconcileOutcome.RESERVED
        assert await _status(seat_state_handler) is SeatStatus.RESERVED

    @pytest.mark.asyncio
    async def test_failure_routes_to_release(
        self,
        handle_payment_result_use_case: HandlePaymentResultUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        outcome = await handle_payment_result_use_case.execute(message=_message(success=False))

        assert outcome is ReconcileOutcome.RELEASED
        assert await _status(seat_state_handler) is SeatStatus.AVAILABLE

    @pytest.mark.asyncio
    async def test_store_timeout_propagates_for_redelivery(
        self,
        handle_payment_result_use_case: HandlePaymentResultUseCase,
        key_value_store: InMemoryKeyValueStore,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        key_value_store.fail_on('put_field', StateStoreTimeoutError('timed out'))

        with pytest.raises(StateStoreTimeoutError):
            await handle_payment_result_use_case.execute(message=_message(success=True))

        key_value_store.clear_failures()
        assert await _status(seat_state_handler) is SeatStatus.LOCKED

        outcome = await handle_payment_result_use_case.execute(message=_message(success=True))
        assert outcome is ReconcileOutcome.RESERVED
