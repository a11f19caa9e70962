"""Seat management fixtures: real use cases and handler over an in-memory store."""

import pytest

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
from src.service.seat_management.app.query.list_seat_statuses_use_case import (
    ListSeatStatusesUseCase,
)
from src.service.seat_management.driven_adapter.state.seat_state_handler_impl import (
    SeatStateHandlerImpl,
)
from test.service.seat_management.fake_key_value_store import FakeClock, InMemoryKeyValueStore


LOCK_TTL_SECONDS = 300


@pytest.fixture
def fake_clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def key_value_store(fake_clock: FakeClock) -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore(clock=fake_clock)


@pytest.fixture
def seat_state_handler(key_value_store: InMemoryKeyValueStore) -> SeatStateHandlerImpl:
    return SeatStateHandlerImpl(key_value_store=key_value_store)


@pytest.fixture
def register_seats_use_case(seat_state_handler: SeatStateHandlerImpl) -> RegisterSeatsUseCase:
    return RegisterSeatsUseCase(seat_state_handler=seat_state_handler)


@pytest.fixture
def list_seat_statuses_use_case(
    seat_state_handler: SeatStateHandlerImpl,
) -> ListSeatStatusesUseCase:
    return ListSeatStatusesUseCase(seat_state_handler=seat_state_handler)


@pytest.fixture
def lock_seat_use_case(seat_state_handler: SeatStateHandlerImpl) -> LockSeatUseCase:
    return LockSeatUseCase(
        seat_state_handler=seat_state_handler, lock_ttl_seconds=LOCK_TTL_SECONDS
    )


@pytest.fixture
def confirm_seat_reservation_use_case(
    seat_state_handler: SeatStateHandlerImpl,
) -> ConfirmSeatReservationUseCase:
    return ConfirmSeatReservationUseCase(seat_state_handler=seat_state_handler)


@pytest.fixture
def release_seat_lock_use_case(
    seat_state_handler: SeatStateHandlerImpl,
) -> ReleaseSeatLockUseCase:
    return ReleaseSeatLockUseCase(seat_state_handler=seat_state_handler)


@pytest.fixture
def handle_payment_result_use_case(
    confirm_seat_reservation_use_case: ConfirmSeatReservationUseCase,
    release_seat_lock_use_case: ReleaseSeatLockUseCase,
) -> HandlePaymentResultUseCase:
    return HandlePaymentResultUseCase(
        confirm_seat_reservation_use_case=confirm_seat_reservation_use_case,
        release_seat_lock_use_case=release_seat_lock_use_case,
    )
