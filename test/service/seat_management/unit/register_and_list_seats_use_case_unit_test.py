import pytest

from src.platform.exception.exceptions import DomainError
from src.service.seat_management.app.command.register_seats_use_case import RegisterSeatsUseCase
from src.service.seat_management.app.query.list_seat_statuses_use_case import (
    ListSeatStatusesUseCase,
)
from src.service.seat_management.domain.seat_record import SeatRecord
from src.service.seat_management.domain.seat_status import SeatStatus
from src.service.seat_management.driven_adapter.state.seat_state_handler_impl import (
    SeatStateHandlerImpl,
)
from test.service.seat_management.fake_key_value_store import make_seat_info


@pytest.mark.unit
class TestRegisterSeats:
    @pytest.mark.asyncio
    async def test_registered_seats_are_listed_available(
        self,
        register_seats_use_case: RegisterSeatsUseCase,
        list_seat_statuses_use_case: ListSeatStatusesUseCase,
    ) -> None:
        result = await register_seats_use_case.execute(
            product_id=1,
            seats=[
                make_seat_info(section='A', row='1', seat_number=2, grade='VIP', price=150000),
                make_seat_info(section='A', row='1', seat_number=1, grade='VIP', price=150000),
                make_seat_info(section='B', row='3', seat_number=9, grade='R', price=90000),
            ],
        )

        assert (result.product_id, result.registered_count) == (1, 3)
        seats = await list_seat_statuses_use_case.execute(product_id=1)
        assert [seat.seat_id for seat in seats] == ['A-1-1', 'A-1-2', 'B-3-9']
        assert all(seat.status is SeatStatus.AVAILABLE for seat in seats)
        assert seats[2].grade == 'R' and seats[2].price == 90000

    @pytest.mark.asyncio
    async def test_duplicate_seat_in_one_request_counts_once(
        self, register_seats_use_case: RegisterSeatsUseCase
    ) -> None:
        result = await register_seats_use_case.execute(
            product_id=1,
            seats=[make_seat_info(price=1), make_seat_info(price=2)],
        )

        assert result.registered_count == 1

    @pytest.mark.asyncio
    async def test_empty_registration_is_allowed(
        self,
        register_seats_use_case: RegisterSeatsUseCase,
        list_seat_statuses_use_case: ListSeatStatusesUseCase,
    ) -> None:
        result = await register_seats_use_case.execute(product_id=3, seats=[])

        assert result.registered_count == 0
        assert await list_seat_statuses_use_case.execute(product_id=3) == []

    @pytest.mark.asyncio
    async def test_reregistration_overwrites_status(
        self,
        register_seats_use_case: RegisterSeatsUseCase,
        seat_state_handler: SeatStateHandlerImpl,
    ) -> None:
        await seat_state_handler.save_seat(
            product_id=1,
            seat=SeatRecord(seat_id='A-1-1', grade='VIP', price=1, status=SeatStatus.RESERVED),
        )

        await register_seats_use_case.execute(product_id=1, seats=[make_seat_info(price=2)])

        seat = await seat_state_handler.get_seat(product_id=1, seat_id='A-1-1')
        assert seat == SeatRecord(seat_id='A-1-1', grade='VIP', price=2)

    @pytest.mark.asyncio
    async def test_invalid_product_id_rejected(
        self, register_seats_use_case: RegisterSeatsUseCase
    ) -> None:
        with pytest.raises(DomainError):
            await register_seats_use_case.execute(product_id=0, seats=[make_seat_info()])


@pytest.mark.unit
class TestListSeatStatuses:
    @pytest.mark.asyncio
    async def test_unknown_product_is_empty(
        self, list_seat_statuses_use_case: ListSeatStatusesUseCase
    ) -> None:
        assert await list_seat_statuses_use_case.execute(product_id=404) == []

    @pytest.mark.asyncio
    async def test_products_are_isolated(
        self,
        register_seats_use_case: RegisterSeatsUseCase,
        list_seat_statuses_use_case: ListSeatStatusesUseCase,
    ) -> None:
        await register_seats_use_case.execute(product_id=1, seats=[make_seat_info()])
        await register_seats_use_case.execute(
            product_id=2, seats=[make_seat_info(seat_number=5)]
        )

        seats = await list_seat_statuses_use_case.execute(product_id=2)
        assert [seat.seat_id for seat in seats] == ['A-1-5']
