from typing import List

from fastapi import APIRouter, Depends, status
from opentelemetry import trace

from src.platform.logging.loguru_io import Logger
from src.service.seat_management.app.command.lock_seat_use_case import LockSeatUseCase
from src.service.seat_management.app.command.register_seats_use_case import RegisterSeatsUseCase
from src.service.seat_management.app.dto.seat_dto import SeatInfo
from src.service.seat_management.app.query.list_seat_statuses_use_case import (
    ListSeatStatusesUseCase,
)
from src.service.seat_management.driving_adapter.http_controller.schema.seat_schema import (
    SeatLockRequest,
    SeatLockResponse,
    SeatRegistrationRequest,
    SeatRegistrationResponse,
    SeatStatusResponse,
)


router = APIRouter()
tracer = trace.get_tracer(__name__)


@router.post('/register', status_code=status.HTTP_200_OK, response_model_by_alias=True)
@Logger.io
async def register_seats(
    request: SeatRegistrationRequest,
    use_case: RegisterSeatsUseCase = Depends(RegisterSeatsUseCase.depends),
) -> SeatRegistrationResponse:
    with tracer.start_as_current_span('controller.register_seats') as span:
        span.set_attribute('product_id', request.product_id)
        span.set_attribute('seat_count', len(request.seats))

        result = await use_case.execute(
            product_id=request.product_id,
            seats=[
                SeatInfo(
                    grade=seat.grade,
                    section=seat.section,
                    row=seat.row,
                    seat_number=seat.seat_number,
                    price=seat.price,
                )
                for seat in request.seats
            ],
        )
        return SeatRegistrationResponse(
            message=f'Seats registered for product {result.product_id}',
            product_id=result.product_id,
            registered_count=result.registered_count,
        )


@router.get('/{product_id}', status_code=status.HTTP_200_OK, response_model_by_alias=True)
@Logger.io
async def list_seat_statuses(
    product_id: int,
    use_case: ListSeatStatusesUseCase = Depends(ListSeatStatusesUseCase.depends),
) -> List[SeatStatusResponse]:
    seats = await use_case.execute(product_id=product_id)
    return [
        SeatStatusResponse(
            seat_id=seat.seat_id, status=seat.status.value, grade=seat.grade, price=seat.price
        )
        for seat in seats
    ]


@router.post('/lock', status_code=status.HTTP_200_OK, response_model_by_alias=True)
@Logger.io
async def lock_seat(
    request: SeatLockRequest,
    use_case: LockSeatUseCase = Depends(LockSeatUseCase.depends),
) -> SeatLockResponse:
    """
    Hold one seat for the requesting user.

    409 when another holder owns the seat or it is not AVAILABLE,
    404 when the seat was never registered, 503 when Kvrocks is unavailable.
    """
    result = await use_case.execute(
        product_id=request.product_id, seat_id=request.seat_id, user_id=request.user_id
    )
    return SeatLockResponse(
        message='Seat locked',
        product_id=result.product_id,
        seat_id=result.seat_id,
        user_id=result.user_id,
        expires_in_seconds=result.expires_in_seconds,
    )
