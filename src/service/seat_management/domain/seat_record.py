from typing import Any

import attrs
import orjson

from src.platform.exception.exceptions import DomainError
from src.service.seat_management.domain.seat_errors import (
    InvalidSeatTransitionError,
    MalformedSeatRecordError,
)
from src.service.seat_management.domain.seat_status import SeatStatus


def make_seat_id(*, section: str, row: str, seat_number: int) -> str:
    """Seat identifier inside a product: `{section}-{row}-{seatNumber}`, e.g. `A-1-3`."""
    return f'{section}-{row}-{seat_number}'


def ensure_valid_product_id(product_id: int) -> None:
    if product_id <= 0:
        raise DomainError('product_id must be a positive integer', 400)


@attrs.define(frozen=True)
class SeatRecord:
    seat_id: str
    grade: str
    price: int
    status: SeatStatus = SeatStatus.AVAILABLE

    @classmethod
    def register(
        cls, *, section: str, row: str, seat_number: int, grade: str, price: int
    ) -> 'SeatRecord':
        return cls(
            seat_id=make_seat_id(section=section, row=row, seat_number=seat_number),
            grade=grade,
            price=price,
        )

    def transition_to(self, target: SeatStatus) -> 'SeatRecord':
        if not self.status.can_transition_to(target):
            raise InvalidSeatTransitionError(
                seat_id=self.seat_id, current=self.status, target=target
            )
        return attrs.evolve(self, status=target)

    def settle_payment(self) -> 'SeatRecord':
        """
        Reserve the seat for a captured payment.

        Unlike `transition_to`, AVAILABLE is accepted as a source: a catalog
        re-registration may have reset the held seat before the payment landed,
        and the paying user keeps it.
        """
        if self.status is SeatStatus.RESERVED:
            raise InvalidSeatTransitionError(
                seat_id=self.seat_id, current=self.status, target=SeatStatus.RESERVED
            )
        return attrs.evolve(self, status=SeatStatus.RESERVED)

    def to_json(self) -> str:
        return orjson.dumps(
            {'status': self.status.value, 'grade': self.grade, 'price': self.price}
        ).decode()

    @classmethod
    def from_json(cls, *, seat_id: str, raw: str | bytes) -> 'SeatRecord':
        try:
            data: Any = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise MalformedSeatRecordError(f'Seat {seat_id} holds invalid JSON: {e}') from e

        match data:
            case {'status': status, 'grade': str() as grade, 'price': int() as price} if (
                not isinstance(price, bool)
            ):
                return cls(
                    seat_id=seat_id, grade=grade, price=price, status=SeatStatus.decode(status)
                )
            case _:
                raise MalformedSeatRecordError(f'Seat {seat_id} holds an unexpected record: {data!r}')
