from enum import StrEnum
from typing import Any, Dict, Optional

import attrs

from src.service.seat_management.domain.seat_errors import InvalidPaymentResultError


@attrs.define(frozen=True)
class SeatInfo:
    grade: str
    section: str
    row: str
    seat_number: int
    price: int


@attrs.define(frozen=True)
class RegisterSeatsResult:
    product_id: int
    registered_count: int


@attrs.define(frozen=True)
class LockSeatResult:
    product_id: int
    seat_id: str
    user_id: int
    expires_in_seconds: int


class ReconcileOutcome(StrEnum):
    RESERVED = 'reserved'
    RELEASED = 'released'
    ALREADY_RESERVED = 'already_reserved'
    NOT_LOCKED = 'not_locked'
    SEAT_NOT_FOUND = 'seat_not_found'


def _pick(data: Dict[str, Any], camel: str, snake: str) -> Any:
    return data[camel] if camel in data else data.get(snake)


@attrs.define(frozen=True)
class PaymentResultMessage:
    """Payment outcome published by the payment service."""

    order_id: int
    success: bool
    product_id: int
    seat_id: str
    payment_id: Optional[int] = None
    reason: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> 'PaymentResultMessage':
        """Accept the producer's camelCase keys as well as snake_case."""
        order_id = _pick(data, 'orderId', 'order_id')
        success = data.get('success')
        product_id = _pick(data, 'productId', 'product_id')
        seat_id = _pick(data, 'seatId', 'seat_id')
        payment_id = _pick(data, 'paymentId', 'payment_id')
        reason = data.get('reason')

        if not isinstance(success, bool):
            raise InvalidPaymentResultError(f'success must be a boolean, got {success!r}')
        for name, value in (('orderId', order_id), ('productId', product_id)):
            if not isinstance(value, int) or isinstance(value, bool):
                raise InvalidPaymentResultError(f'{name} must be an integer, got {value!r}')
        if not isinstance(seat_id, str) or not seat_id:
            raise InvalidPaymentResultError(f'seatId must be a non-empty string, got {seat_id!r}')
        if payment_id is not None and (not isinstance(payment_id, int) or isinstance(payment_id, bool)):
            raise InvalidPaymentResultError(f'paymentId must be an integer, got {payment_id!r}')

        return cls(
            order_id=order_id,
            success=success,
            product_id=product_id,
            seat_id=seat_id,
            payment_id=payment_id,
            reason=reason if isinstance(reason, str) else None,
        )
