from src.platform.exception.exceptions import (
    ConflictError,
    DomainError,
    NotFoundError,
    ServiceUnavailableError,
)


class SeatAlreadyLockedError(ConflictError):
    def __init__(self, *, product_id: int, seat_id: str) -> None:
        super().__init__(f'Seat {seat_id} of product {product_id} is already locked')


class SeatAlreadyReservedError(ConflictError):
    def __init__(self, *, product_id: int, seat_id: str) -> None:
        super().__init__(f'Seat {seat_id} of product {product_id} is not available')


class SeatNotFoundError(NotFoundError):
    def __init__(self, *, product_id: int, seat_id: str) -> None:
        super().__init__(f'Seat {seat_id} not found for product {product_id}')


class InvalidSeatTransitionError(DomainError):
    def __init__(self, *, seat_id: str, current: str, target: str) -> None:
        super().__init__(f'Seat {seat_id} cannot move from {current} to {target}', 409)


class InvalidPaymentResultError(DomainError):
    """Payment result payload is missing fields or carries wrong types."""


class StateStoreUnavailableError(ServiceUnavailableError):
    """Kvrocks could not be reached or did not answer in time."""


class StateStoreTimeoutError(StateStoreUnavailableError):
    pass


class MalformedSeatRecordError(StateStoreUnavailableError):
    """
    A stored seat value could not be decoded.

    Surfaced as a store-class failure: the caller cannot fix it by changing
    the request, and it must never be read as AVAILABLE.
    """

    retryable = False
