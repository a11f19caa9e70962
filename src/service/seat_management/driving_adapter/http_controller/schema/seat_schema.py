from typing import List

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class _CamelCaseModel(BaseModel):
    """Reads `seatNumber` or `seat_number` style keys; serializes camelCase."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SeatInfoRequest(_CamelCaseModel):
    grade: str
    section: str
    row: str
    seat_number: int
    price: int


class SeatRegistrationRequest(_CamelCaseModel):
    product_id: int
    seats: List[SeatInfoRequest]


class SeatLockRequest(_CamelCaseModel):
    product_id: int
    seat_id: str
    user_id: int


class SeatRegistrationResponse(_CamelCaseModel):
    message: str
    product_id: int
    registered_count: int


class SeatStatusResponse(_CamelCaseModel):
    seat_id: str
    status: str
    grade: str
    price: int


class SeatLockResponse(_CamelCaseModel):
    message: str
    product_id: int
    seat_id: str
    user_id: int
    expires_in_seconds: int
