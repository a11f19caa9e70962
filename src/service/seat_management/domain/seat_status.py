from enum import StrEnum

from src.service.seat_management.domain.seat_errors import MalformedSeatRecordError


class SeatStatus(StrEnum):
    AVAILABLE = 'AVAILABLE'
    LOCKED = 'LOCKED'
    RESERVED = 'RESERVED'

    @classmethod
    def decode(cls, raw: object) -> 'SeatStatus':
        """Map a stored status string back to the enum; anything unknown is a corrupt record."""
        match raw:
            case 'AVAILABLE':
                return cls.AVAILABLE
            case 'LOCKED':
                return cls.LOCKED
            case 'RESERVED':
                return cls.RESERVED
            case _:
                raise MalformedSeatRecordError(f'Unknown seat status: {raw!r}')

    def can_transition_to(self, target: 'SeatStatus') -> bool:
        return target in _ALLOWED_TRANSITIONS[self]


# AVAILABLE -> LOCKED -> RESERVED, or LOCKED -> AVAILABLE on payment failure.
# RESERVED is terminal.
_ALLOWED_TRANSITIONS: dict[SeatStatus, frozenset[SeatStatus]] = {
    SeatStatus.AVAILABLE: frozenset({SeatStatus.LOCKED}),
    SeatStatus.LOCKED: frozenset({SeatStatus.RESERVED, SeatStatus.AVAILABLE}),
    SeatStatus.RESERVED: frozenset(),
}
