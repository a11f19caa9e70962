"""
Wire Modules Configuration

Defines the modules that need dependency injection wiring.
Shared between production and test environments.
"""

from types import ModuleType

from src.service.seat_management.app.command import lock_seat_use_case, register_seats_use_case
from src.service.seat_management.app.query import list_seat_statuses_use_case


WIRE_MODULES: list[ModuleType] = [
    register_seats_use_case,
    list_seat_statuses_use_case,
    lock_seat_use_case,
]
