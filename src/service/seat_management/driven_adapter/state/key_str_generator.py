"""
Key String Generator

Kvrocks keys used by the seat management service.
"""

import os


def _get_key_prefix() -> str:
    # Read per call: pytest sets KVROCKS_KEY_PREFIX after modules are imported
    return os.getenv('KVROCKS_KEY_PREFIX', '')


def _make_key(key: str) -> str:
    return f'{_get_key_prefix()}{key}'


def make_seats_key(*, product_id: int) -> str:
    """Hash of seatId -> JSON seat record for one product"""
    return _make_key(f'product:{product_id}:seats')


def make_lock_key(*, product_id: int, seat_id: str) -> str:
    """Lock marker for one seat; value is the holder's user id"""
    return _make_key(f'lock:product:{product_id}:{seat_id}')
