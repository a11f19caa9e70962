import time
from typing import Self

import anyio
from dependency_injector.wiring import Provide, inject
from fastapi import Depends
from opentelemetry import trace

from src.platform.config.core_setting import settings
from src.platform.config.di import Container
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.seat_metrics import metrics
from src.service.seat_management.app.dto.seat_dto import LockSeatResult
from src.service.seat_management.app.interface.i_seat_state_handler import ISeatStateHandler
from src.service.seat_management.domain.seat_errors import (
    SeatAlreadyLockedError,
    SeatAlreadyReservedError,
    SeatNotFoundError,
)
from src.service.seat_management.domain.seat_record import ensure_valid_product_id
from src.service.seat_management.domain.seat_status import SeatStatus


class LockSeatUseCase:
    """
    Take a short exclusive hold on one seat.

    Flow:
    1. SET NX the seat's lock marker with the hold TTL (mutual exclusion point)
    2. Read the seat record; it must exist and be AVAILABLE
    3. Write the record back as LOCKED

    If step 2 or 3 fails for any reason the marker is deleted before the
    error propagates, so a failed attempt never blocks the next caller.
    """

    def __init__(self, *, seat_state_handler: ISeatStateHandler, lock_ttl_seconds: int) -> None:
        self.seat_state_handler = seat_state_handler
        self.lock_ttl_seconds = lock_ttl_seconds
        self.tracer = trace.get_tracer(__name__)

    @classmethod
    @inject
    def depends(
        cls,
        seat_state_handler: ISeatStateHandler = Depends(Provide[Container.seat_state_handler]),
    ) -> Self:
        return cls(
            seat_state_handler=seat_state_handler,
            lock_ttl_seconds=settings.SEAT_LOCK_TTL_SECONDS,
        )

    @Logger.io
    async def execute(self, *, product_id: int, seat_id: str, user_id: int) -> LockSeatResult:
        ensure_valid_product_id(product_id)

        start = time.perf_counter()
        result = 'error'
        try:
            with self.tracer.start_as_current_span(
                'use_case.lock_seat',
                attributes={'product.id': product_id, 'seat.id': seat_id, 'user.id': user_id},
            ):
                acquired = await self.seat_state_handler.acquire_lock_marker(
                    product_id=product_id,
                    seat_id=seat_id,
                    holder=str(user_id),
                    ttl_seconds=self.lock_ttl_seconds,
                )
                if not acquired:
                    result = 'already_locked'
                    raise SeatAlreadyLockedError(product_id=product_id, seat_id=seat_id)

                try:
                    await self._mark_locked(product_id=product_id, seat_id=seat_id)
                except SeatNotFoundError:
                    result = 'not_found'
                    await self._release_marker_after_failure(product_id=product_id, seat_id=seat_id)
                    raise
                except SeatAlreadyReservedError:
                    result = 'already_reserved'
                    await self._release_marker_after_failure(product_id=product_id, seat_id=seat_id)
                    raise
                except BaseException:
                    # Includes cancellation
                    await self._release_marker_after_failure(product_id=product_id, seat_id=seat_id)
                    raise

            result = 'locked'
            Logger.base.info(f'🔒 [LOCK] product={product_id} seat={seat_id} user={user_id}')
            return LockSeatResult(
                product_id=product_id,
                seat_id=seat_id,
                user_id=user_id,
                expires_in_seconds=self.lock_ttl_seconds,
            )
        finally:
            metrics.record_seat_lock(result=result, duration=time.perf_counter() - start)

    async def _mark_locked(self, *, product_id: int, seat_id: str) -> None:
        seat = await self.seat_state_handler.get_seat(product_id=product_id, seat_id=seat_id)
        if seat is None:
            raise SeatNotFoundError(product_id=product_id, seat_id=seat_id)
        if seat.status is not SeatStatus.AVAILABLE:
            raise SeatAlreadyReservedError(product_id=product_id, seat_id=seat_id)

        await self.seat_state_handler.save_seat(
            product_id=product_id, seat=seat.transition_to(SeatStatus.LOCKED)
        )

    async def _release_marker_after_failure(self, *, product_id: int, seat_id: str) -> None:
        # Shielded so a cancelled request still cleans up its marker
        with anyio.CancelScope(shield=True):
            try:
                await self.seat_state_handler.release_lock_marker(
                    product_id=product_id, seat_id=seat_id
                )
            except Exception as cleanup_error:
                # The original failure is what the caller needs to see
                Logger.base.error(
                    f'❌ [LOCK] Could not remove lock marker for product={product_id} '
                    f'seat={seat_id}; it expires after {self.lock_ttl_seconds}s: {cleanup_error}'
                )
