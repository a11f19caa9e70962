"""
https://python-dependency-injector.ets-labs.org/index.html
https://python-dependency-injector.ets-labs.org/examples/fastapi.html
"""

from dependency_injector import containers, providers

from src.service.seat_management.app.command.confirm_seat_reservation_use_case import (
    ConfirmSeatReservationUseCase,
)
from src.service.seat_management.app.command.handle_payment_result_use_case import (
    HandlePaymentResultUseCase,
)
from src.service.seat_management.app.command.release_seat_lock_use_case import (
    ReleaseSeatLockUseCase,
)
from src.service.seat_management.driven_adapter.state.kvrocks_key_value_store_impl import (
    KvrocksKeyValueStoreImpl,
)
from src.service.seat_management.driven_adapter.state.seat_state_handler_impl import (
    SeatStateHandlerImpl,
)


class Container(containers.DeclarativeContainer):
    # Kvrocks adapters (stateless - pull the client from the shared pool per call)
    key_value_store = providers.Singleton(KvrocksKeyValueStoreImpl)
    seat_state_handler = providers.Singleton(
        SeatStateHandlerImpl,
        key_value_store=key_value_store,
    )

    # Payment reconciliation use cases (used by the Kafka consumer)
    confirm_seat_reservation_use_case = providers.Singleton(
        ConfirmSeatReservationUseCase,
        seat_state_handler=seat_state_handler,
    )
    release_seat_lock_use_case = providers.Singleton(
        ReleaseSeatLockUseCase,
        seat_state_handler=seat_state_handler,
    )
    handle_payment_result_use_case = providers.Singleton(
        HandlePaymentResultUseCase,
        confirm_seat_reservation_use_case=confirm_seat_reservation_use_case,
        release_seat_lock_use_case=release_seat_lock_use_case,
    )


container = Container()


def cleanup() -> None:
    container.reset_singletons()
