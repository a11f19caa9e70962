"""
Standalone Payment Result Consumer Entry Point

Usage:
    PYTHONPATH=$PWD uv run python src/service/seat_management/driving_adapter/start_payment_result_consumer.py
"""

import signal

from anyio.from_thread import start_blocking_portal

from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.kafka_topic_initializer import KafkaTopicInitializer
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.seat_management.driving_adapter.mq_consumer.payment_result_mq_consumer import (
    PaymentResultConsumer,
)


def main() -> None:
    Logger.base.info('🚀 [Payment Result Consumer] Starting...')

    tracing = TracingConfig(service_name='seat-management-consumer')
    tracing.setup()
    tracing.instrument_redis()

    # Auto-create topics before consumer starts
    KafkaTopicInitializer().ensure_topics_exist()

    consumer = PaymentResultConsumer()

    def shutdown_handler(signum, frame) -> None:
        Logger.base.info(f'🛑 [Payment Result Consumer] Received signal {signum}')
        consumer.stop()

    signal.signal(signal.SIGINT, shutdown_handler)
    signal.signal(signal.SIGTERM, shutdown_handler)

    # Handlers are async; the portal's event loop owns the Kvrocks pool
    with start_blocking_portal() as portal:
        consumer.set_portal(portal)
        portal.call(kvrocks_client.initialize)  # type: ignore
        Logger.base.info('📡 [Payment Result Consumer] Kvrocks initialized')

        try:
            consumer.start()
        finally:
            portal.call(kvrocks_client.disconnect)
            Logger.base.info('📡 [Payment Result Consumer] Kvrocks disconnected')
            tracing.shutdown()


if __name__ == '__main__':
    main()
