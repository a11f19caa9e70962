"""
Production FastAPI Application

HTTP API plus the payment result consumer, sharing one Kvrocks pool.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
import anyio.to_thread
from anyio.from_thread import BlockingPortal
from fastapi import FastAPI
from fastapi.responses import RedirectResponse

from src.platform.app_factory import create_app
from src.platform.config.core_setting import settings
from src.platform.config.di import cleanup, container
from src.platform.config.wire_modules import WIRE_MODULES
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.kafka_topic_initializer import KafkaTopicInitializer
from src.platform.observability.tracing import TracingConfig
from src.platform.state.kvrocks_client import kvrocks_client
from src.service.seat_management.driving_adapter.mq_consumer.payment_result_mq_consumer import (
    PaymentResultConsumer,
)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    Logger.base.info('🚀 [Seat Service] Starting up...')

    tracing = TracingConfig(service_name='seat-management-service')
    tracing.setup()
    tracing.instrument_redis()
    Logger.base.info('📊 [Seat Service] OpenTelemetry tracing configured')

    container.wire(modules=WIRE_MODULES)
    Logger.base.info('🔌 [Seat Service] Dependency injection wired')

    # Fail fast when Kvrocks is unreachable
    await kvrocks_client.initialize()
    Logger.base.info('📡 [Seat Service] Kvrocks initialized')

    # The consumer polls on a worker thread and runs its async handlers on
    # this event loop through the portal, so both sides share the Kvrocks pool
    async with BlockingPortal() as portal, anyio.create_task_group() as tg:
        consumer = None
        if settings.KAFKA_CONSUMER_ENABLED:
            await anyio.to_thread.run_sync(KafkaTopicInitializer().ensure_topics_exist)
            consumer = PaymentResultConsumer()
            consumer.set_portal(portal)
            tg.start_soon(anyio.to_thread.run_sync, consumer.start)
            Logger.base.info('📥 [Seat Service] Payment result consumer started')

        Logger.base.info('✅ [Seat Service] Ready to serve requests')
        yield

        Logger.base.info('🛑 [Seat Service] Shutting down...')
        if consumer:
            consumer.stop()

    await kvrocks_client.disconnect()
    Logger.base.info('📡 [Seat Service] Kvrocks disconnected')

    tracing.shutdown()
    container.unwire()
    cleanup()

    Logger.base.info('👋 [Seat Service] Shutdown complete')


app = create_app(lifespan=lifespan)


@app.get('/')
async def root() -> RedirectResponse:
    """Root endpoint - redirect to docs."""
    return RedirectResponse(url='/docs')
