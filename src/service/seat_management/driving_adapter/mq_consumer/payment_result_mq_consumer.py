"""
Payment Result Consumer

Consumes payment outcomes published by the payment service and reconciles
the seat each one refers to:
- success -> LOCKED seat becomes RESERVED
- failure -> LOCKED seat becomes AVAILABLE
In both cases the seat's lock marker is removed.
"""

from typing import Dict, Optional

from src.platform.config.di import container
from src.platform.logging.loguru_io import Logger
from src.platform.message_queue.base_kafka_consumer import AsyncHandler, BaseKafkaConsumer
from src.platform.message_queue.kafka_constant_builder import (
    KafkaConsumerGroupBuilder,
    KafkaTopicBuilder,
    ServiceNames,
)
from src.service.seat_management.app.command.handle_payment_result_use_case import (
    HandlePaymentResultUseCase,
)
from src.service.seat_management.app.dto.seat_dto import PaymentResultMessage


class PaymentResultConsumer(BaseKafkaConsumer):
    def __init__(self) -> None:
        super().__init__(
            service_name=ServiceNames.SEAT_MANAGEMENT_SERVICE,
            consumer_group_id=KafkaConsumerGroupBuilder.seat_management_service(),
            dlq_topic=KafkaTopicBuilder.payment_result_dlq(),
        )
        self.payment_result_topic = KafkaTopicBuilder.payment_result()

        # Use case (lazy initialization)
        self.handle_payment_result_use_case: Optional[HandlePaymentResultUseCase] = None

    def _initialize_dependencies(self) -> None:
        self.handle_payment_result_use_case = container.handle_payment_result_use_case()

    def _get_topic_handlers(self) -> Dict[str, AsyncHandler]:
        return {self.payment_result_topic: self._handle_payment_result}

    async def _handle_payment_result(self, data: Dict) -> str:
        if self.handle_payment_result_use_case is None:
            raise RuntimeError('Consumer dependencies not initialized')

        message = PaymentResultMessage.from_payload(data)
        Logger.base.info(
            f'\033[94m[PAYMENT-RESULT-{self.instance_id}] order={message.order_id} '
            f'product={message.product_id} seat={message.seat_id} success={message.success}\033[0m'
        )
        outcome = await self.handle_payment_result_use_case.execute(message=message)
        return outcome.value
