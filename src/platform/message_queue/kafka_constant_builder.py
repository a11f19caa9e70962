from src.platform.config.core_setting import settings


class ServiceNames:
    """Service name constants"""

    PAYMENT_SERVICE = 'payment-service'  # Publishes payment outcomes
    SEAT_MANAGEMENT_SERVICE = 'seat-management-service'  # Locks and reconciles seats


class KafkaTopicBuilder:
    """
    Kafka Topic Naming Unified Builder

    The payment result topic name is shared with the payment service, so it
    comes from settings rather than being derived here.
    """

    @staticmethod
    def payment_result() -> str:
        """Payment outcomes, published by the payment service."""
        return settings.KAFKA_PAYMENT_RESULT_TOPIC

    @staticmethod
    def payment_result_dlq() -> str:
        """Dead Letter Queue for payment results the seat service could not apply"""
        return f'{settings.KAFKA_PAYMENT_RESULT_TOPIC}-dlq'

    @staticmethod
    def get_all_topics() -> list[str]:
        return [
            KafkaTopicBuilder.payment_result(),
            KafkaTopicBuilder.payment_result_dlq(),
        ]


class KafkaConsumerGroupBuilder:
    @staticmethod
    def seat_management_service() -> str:
        return settings.KAFKA_CONSUMER_GROUP_ID
