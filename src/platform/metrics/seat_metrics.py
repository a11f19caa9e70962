from prometheus_client import Counter, Histogram


class SeatMetrics:
    """
    Seat Management Core Metrics Collector

    Tracks lock contention, reconciliation outcomes and Kafka consumer health.
    """

    def __init__(self) -> None:
        # ========== Kafka Consumer Metrics ==========
        self.kafka_messages_processed = Counter(
            'kafka_consumer_messages_processed_total',
            'Total processed messages',
            ['service', 'topic'],
        )

        self.kafka_processing_duration = Histogram(
            'kafka_consumer_processing_duration_seconds',
            'Message processing duration',
            ['service', 'topic'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0, 2.0, 5.0],
        )

        self.kafka_consumer_errors = Counter(
            'kafka_consumer_errors_total',
            'Consumer processing errors',
            ['service', 'topic', 'error_type'],
        )

        # ========== Seat Business Metrics ==========
        self.seat_lock_attempts = Counter(
            'seat_lock_attempts_total',
            'Seat lock attempts by outcome',
            ['result'],  # locked/already_locked/not_found/already_reserved/error
        )

        self.seat_lock_duration = Histogram(
            'seat_lock_duration_seconds',
            'Seat lock protocol duration',
            ['result'],
            buckets=[0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0],
        )

        self.seat_reconciliations = Counter(
            'seat_reconciliations_total',
            'Payment results applied to seats',
            ['outcome'],  # reserved/released/already_reserved/not_locked/seat_not_found
        )

    # ========== Helper Methods ==========

    def record_kafka_message_processed(
        self, *, service: str, topic: str, processing_time: float
    ) -> None:
        self.kafka_messages_processed.labels(service=service, topic=topic).inc()
        self.kafka_processing_duration.labels(service=service, topic=topic).observe(
            processing_time
        )

    def record_kafka_error(self, *, service: str, topic: str, error_type: str) -> None:
        self.kafka_consumer_errors.labels(
            service=service, topic=topic, error_type=error_type
        ).inc()

    def record_seat_lock(self, *, result: str, duration: float) -> None:
        self.seat_lock_attempts.labels(result=result).inc()
        self.seat_lock_duration.labels(result=result).observe(duration)

    def record_reconciliation(self, *, outcome: str) -> None:
        self.seat_reconciliations.labels(outcome=outcome).inc()


# Global metrics instance
metrics = SeatMetrics()
