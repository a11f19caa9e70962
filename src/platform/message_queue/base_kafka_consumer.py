from abc import ABC, abstractmethod
from concurrent.futures import Future, ThreadPoolExecutor
from threading import Event, Lock
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional, Set, Tuple

from confluent_kafka import Consumer, KafkaError, KafkaException, Message, Producer, TopicPartition
from opentelemetry import trace
import orjson


if TYPE_CHECKING:
    from anyio.from_thread import BlockingPortal

from src.platform.config.core_setting import settings
from src.platform.logging.loguru_io import Logger
from src.platform.metrics.seat_metrics import metrics
from src.platform.observability.tracing import extract_trace_context


AsyncHandler = Callable[[Dict], Awaitable[Any]]


class BaseKafkaConsumer(ABC):
    # === Tuning Parameters (subclasses can override) ===
    #
    # POLL_TIMEOUT_SECONDS: Max time poll() waits for messages
    # COMMIT_INTERVAL_SECONDS: How often to batch commit offsets
    # MAX_WORKERS: ThreadPool concurrent worker count
    # MAX_PENDING_COMMITS: Force commit after this many messages
    # MAX_RETRIES / RETRY_BACKOFF_SECONDS: redelivery of retryable failures
    #   (errors carrying `retryable = True`) before the message goes to the DLQ
    #
    POLL_TIMEOUT_SECONDS: float = 0.05
    COMMIT_INTERVAL_SECONDS: float = 0.1
    MAX_WORKERS: int = 4
    MAX_PENDING_COMMITS: int = 100
    MAX_RETRIES: int = 3
    RETRY_BACKOFF_SECONDS: float = 0.5

    def __init__(
        self,
        *,
        service_name: str,
        consumer_group_id: str,
        dlq_topic: str,
    ) -> None:
        self.service_name = service_name
        self.consumer_group_id = consumer_group_id
        self.dlq_topic = dlq_topic
        self.instance_id = settings.KAFKA_CONSUMER_INSTANCE_ID

        # Kafka clients
        self.consumer: Optional[Consumer] = None
        self.producer: Optional[Producer] = None  # For sending to DLQ
        self.executor: Optional[ThreadPoolExecutor] = None
        self.portal: Optional['BlockingPortal'] = None  # anyio cross-thread bridge
        self.tracer = trace.get_tracer(__name__)

        # Running state control
        self.running = False
        self.stop_event = Event()
        # Offset bookkeeping is shared by the poll thread and the workers
        self._offset_lock = Lock()
        # { topic_name: { partition_id: next_offset_after_highest_finished } }
        self._pending_offsets: Dict[str, Dict[int, int]] = {}
        # { (topic_name, partition_id): offsets submitted but not finished }
        self._in_flight_offsets: Dict[Tuple[str, int], Set[int]] = {}
        self._committed_offsets: Dict[Tuple[str, int], int] = {}
        self._pending_count = 0
        self._last_commit_time = time.monotonic()
        self._in_flight_futures: List[Future] = []

    def set_portal(self, portal: 'BlockingPortal') -> None:
        self.portal = portal

    @abstractmethod
    def _get_topic_handlers(self) -> Dict[str, AsyncHandler]:
        """
        Return topic name to async handler mapping.

        Example:
            return {'payment-completed': self._handle_payment_result}
        """

    @abstractmethod
    def _initialize_dependencies(self) -> None:
        """Initialize use cases and dependencies before consumer starts."""

    def _create_consumer(self) -> Consumer:
        return Consumer(
            {
                'bootstrap.servers': settings.KAFKA_BOOTSTRAP_SERVERS,
                'group.id': self.consumer_group_id,
                'auto.offset.reset': settings.KAFKA_CONSUMER_AUTO_OFFSET_RESET,
                'enable.auto.commit': False,  # Manual commit for at-least-once processing
                'fetch.wait.max.ms': 50,
                'fetch.min.bytes': 1,
                'session.timeout.ms': 45000,
                'heartbeat.interval.ms': 15000,
                'reconnect.backoff.ms': 1000,
                'reconnect.backoff.max.ms': 30000,
            }
        )

    def _create_producer(self) -> Producer:
        return Producer(
            {
                'bootstrap.servers': settings.KAFKA_BOOTSTRAP_SERVERS,
                'acks': 'all',
                'retries': 3,
            }
        )

    @staticmethod
    def _deserialize_json(msg: Message) -> Dict:
        raw = msg.value()
        if not raw:
            raise ValueError('Empty message payload')
        data = orjson.loads(raw)
        if not isinstance(data, dict):
            raise ValueError(f'Expected JSON object, got {type(data).__name__}')
        return data

    def _send_to_dlq(
        self,
        *,
        message: Dict,
        original_topic: str,
        error: str,
        retry_count: int = 0,
    ) -> None:
        if not self.producer:
            Logger.base.error('DLQ producer not initialized')
            return

        try:
            dlq_message = {
                'original_message': message,
                'original_topic': original_topic,
                'error': error,
                'retry_count': retry_count,
                'timestamp': time.time(),
                'instance_id': self.instance_id,
            }
            self.producer.produce(
                topic=self.dlq_topic,
                value=orjson.dumps(dlq_message, default=str),
            )
            self.producer.poll(0)
            Logger.base.warning(f'[DLQ] Sent message from {original_topic}: {error}')

        except Exception as e:
            Logger.base.error(f'[DLQ] Failed to send: {e}')

    def _mark_in_flight(self, msg: Message) -> None:
        """Called on the poll thread before the message is handed to a worker."""
        with self._offset_lock:
            self._in_flight_offsets.setdefault((msg.topic(), msg.partition()), set()).add(
                msg.offset()
            )

    def _track_offset(self, msg: Message) -> None:
        """Kafka commits the NEXT offset to read: processed offset=5 -> commit 6."""
        topic, partition = msg.topic(), msg.partition()
        offset = msg.offset() + 1

        with self._offset_lock:
            self._in_flight_offsets.get((topic, partition), set()).discard(msg.offset())
            partitions = self._pending_offsets.setdefault(topic, {})
            if offset > partitions.get(partition, -1):
                partitions[partition] = offset
                self._pending_count += 1

    def _committable_offsets(self) -> List[TopicPartition]:
        """
        Per partition, commit up to the lowest offset still being processed.

        Workers finish out of order; committing past a message that is still
        retrying would drop it if the process dies before it completes.
        Caller holds `_offset_lock`.
        """
        offsets: List[TopicPartition] = []
        for topic, partitions in self._pending_offsets.items():
            for partition, next_offset in partitions.items():
                in_flight = self._in_flight_offsets.get((topic, partition))
                if in_flight:
                    next_offset = min(next_offset, min(in_flight))
                if next_offset > self._committed_offsets.get((topic, partition), -1):
                    offsets.append(TopicPartition(topic, partition, next_offset))
        return offsets

    def _maybe_commit_offsets(self, *, force: bool = False) -> None:
        now = time.monotonic()
        with self._offset_lock:
            should_commit = (
                force
                or self._pending_count >= self.MAX_PENDING_COMMITS
                or now - self._last_commit_time >= self.COMMIT_INTERVAL_SECONDS
            )
            if not should_commit or not self._pending_offsets:
                return
            offsets_to_commit = self._committable_offsets()
            pending_count = self._pending_count

        if not offsets_to_commit or not self.consumer:
            return

        try:
            self.consumer.commit(offsets=offsets_to_commit, asynchronous=False)
            Logger.base.debug(f'[{self.service_name}] Committed {pending_count} offsets')
        except Exception as e:
            Logger.base.error(f'[{self.service_name}] Commit failed: {e}')
            return

        with self._offset_lock:
            for tp in offsets_to_commit:
                self._committed_offsets[(tp.topic, tp.partition)] = tp.offset
                partitions = self._pending_offsets.get(tp.topic, {})
                # Drop partitions whose highest finished offset is now committed
                if partitions.get(tp.partition) == tp.offset:
                    del partitions[tp.partition]
                if not partitions:
                    self._pending_offsets.pop(tp.topic, None)
            self._pending_count = 0
            self._last_commit_time = now

    def _call_handler(self, handler: AsyncHandler, data: Dict) -> Any:
        if self.portal is None:
            raise RuntimeError('Blocking portal not set. Call set_portal() before start().')
        return self.portal.call(handler, data)

    def _process_message(self, msg: Message, handler: AsyncHandler, topic: str) -> None:
        """
        Process one message in the ThreadPool.

        Flow: deserialize -> extract trace -> call handler -> track offset.
        Retryable failures are redelivered up to MAX_RETRIES; everything else,
        and retries that run out, go to the DLQ. The offset is tracked in all
        cases so one poisoned message cannot stall the partition.
        """
        start = time.perf_counter()
        data: Dict = {}
        attempt = 0
        try:
            data = self._deserialize_json(msg)
            extract_trace_context(
                headers={
                    'traceparent': str(data.get('traceparent', '')),
                    'tracestate': str(data.get('tracestate', '')),
                }
            )

            while True:
                try:
                    with self.tracer.start_as_current_span(
                        f'consumer.{topic}',
                        attributes={
                            'messaging.system': 'kafka',
                            'messaging.destination': topic,
                            'messaging.retry': attempt,
                        },
                    ):
                        self._call_handler(handler, data)
                    break
                except Exception as e:
                    if not getattr(e, 'retryable', False) or attempt >= self.MAX_RETRIES:
                        raise
                    attempt += 1
                    Logger.base.warning(
                        f'[{self.service_name}] Retryable failure, redelivering '
                        f'({attempt}/{self.MAX_RETRIES}): {e}'
                    )
                    time.sleep(self.RETRY_BACKOFF_SECONDS * attempt)

            metrics.record_kafka_message_processed(
                service=self.service_name,
                topic=topic,
                processing_time=time.perf_counter() - start,
            )

        except Exception as e:
            Logger.base.error(f'[{self.service_name}] Error: {e}')
            metrics.record_kafka_error(
                service=self.service_name, topic=topic, error_type=type(e).__name__
            )
            if not data:
                raw = msg.value()
                data = {'raw': raw.hex() if isinstance(raw, bytes) else str(raw)}
            self._send_to_dlq(
                message=data, original_topic=topic, error=str(e), retry_count=attempt
            )

        finally:
            self._track_offset(msg)

    def start(self) -> None:
        """Start consumer with retry for topic creation."""
        max_retries, delay = 5, 2

        for attempt in range(1, max_retries + 1):
            try:
                self._initialize_dependencies()
                self.consumer = self._create_consumer()
                self.producer = self._create_producer()

                handlers = self._get_topic_handlers()
                self.consumer.subscribe(list(handlers.keys()))

                Logger.base.info(
                    f'[{self.service_name}-{self.instance_id}] Started | '
                    f'group={self.consumer_group_id} '
                    f'topics={list(handlers.keys())} workers={self.MAX_WORKERS}'
                )

                self.executor = ThreadPoolExecutor(
                    max_workers=self.MAX_WORKERS,
                    thread_name_prefix=f'{self.service_name}-worker',
                )

                self.running = True
                self._run_loop(handlers)
                break

            except KafkaException as e:
                if 'UNKNOWN_TOPIC_OR_PART' in str(e) and attempt < max_retries:
                    Logger.base.warning(
                        f'[{self.service_name}] {attempt}/{max_retries}: Topic not ready, retry in {delay}s'
                    )
                    time.sleep(delay)
                    delay *= 2
                else:
                    Logger.base.error(f'[{self.service_name}] Start failed: {e}')
                    raise

    def _run_loop(self, handlers: Dict[str, AsyncHandler]) -> None:
        assert self.consumer is not None and self.executor is not None

        while self.running and not self.stop_event.is_set():
            try:
                msg = self.consumer.poll(timeout=self.POLL_TIMEOUT_SECONDS)

                if msg is None:
                    self._maybe_commit_offsets()
                    self._in_flight_futures = [f for f in self._in_flight_futures if not f.done()]
                    continue

                if msg.error():
                    if msg.error().code() != KafkaError._PARTITION_EOF:
                        Logger.base.error(f'[{self.service_name}] Kafka error: {msg.error()}')
                    continue

                topic = msg.topic()
                if topic not in handlers:
                    continue

                self._mark_in_flight(msg)
                future = self.executor.submit(self._process_message, msg, handlers[topic], topic)
                self._in_flight_futures.append(future)

                self._maybe_commit_offsets()

            except Exception as e:
                Logger.base.error(f'[{self.service_name}] Loop error: {e}')
                time.sleep(0.1)

        self._shutdown()

    def stop(self) -> None:
        """Ask the poll loop to exit; cleanup runs on the consumer thread."""
        self.running = False
        self.stop_event.set()

    def _shutdown(self) -> None:
        Logger.base.info(f'[{self.service_name}] Stopping...')

        for future in self._in_flight_futures:
            try:
                future.result(timeout=5.0)
            except Exception as e:
                Logger.base.warning(f'[{self.service_name}] Future error: {e}')

        self._maybe_commit_offsets(force=True)

        if self.executor:
            self.executor.shutdown(wait=True, cancel_futures=False)

        if self.consumer:
            try:
                self.consumer.close()
            except Exception as e:
                Logger.base.warning(f'[{self.service_name}] Close error: {e}')

        if self.producer:
            self.producer.flush(timeout=5.0)

        Logger.base.info(f'[{self.service_name}] Stopped')
