"""
Kafka writer: serializes canonical events and enqueues them to a topic.

Uses confluent_kafka.Producer.produce(), which only appends to librdkafka's
local queue; network I/O happens on librdkafka's own threads. After enqueue
the writer calls poll(0) (per the poll policy) to service delivery callbacks
that have already completed. Nothing here ever waits for a broker ack.

Delivery is best-effort and at-most-once:
- Serialization failures, a full local queue, and client-reported delivery
  failures are logged, counted and dropped. Nothing is retried here.
- Messages still queued at shutdown() are lost unless shutdown_timeout_seconds
  allows them to drain.

State machine: UNINITIALIZED -> CONNECTED -> SHUT_DOWN. publish() only has an
effect while CONNECTED.
"""

import enum
import logging
import threading
import time
from typing import Any, Optional, TypedDict

from confluent_kafka import KafkaException, Producer

from raywatch_relay.framework.errors import (
    BrokerConnectionError,
    DeliveryError,
    SerializationError,
)
from raywatch_relay.framework.events import CanonicalEvent, serialize_event

logger = logging.getLogger(__name__)


class WriterState(enum.Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTED = "connected"
    SHUT_DOWN = "shut_down"


class WriterStats(TypedDict):
    """Counters tracked by KafkaWriter during its lifetime."""

    enqueued: int
    delivered: int
    delivery_failed: int
    enqueue_failed: int
    serialization_failed: int
    dropped_not_connected: int


def parse_brokers(brokers: str) -> list[str]:
    """
    Split and validate a comma-separated host:port broker list.

    Raises:
        BrokerConnectionError: If the list is empty or an entry is not host:port.
    """
    entries = [b.strip() for b in brokers.split(",") if b.strip()]
    if not entries:
        raise BrokerConnectionError(f"empty broker list: {brokers!r}")
    for entry in entries:
        host, sep, port = entry.rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise BrokerConnectionError(f"invalid broker address: {entry!r}")
    return entries


class KafkaWriter:
    """
    Thread-safe, non-blocking Kafka publisher owning a single producer handle.

    The host may call publish() concurrently from several threads. A single
    reentrant lock serializes produce() + poll(0) and state transitions; both
    calls return without waiting on the network. The bounded shutdown flush
    runs outside the lock.

    Usage (GeyserRelayPlugin):
        writer = KafkaWriter(brokers="localhost:9092")
        writer.initialize()                       # BrokerConnectionError is fatal
        writer.publish("raywatch.geyser.events", slot_key(event.slot), event)
        writer.shutdown()
    """

    DEFAULT_MESSAGE_TIMEOUT_MS = 5000

    def __init__(
        self,
        brokers: str,
        message_timeout_ms: int = DEFAULT_MESSAGE_TIMEOUT_MS,
        poll_every: int = 1,
        poll_interval_seconds: float = 0.0,
        shutdown_timeout_seconds: float = 0.0,
    ) -> None:
        """
        Args:
            brokers: Comma-separated host:port list, used verbatim as bootstrap.servers.
            message_timeout_ms: librdkafka per-message delivery timeout.
            poll_every: poll(0) after every Nth enqueue; 0 disables the count trigger.
            poll_interval_seconds: poll(0) once this long has passed since the last
                                   poll; 0 disables the time trigger.
            shutdown_timeout_seconds: Upper bound on the flush in shutdown(); 0 never waits.
        """
        self._brokers = brokers
        self._message_timeout_ms = message_timeout_ms
        self._poll_every = poll_every
        self._poll_interval_seconds = poll_interval_seconds
        self._shutdown_timeout_seconds = shutdown_timeout_seconds

        self._producer: Optional[Producer] = None
        self._state = WriterState.UNINITIALIZED
        self._lock = threading.RLock()
        self._since_poll = 0
        self._last_poll_at = time.monotonic()
        self._stats: WriterStats = {
            "enqueued": 0,
            "delivered": 0,
            "delivery_failed": 0,
            "enqueue_failed": 0,
            "serialization_failed": 0,
            "dropped_not_connected": 0,
        }

    @property
    def brokers(self) -> str:
        return self._brokers

    @property
    def state(self) -> WriterState:
        return self._state

    def initialize(self) -> None:
        """
        Create the Kafka producer.

        Raises:
            BrokerConnectionError: If the broker list is invalid or the client
                                   rejects the configuration. Fatal to plugin load.
        """
        with self._lock:
            if self._state is not WriterState.UNINITIALIZED:
                raise BrokerConnectionError(
                    f"KafkaWriter cannot initialize from state {self._state.value}"
                )
            parse_brokers(self._brokers)
            producer_config = {
                "bootstrap.servers": self._brokers,
                "message.timeout.ms": self._message_timeout_ms,
            }
            try:
                self._producer = Producer(producer_config)
            except (KafkaException, ValueError, TypeError) as exc:
                raise BrokerConnectionError(
                    f"Kafka producer creation failed for {self._brokers}: {exc}"
                ) from exc
            self._state = WriterState.CONNECTED
            self._last_poll_at = time.monotonic()

        logger.info(
            "KafkaWriter connected | brokers=%s | message_timeout_ms=%d",
            self._brokers,
            self._message_timeout_ms,
        )

    def publish(self, topic: str, key: bytes, event: CanonicalEvent) -> bool:
        """
        Serialize event and enqueue it to topic with the given key.

        Never raises for serialization or enqueue failures; those are logged
        and the event is dropped.

        Returns:
            True if the record was handed to the producer's local queue.
        """
        try:
            payload = serialize_event(event)
        except SerializationError as exc:
            logger.error("Failed to serialize %s event — dropping | error=%s", event.kind, exc)
            with self._lock:
                self._stats["serialization_failed"] += 1
            return False

        with self._lock:
            producer = self._producer
            if self._state is not WriterState.CONNECTED or producer is None:
                self._stats["dropped_not_connected"] += 1
                logger.debug(
                    "KafkaWriter not connected — dropping %s event | state=%s",
                    event.kind,
                    self._state.value,
                )
                return False
            try:
                self._enqueue(producer, topic, key, payload)
            except DeliveryError as exc:
                self._stats["enqueue_failed"] += 1
                logger.error("Failed to enqueue %s event — dropping | error=%s", event.kind, exc)
                return False
            self._stats["enqueued"] += 1
            self._since_poll += 1
            self._maybe_poll(producer)
        return True

    def shutdown(self) -> None:
        """
        Release the producer. Safe to call in any state, more than once.

        Waits at most shutdown_timeout_seconds for queued messages; whatever is
        still queued afterwards is lost.
        """
        with self._lock:
            producer = self._producer
            self._producer = None
            self._state = WriterState.SHUT_DOWN
        if producer is None:
            return

        # publish() sees SHUT_DOWN from here on and never waits on this flush
        try:
            remaining = producer.flush(self._shutdown_timeout_seconds)
        except KafkaException as exc:
            logger.warning("KafkaWriter flush on shutdown failed (non-fatal): %s", exc)
            remaining = None

        if remaining:
            logger.warning("KafkaWriter shut down with %d message(s) undelivered", remaining)
        logger.info("KafkaWriter shut down | stats=%s", self.stats())

    def stats(self) -> WriterStats:
        """Snapshot of the writer's counters."""
        with self._lock:
            return WriterStats(**self._stats)

    # ------------------------------------------------------------------
    # Private helpers, called with self._lock held
    # ------------------------------------------------------------------

    def _enqueue(self, producer: Producer, topic: str, key: bytes, payload: bytes) -> None:
        """
        Append one record to the producer's local queue.

        Raises:
            DeliveryError: If the local queue is full or the client rejects the record.
        """
        try:
            producer.produce(
                topic,
                value=payload,
                key=key,
                on_delivery=self._on_delivery,
            )
        except BufferError as exc:
            raise DeliveryError(f"local producer queue full: {exc}") from exc
        except KafkaException as exc:
            raise DeliveryError(str(exc)) from exc

    def _maybe_poll(self, producer: Producer) -> None:
        """Service completed delivery callbacks with a zero-timeout poll, per the poll policy."""
        now = time.monotonic()
        due_by_count = self._poll_every > 0 and self._since_poll >= self._poll_every
        due_by_time = (
            self._poll_interval_seconds > 0
            and now - self._last_poll_at >= self._poll_interval_seconds
        )
        if not (due_by_count or due_by_time):
            return
        producer.poll(0)
        self._since_poll = 0
        self._last_poll_at = now

    def _on_delivery(self, err: Any, msg: Any) -> None:
        """
        Delivery report callback.

        librdkafka invokes it from inside poll() or flush(). poll() runs with
        the lock already held and the shutdown flush runs without it, so the
        counters are updated under the (reentrant) lock either way.
        """
        if err is not None:
            with self._lock:
                self._stats["delivery_failed"] += 1
            logger.warning(
                "Kafka delivery failed — message lost | topic=%s | error=%s",
                msg.topic() if msg is not None else "?",
                err,
            )
            return
        with self._lock:
            self._stats["delivered"] += 1
