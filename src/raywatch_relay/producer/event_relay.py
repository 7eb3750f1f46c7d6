"""
EventRelay: adapt, filter, key and publish one host notification.

This is the core per-notification path, independent of the host ABI:
1. AdapterRegistry normalizes the versioned info object (unknown shapes → None)
2. should_publish() drops entries that executed no transactions
3. slot_key() derives the 8-byte big-endian partition key
4. KafkaWriter.publish() serializes and enqueues without blocking

Every recoverable failure ends here as a log line; nothing propagates to the
host callback.
"""

import logging
from typing import Any, Optional

from raywatch_relay.adapters import ENTRY_ADAPTERS, TRANSACTION_ADAPTERS
from raywatch_relay.framework.base_adapter import AdapterRegistry
from raywatch_relay.framework.errors import SerializationError
from raywatch_relay.framework.events import CanonicalEvent
from raywatch_relay.framework.filters import should_publish
from raywatch_relay.framework.keys import slot_key
from raywatch_relay.producer.kafka_writer import KafkaWriter

logger = logging.getLogger(__name__)


class EventRelay:
    """
    Routes host notifications through the normalization pipeline to a KafkaWriter.

    Holds no per-event state, so it can be called from any number of host threads.

    Usage (GeyserRelayPlugin):
        relay = EventRelay(writer, topic="raywatch.geyser.events")
        relay.on_transaction(info, slot)
        relay.on_entry(info)
    """

    def __init__(
        self,
        writer: KafkaWriter,
        topic: str,
        transaction_adapters: Optional[AdapterRegistry] = None,
        entry_adapters: Optional[AdapterRegistry] = None,
    ) -> None:
        self._writer = writer
        self._topic = topic
        self._transaction_adapters = transaction_adapters or TRANSACTION_ADAPTERS
        self._entry_adapters = entry_adapters or ENTRY_ADAPTERS

    @property
    def topic(self) -> str:
        return self._topic

    @property
    def supported_shapes(self) -> dict[str, list[str]]:
        """Notification type names accepted per kind, e.g. {"entry": ["ReplicaEntryInfo", ...]}."""
        return {
            registry.kind: [t.__name__ for t in registry.supported_types]
            for registry in (self._transaction_adapters, self._entry_adapters)
        }

    def on_transaction(self, info: Any, slot: int) -> bool:
        """
        Forward one transaction notification.

        Returns:
            True if the event was handed to the writer's queue.
        """
        return self._forward(self._transaction_adapters.adapt(info, slot))

    def on_entry(self, info: Any) -> bool:
        """
        Forward one entry notification. Entries with no executed transactions are dropped.

        Returns:
            True if the event was handed to the writer's queue.
        """
        return self._forward(self._entry_adapters.adapt(info))

    def _forward(self, event: Optional[CanonicalEvent]) -> bool:
        if event is None or not should_publish(event):
            return False
        try:
            key = slot_key(event.slot)
        except SerializationError as exc:
            logger.error("Cannot derive key for %s event — dropping | error=%s", event.kind, exc)
            return False
        return self._writer.publish(self._topic, key, event)
