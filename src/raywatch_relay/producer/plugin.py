"""
GeyserRelayPlugin: the object the host loads and calls back into.

Lifecycle (driven by the host):
    plugin = GeyserRelayPlugin()
    plugin.on_load("/etc/raywatch/relay.json")   # BrokerConnectionError → load fails
    plugin.notify_transaction(info, slot)          # any host thread
    plugin.notify_entry(info)                      # any host thread
    plugin.on_unload()

Only glue lives here; the notification path itself is EventRelay.
"""

import logging
from typing import Any, Optional

from raywatch_relay.framework.config_loader import ConfigLoader, RelayConfig
from raywatch_relay.producer.event_relay import EventRelay
from raywatch_relay.producer.kafka_writer import KafkaWriter

logger = logging.getLogger(__name__)


class GeyserRelayPlugin:
    """Host-facing plugin that forwards transaction and entry notifications to Kafka."""

    PLUGIN_NAME = "RaywatchGeyserRelay"

    def __init__(self) -> None:
        self._config: Optional[RelayConfig] = None
        self._writer: Optional[KafkaWriter] = None
        self._relay: Optional[EventRelay] = None

    def name(self) -> str:
        return self.PLUGIN_NAME

    @property
    def config(self) -> Optional[RelayConfig]:
        return self._config

    @property
    def writer(self) -> Optional[KafkaWriter]:
        return self._writer

    @property
    def is_loaded(self) -> bool:
        return self._relay is not None

    def on_load(self, config_file: Optional[str], is_reload: bool = False) -> None:
        """
        Resolve config and open the Kafka producer.

        Config problems fall back to defaults. A producer that cannot be created
        is fatal: the BrokerConnectionError propagates and the plugin stays
        unloaded, so later notifications are ignored.

        Args:
            config_file: Path the host passes to the plugin.
            is_reload: True when the host reloads an already-loaded plugin.

        Raises:
            BrokerConnectionError: If the Kafka producer cannot be created.
        """
        if self.is_loaded:
            self.on_unload()

        config = ConfigLoader(config_file).load()
        writer = KafkaWriter(
            brokers=config.kafka_brokers,
            message_timeout_ms=config.message_timeout_ms,
            poll_every=config.poll_every,
            poll_interval_seconds=config.poll_interval_seconds,
            shutdown_timeout_seconds=config.shutdown_timeout_seconds,
        )
        writer.initialize()

        relay = EventRelay(writer, topic=config.topic)
        self._config = config
        self._writer = writer
        self._relay = relay
        logger.info(
            "%s loaded | reload=%s | brokers=%s | topic=%s | shapes=%s",
            self.PLUGIN_NAME,
            is_reload,
            config.kafka_brokers,
            relay.topic,
            relay.supported_shapes,
        )

    def on_unload(self) -> None:
        """Release the producer; messages still in flight are lost."""
        writer = self._writer
        self._relay = None
        self._writer = None
        if writer is not None:
            writer.shutdown()
        logger.info("%s unloaded", self.PLUGIN_NAME)

    def notify_transaction(self, info: Any, slot: int) -> None:
        relay = self._relay
        if relay is None:
            return
        relay.on_transaction(info, slot)

    def notify_entry(self, info: Any) -> None:
        relay = self._relay
        if relay is None:
            return
        relay.on_entry(info)

    def transaction_notifications_enabled(self) -> bool:
        return True

    def entry_notifications_enabled(self) -> bool:
        return True

    def account_data_notifications_enabled(self) -> bool:
        return False
