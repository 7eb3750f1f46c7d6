"""
Framework for normalizing host replica notifications into canonical events.

The relay is a small pipeline:
- BaseAdapter / AdapterRegistry: Map each host notification version to the canonical model
- TransactionEvent / EntryEvent: The stable outbound schema, JSON-encoded by serialize_event()
- should_publish: Drops entries that executed no transactions
- slot_key: 8-byte big-endian partition key shared by both event kinds
- ConfigLoader: Reads relay settings from YAML/JSON with environment overrides

Nothing in this package performs I/O except ConfigLoader, so adapters, filter
and key derivation are testable without a host or a broker.
"""

from raywatch_relay.framework.base_adapter import AdapterRegistry, BaseAdapter
from raywatch_relay.framework.config_loader import ConfigLoader, RelayConfig
from raywatch_relay.framework.errors import (
    BrokerConnectionError,
    ConfigError,
    DeliveryError,
    RelayError,
    SerializationError,
    UnsupportedVersionError,
)
from raywatch_relay.framework.events import (
    CanonicalEvent,
    EntryEvent,
    TransactionEvent,
    serialize_event,
)
from raywatch_relay.framework.filters import should_publish
from raywatch_relay.framework.keys import slot_key

__all__ = [
    "AdapterRegistry",
    "BaseAdapter",
    "BrokerConnectionError",
    "CanonicalEvent",
    "ConfigError",
    "ConfigLoader",
    "DeliveryError",
    "EntryEvent",
    "RelayConfig",
    "RelayError",
    "SerializationError",
    "TransactionEvent",
    "UnsupportedVersionError",
    "serialize_event",
    "should_publish",
    "slot_key",
]
