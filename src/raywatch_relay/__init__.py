"""
Raywatch Geyser Relay.

Forwards host transaction and entry notifications to a Kafka topic as
canonical JSON events keyed by slot. Best-effort, fire-and-forget.
"""

from raywatch_relay.producer.plugin import GeyserRelayPlugin

__version__ = "0.1.0"

__all__ = ["GeyserRelayPlugin", "__version__"]
