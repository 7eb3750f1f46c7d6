"""
Error taxonomy for the relay.

Only BrokerConnectionError is fatal (raised out of plugin load). Every other
error is recovered where it is raised and turns into "this one event was not
forwarded".
"""


class RelayError(Exception):
    """Base class for all relay errors."""


class ConfigError(RelayError):
    """Config file missing, unreadable, unparseable, or missing kafka_brokers."""


class BrokerConnectionError(RelayError, ConnectionError):
    """The Kafka producer could not be created."""


class SerializationError(RelayError):
    """A canonical event (or its partition key) could not be encoded."""


class DeliveryError(RelayError):
    """The local enqueue was rejected, or the client reported a send failure."""


class UnsupportedVersionError(RelayError):
    """A notification arrived in a shape no adapter is registered for."""

    def __init__(self, info: object) -> None:
        self.info = info
        super().__init__(f"No adapter registered for {type(info).__name__}")
