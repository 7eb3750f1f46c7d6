"""Kafka publishing and host-facing glue for the relay."""

from raywatch_relay.producer.event_relay import EventRelay
from raywatch_relay.producer.kafka_writer import KafkaWriter, WriterState, WriterStats
from raywatch_relay.producer.plugin import GeyserRelayPlugin

__all__ = [
    "EventRelay",
    "GeyserRelayPlugin",
    "KafkaWriter",
    "WriterState",
    "WriterStats",
]
