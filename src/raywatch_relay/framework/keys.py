"""Partition key derivation shared by transaction and entry events."""

import struct

from raywatch_relay.framework.errors import SerializationError

_SLOT_KEY = struct.Struct(">Q")


def slot_key(slot: int) -> bytes:
    """
    Encode a slot as the 8-byte big-endian Kafka message key.

    Transaction and entry events for the same slot get the same key, so they
    land on the same partition in the order they were enqueued.

        slot_key(100) == b"\\x00\\x00\\x00\\x00\\x00\\x00\\x00\\x64"

    Raises:
        SerializationError: If slot is not an integer in 0..2**64-1.
    """
    if isinstance(slot, bool) or not isinstance(slot, int):
        raise SerializationError(f"slot must be an int, got {type(slot).__name__}")
    try:
        return _SLOT_KEY.pack(slot)
    except struct.error as exc:
        raise SerializationError(f"slot {slot} is not a u64") from exc
