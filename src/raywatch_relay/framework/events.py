"""
Canonical event model for the Raywatch relay.

Every host notification shape converges to one of two records:
- TransactionEvent: one per accepted transaction notification
- EntryEvent: one per accepted entry notification

Downstream consumers only ever see these fields, whatever notification
version produced them. Events are immutable and live only long enough to be
serialized and handed to the KafkaWriter.
"""

import json
from dataclasses import dataclass
from typing import Any, ClassVar, Union

from raywatch_relay.framework.errors import SerializationError

U64_MAX = 2**64 - 1


@dataclass(frozen=True)
class TransactionEvent:
    """Wire shape: {"slot": u64, "signature": str, "is_vote": bool}."""

    kind: ClassVar[str] = "transaction"

    slot: int
    signature: str
    is_vote: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to the outbound JSON field layout."""
        return {
            "slot": self.slot,
            "signature": self.signature,
            "is_vote": self.is_vote,
        }


@dataclass(frozen=True)
class EntryEvent:
    """
    Wire shape: {"slot": u64, "idx": u64, "num_hashes": u64, "executed_tx_count": u64}.

    The entry index is emitted as "idx" on the wire.
    """

    kind: ClassVar[str] = "entry"

    slot: int
    index: int
    num_hashes: int
    executed_tx_count: int

    def to_dict(self) -> dict[str, Any]:
        """Convert to the outbound JSON field layout."""
        return {
            "slot": self.slot,
            "idx": self.index,
            "num_hashes": self.num_hashes,
            "executed_tx_count": self.executed_tx_count,
        }


CanonicalEvent = Union[TransactionEvent, EntryEvent]

# every other wire field is a u64
_NON_U64_FIELDS = {"transaction": ("signature", "is_vote")}


def serialize_event(event: CanonicalEvent) -> bytes:
    """
    Encode a canonical event as compact UTF-8 JSON.

    Numeric fields must be ints that fit in an unsigned 64-bit value, the
    signature must be a string and is_vote a bool; anything else is rejected
    rather than written to the topic.

    Args:
        event: TransactionEvent or EntryEvent

    Returns:
        Payload bytes, e.g. b'{"slot":100,"idx":3,"num_hashes":50,"executed_tx_count":7}'

    Raises:
        SerializationError: If a field is out of range or cannot be encoded.
    """
    fields = event.to_dict()
    for name, value in fields.items():
        if name in _NON_U64_FIELDS.get(event.kind, ()):
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise SerializationError(
                f"{event.kind} field {name} must be an integer, got {type(value).__name__}"
            )
        if not 0 <= value <= U64_MAX:
            raise SerializationError(f"{event.kind} field {name}={value} is not a u64")
    if isinstance(event, TransactionEvent):
        if not isinstance(event.signature, str):
            raise SerializationError(
                f"transaction signature must be str, got {type(event.signature).__name__}"
            )
        if not isinstance(event.is_vote, bool):
            raise SerializationError(
                f"transaction is_vote must be bool, got {type(event.is_vote).__name__}"
            )

    try:
        return json.dumps(fields, separators=(",", ":"), allow_nan=False).encode("utf-8")
    except (TypeError, ValueError) as exc:
        raise SerializationError(f"failed to encode {event.kind} event: {exc}") from exc
