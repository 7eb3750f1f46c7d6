"""
Transaction notification adapters.

Three host versions are in circulation:
- 0.0.1 ReplicaTransactionInfo: signature, is_vote, body, status meta
- 0.0.2 ReplicaTransactionInfoV2: adds the transaction index in the block
- 0.0.3 ReplicaTransactionInfoV3: adds the message hash

All three reduce to TransactionEvent(slot, signature, is_vote). The slot is
not part of any info object; the host passes it next to the notification.
"""

from typing import Any, Optional

from raywatch_relay.framework.base_adapter import AdapterRegistry, BaseAdapter
from raywatch_relay.framework.events import TransactionEvent
from raywatch_relay.framework.replica import (
    ReplicaTransactionInfo,
    ReplicaTransactionInfoV2,
    ReplicaTransactionInfoV3,
)


class _TransactionAdapter(BaseAdapter):
    """Shared mapping for shapes that carry signature and is_vote directly."""

    def normalize(self, info: Any, slot: Optional[int] = None) -> TransactionEvent:
        return TransactionEvent(
            slot=slot,
            signature=info.signature,
            is_vote=info.is_vote,
        )


class TransactionInfoV1Adapter(_TransactionAdapter):
    source_type = ReplicaTransactionInfo
    version = "0.0.1"


class TransactionInfoV2Adapter(_TransactionAdapter):
    source_type = ReplicaTransactionInfoV2
    version = "0.0.2"


class TransactionInfoV3Adapter(_TransactionAdapter):
    # message_hash and index are not part of the canonical event
    source_type = ReplicaTransactionInfoV3
    version = "0.0.3"


def build_transaction_registry() -> AdapterRegistry:
    """Registry with every known transaction notification version."""
    return AdapterRegistry(
        "transaction",
        [
            TransactionInfoV1Adapter(),
            TransactionInfoV2Adapter(),
            TransactionInfoV3Adapter(),
        ],
    )


TRANSACTION_ADAPTERS = build_transaction_registry()
