"""Version adapters for host transaction and entry notifications."""

from raywatch_relay.adapters.entry_adapter import (
    ENTRY_ADAPTERS,
    EntryInfoV1Adapter,
    EntryInfoV2Adapter,
    build_entry_registry,
)
from raywatch_relay.adapters.transaction_adapter import (
    TRANSACTION_ADAPTERS,
    TransactionInfoV1Adapter,
    TransactionInfoV2Adapter,
    TransactionInfoV3Adapter,
    build_transaction_registry,
)

__all__ = [
    "ENTRY_ADAPTERS",
    "EntryInfoV1Adapter",
    "EntryInfoV2Adapter",
    "TRANSACTION_ADAPTERS",
    "TransactionInfoV1Adapter",
    "TransactionInfoV2Adapter",
    "TransactionInfoV3Adapter",
    "build_entry_registry",
    "build_transaction_registry",
]
