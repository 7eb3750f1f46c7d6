"""
Entry notification adapters.

Host versions:
- 0.0.1 ReplicaEntryInfo: slot, index, num_hashes, hash, executed_transaction_count
- 0.0.2 ReplicaEntryInfoV2: adds starting_transaction_index

Both reduce to EntryEvent(slot, index, num_hashes, executed_tx_count). The
entry hash and starting index are not forwarded.
"""

from typing import Any, Optional

from raywatch_relay.framework.base_adapter import AdapterRegistry, BaseAdapter
from raywatch_relay.framework.events import EntryEvent
from raywatch_relay.framework.replica import ReplicaEntryInfo, ReplicaEntryInfoV2


class EntryInfoV1Adapter(BaseAdapter):
    source_type = ReplicaEntryInfo
    version = "0.0.1"

    def normalize(self, info: Any, slot: Optional[int] = None) -> EntryEvent:
        """Map ReplicaEntryInfo; the slot argument is ignored, entries carry their own."""
        return EntryEvent(
            slot=info.slot,
            index=info.index,
            num_hashes=info.num_hashes,
            executed_tx_count=info.executed_transaction_count,
        )


class EntryInfoV2Adapter(EntryInfoV1Adapter):
    source_type = ReplicaEntryInfoV2
    version = "0.0.2"


def build_entry_registry() -> AdapterRegistry:
    """Registry with every known entry notification version."""
    return AdapterRegistry("entry", [EntryInfoV1Adapter(), EntryInfoV2Adapter()])


ENTRY_ADAPTERS = build_entry_registry()
