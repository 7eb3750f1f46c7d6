"""
Noise filter applied to canonical events before publishing.

Entries that executed no transactions are dropped. Transactions always pass.
"""

import logging

from raywatch_relay.framework.events import CanonicalEvent, EntryEvent

logger = logging.getLogger(__name__)


def should_publish(event: CanonicalEvent) -> bool:
    """Return False for entry events with executed_tx_count == 0, True otherwise."""
    if isinstance(event, EntryEvent) and event.executed_tx_count == 0:
        logger.debug("Dropping empty entry | slot=%s | idx=%s", event.slot, event.index)
        return False
    return True
