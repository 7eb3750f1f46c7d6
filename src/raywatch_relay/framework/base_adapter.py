"""
Base adapter abstraction for host notification versions.

Every notification shape the host can emit (ReplicaTransactionInfo,
ReplicaTransactionInfoV2, ReplicaEntryInfo, ...) gets one BaseAdapter subclass
that maps it to the canonical event model. Adapters are grouped into an
AdapterRegistry keyed by the info object's type:
1. Known type -> adapter.normalize() -> TransactionEvent / EntryEvent
2. Unknown type -> warning logged, None returned, nothing published

Supporting a new host version means writing one adapter and registering it.
The registry miss is the catch-all: a host upgraded ahead of the relay must
never crash it.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Iterable, Optional

from raywatch_relay.framework.errors import UnsupportedVersionError
from raywatch_relay.framework.events import CanonicalEvent

logger = logging.getLogger(__name__)


class BaseAdapter(ABC):
    """
    Abstract base class for notification version adapters.

    Subclasses set source_type/version and implement normalize().
    normalize() must be pure: no I/O and no state kept between calls.
    """

    source_type: ClassVar[type]
    version: ClassVar[str]

    @abstractmethod
    def normalize(self, info: Any, slot: Optional[int] = None) -> CanonicalEvent:
        """
        Map a host info object to its canonical event.

        Args:
            info: Instance of source_type
            slot: Slot passed alongside the notification (transactions only;
                  entries carry their own slot)

        Returns:
            TransactionEvent or EntryEvent
        """
        pass


class AdapterRegistry:
    """
    Dispatches host info objects to the adapter registered for their type.

    Usage (EventRelay):
        registry = AdapterRegistry("transaction", [TransactionInfoV1Adapter(), ...])
        event = registry.adapt(info, slot)   # None for unknown shapes
    """

    def __init__(self, kind: str, adapters: Iterable[BaseAdapter] = ()) -> None:
        self.kind = kind
        self._adapters: dict[type, BaseAdapter] = {}
        for adapter in adapters:
            self.register(adapter)

    def register(self, adapter: BaseAdapter) -> None:
        """Register an adapter for its source_type, replacing any earlier one."""
        self._adapters[adapter.source_type] = adapter

    def lookup(self, info: Any) -> BaseAdapter:
        """
        Return the adapter for info's exact type.

        Raises:
            UnsupportedVersionError: If no adapter is registered for the type.
        """
        adapter = self._adapters.get(type(info))
        if adapter is None:
            raise UnsupportedVersionError(info)
        return adapter

    def adapt(self, info: Any, slot: Optional[int] = None) -> Optional[CanonicalEvent]:
        """
        Normalize info to a canonical event, or return None for unknown shapes.

        Never raises for an unknown shape; the miss is logged at warning level.
        """
        try:
            adapter = self.lookup(info)
        except UnsupportedVersionError as exc:
            logger.warning(
                "Unsupported %s notification — dropping | shape=%s | version=%s",
                self.kind,
                type(exc.info).__name__,
                getattr(exc.info, "version", "n/a"),
            )
            return None
        return adapter.normalize(info, slot)

    @property
    def supported_types(self) -> list[type]:
        """Info types this registry can normalize, in registration order."""
        return list(self._adapters)
