"""
Host replica notification shapes.

The host hands the plugin one of several versioned info objects per
notification. The shapes below mirror the host's versions; fields the relay
does not forward (transaction body, status meta, entry hash) are carried
opaquely.

parse_notification() builds these objects from tagged JSON dicts so recorded
notifications can be replayed through the relay without a host:

    {"kind": "transaction", "version": "0.0.2", "slot": 42,
     "signature": "abc", "is_vote": false, "index": 0}
    {"kind": "entry", "version": "0.0.1", "slot": 100, "index": 3,
     "num_hashes": 50, "hash": "...", "executed_transaction_count": 7}

Versions nobody has registered come back as UnknownReplicaInfo so that the
adapters can log and drop them like any other future shape.
"""

from dataclasses import MISSING, dataclass, field, fields
from typing import Any, Optional


@dataclass
class ReplicaTransactionInfo:
    """Transaction notification, version 0.0.1."""

    signature: str
    is_vote: bool
    transaction: Any = None
    transaction_status_meta: Any = None


@dataclass
class ReplicaTransactionInfoV2:
    """Transaction notification, version 0.0.2: adds the index within the block."""

    signature: str
    is_vote: bool
    transaction: Any = None
    transaction_status_meta: Any = None
    index: int = 0


@dataclass
class ReplicaTransactionInfoV3:
    """Transaction notification, version 0.0.3: adds the message hash."""

    signature: str
    is_vote: bool
    message_hash: Optional[str] = None
    transaction: Any = None
    transaction_status_meta: Any = None
    index: int = 0


@dataclass
class ReplicaEntryInfo:
    """Entry notification, version 0.0.1."""

    slot: int
    index: int
    num_hashes: int
    executed_transaction_count: int
    hash: Any = None


@dataclass
class ReplicaEntryInfoV2:
    """Entry notification, version 0.0.2: adds the starting transaction index."""

    slot: int
    index: int
    num_hashes: int
    executed_transaction_count: int
    hash: Any = None
    starting_transaction_index: int = 0


@dataclass
class UnknownReplicaInfo:
    """A notification in a version this build does not know about."""

    kind: str
    version: str
    payload: dict[str, Any] = field(default_factory=dict)


TRANSACTION_VERSIONS: dict[str, type] = {
    "0.0.1": ReplicaTransactionInfo,
    "0.0.2": ReplicaTransactionInfoV2,
    "0.0.3": ReplicaTransactionInfoV3,
}

ENTRY_VERSIONS: dict[str, type] = {
    "0.0.1": ReplicaEntryInfo,
    "0.0.2": ReplicaEntryInfoV2,
}

_VERSIONS_BY_KIND = {
    "transaction": TRANSACTION_VERSIONS,
    "entry": ENTRY_VERSIONS,
}


def parse_notification(payload: dict[str, Any]) -> tuple[str, Any, Optional[int]]:
    """
    Build a replica info object from a tagged JSON dict.

    Args:
        payload: Dict with "kind" ("transaction" or "entry"), "version", and the
                 fields of that version. Transactions also carry "slot".

    Returns:
        Tuple of (kind, info, slot). slot is None for entries, whose info
        objects carry their own slot.

    Raises:
        ValueError: If kind is missing/unknown or a required field is missing.
    """
    kind = payload.get("kind")
    versions = _VERSIONS_BY_KIND.get(kind) if isinstance(kind, str) else None
    if versions is None:
        raise ValueError(f"unknown notification kind: {kind!r}")

    slot: Optional[int] = None
    if kind == "transaction":
        if "slot" not in payload:
            raise ValueError("transaction notification is missing 'slot'")
        slot = payload["slot"]

    version = str(payload.get("version", ""))
    info_cls = versions.get(version)
    if info_cls is None:
        return kind, UnknownReplicaInfo(kind=kind, version=version, payload=dict(payload)), slot

    kwargs: dict[str, Any] = {}
    for f in fields(info_cls):
        if f.name in payload:
            kwargs[f.name] = payload[f.name]
        elif f.default is MISSING and f.default_factory is MISSING:
            raise ValueError(f"{kind} {version} notification is missing '{f.name}'")
    return kind, info_cls(**kwargs), slot
