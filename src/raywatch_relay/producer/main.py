"""
Raywatch Geyser Relay: notification replay tool.

Loads the relay plugin exactly as the host would and feeds it recorded
notifications, one JSON object per line, from a file or stdin. Useful for
checking a topic and its consumers end to end without running a validator.

    raywatch-relay notifications.jsonl
    cat notifications.jsonl | raywatch-relay

Environment variables:
    RAYWATCH_CONFIG          Relay config path (default: config/relay.yaml)
    RAYWATCH_KAFKA_BROKERS   Overrides kafka_brokers from the config file
    RAYWATCH_TOPIC           Overrides topic from the config file

Shutdown:
    SIGTERM / SIGINT  → stop after the current line, unload the plugin
"""

import json
import logging
import os
import signal
import sys
import threading
from typing import Any, Iterable, Optional, Union

from raywatch_relay.framework.errors import BrokerConnectionError
from raywatch_relay.framework.replica import parse_notification
from raywatch_relay.producer.plugin import GeyserRelayPlugin

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config/relay.yaml"


def replay(
    plugin: GeyserRelayPlugin,
    lines: Iterable[Union[str, bytes]],
    stop: threading.Event,
) -> dict[str, int]:
    """
    Dispatch each JSON line to the plugin's notify_* callbacks.

    Blank lines are ignored. Lines that are not valid UTF-8 or not valid
    notifications are logged and skipped. Byte lines are decoded one at a
    time so a bad line never ends the replay.

    Returns:
        Counts: {"read": ..., "dispatched": ..., "skipped": ...}
    """
    counts = {"read": 0, "dispatched": 0, "skipped": 0}
    for line_no, line in enumerate(lines, start=1):
        if stop.is_set():
            break
        line = line.strip()
        if not line:
            continue
        counts["read"] += 1
        try:
            text = line.decode("utf-8") if isinstance(line, bytes) else line
            payload: Any = json.loads(text)
            if not isinstance(payload, dict):
                raise ValueError("notification must be a JSON object")
            kind, info, slot = parse_notification(payload)
        except (TypeError, ValueError) as exc:
            counts["skipped"] += 1
            logger.warning("Skipping line %d — %s", line_no, exc)
            continue

        if kind == "transaction":
            plugin.notify_transaction(info, slot)  # type: ignore[arg-type]
        else:
            plugin.notify_entry(info)
        counts["dispatched"] += 1
    return counts


def main(argv: Optional[list[str]] = None) -> int:
    """Load the plugin, replay notifications, unload. Returns the process exit status."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        stream=sys.stdout,
    )
    args = sys.argv[1:] if argv is None else argv
    config_path = os.getenv("RAYWATCH_CONFIG", DEFAULT_CONFIG_PATH)

    plugin = GeyserRelayPlugin()
    try:
        plugin.on_load(config_path)
    except BrokerConnectionError as exc:
        logger.error("Relay failed to load: %s", exc)
        return 1

    stop = threading.Event()

    def _handle_signal(signum: int, _frame: Any) -> None:
        logger.info("Received %s — stopping replay", signal.Signals(signum).name)
        stop.set()

    previous_handlers: dict[signal.Signals, Any] = {}
    if threading.current_thread() is threading.main_thread():
        for sig in (signal.SIGTERM, signal.SIGINT):
            previous_handlers[sig] = signal.signal(sig, _handle_signal)

    try:
        if args:
            with open(args[0], "rb") as f:
                counts = replay(plugin, f, stop)
        else:
            counts = replay(plugin, sys.stdin.buffer, stop)
    except OSError as exc:
        logger.error("Cannot read notifications: %s", exc)
        return 1
    finally:
        writer = plugin.writer
        plugin.on_unload()
        stats = writer.stats() if writer is not None else None
        for sig, handler in previous_handlers.items():
            if handler is not None:
                signal.signal(sig, handler)

    logger.info(
        "Replay finished | read=%d | dispatched=%d | skipped=%d | writer=%s",
        counts["read"],
        counts["dispatched"],
        counts["skipped"],
        stats,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
