"""
Unit tests for the replay entry point.

Tests cover:
- replay(): dispatches transactions and entries to the plugin
- replay(): skips malformed JSON, non-objects, non-string kinds and invalid notifications
- replay(): skips lines that are not valid UTF-8 and keeps going
- replay(): stops when the stop event is set
- main(): exits 1 when the plugin cannot load
- main(): replays a file end to end against a mocked producer
- main(): a file with undecodable bytes is skipped line by line, not fatal
"""

import io
import json
import threading
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from raywatch_relay.framework.replica import ReplicaEntryInfo, ReplicaTransactionInfo
from raywatch_relay.producer.main import main, replay

TX_LINE = json.dumps(
    {"kind": "transaction", "version": "0.0.1", "slot": 42, "signature": "abc", "is_vote": False}
)
ENTRY_LINE = json.dumps(
    {
        "kind": "entry",
        "version": "0.0.1",
        "slot": 100,
        "index": 3,
        "num_hashes": 50,
        "executed_transaction_count": 7,
    }
)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("RAYWATCH_KAFKA_BROKERS", raising=False)
    monkeypatch.delenv("RAYWATCH_TOPIC", raising=False)


class TestReplay:
    """Test line dispatch."""

    def setup_method(self) -> None:
        self.plugin = MagicMock()
        self.stop = threading.Event()

    def test_dispatches_both_kinds(self) -> None:
        counts = replay(self.plugin, io.StringIO(f"{TX_LINE}\n{ENTRY_LINE}\n"), self.stop)

        self.plugin.notify_transaction.assert_called_once_with(
            ReplicaTransactionInfo(signature="abc", is_vote=False), 42
        )
        self.plugin.notify_entry.assert_called_once_with(
            ReplicaEntryInfo(slot=100, index=3, num_hashes=50, executed_transaction_count=7)
        )
        assert counts == {"read": 2, "dispatched": 2, "skipped": 0}

    def test_skips_bad_lines(self) -> None:
        lines = "\n".join(["not json", "[1, 2]", '{"kind": "vote"}', "", TX_LINE])
        counts = replay(self.plugin, io.StringIO(lines), self.stop)

        assert counts == {"read": 4, "dispatched": 1, "skipped": 3}
        self.plugin.notify_transaction.assert_called_once()

    def test_non_string_kind_skipped(self) -> None:
        lines = "\n".join(['{"kind": ["x"]}', '{"kind": {"a": 1}}', TX_LINE])
        counts = replay(self.plugin, io.StringIO(lines), self.stop)

        assert counts == {"read": 3, "dispatched": 1, "skipped": 2}

    def test_invalid_utf8_line_skipped(self, caplog: pytest.LogCaptureFixture) -> None:
        data = b"\xff\xfe garbage\n" + ENTRY_LINE.encode() + b"\n"
        with caplog.at_level("WARNING"):
            counts = replay(self.plugin, io.BytesIO(data), self.stop)

        assert counts == {"read": 2, "dispatched": 1, "skipped": 1}
        self.plugin.notify_entry.assert_called_once()
        assert "Skipping line 1" in caplog.text

    def test_stop_event_ends_replay(self) -> None:
        self.stop.set()
        counts = replay(self.plugin, io.StringIO(f"{TX_LINE}\n"), self.stop)
        assert counts["read"] == 0
        self.plugin.notify_transaction.assert_not_called()


class TestMain:
    """Test the process entry point."""

    def test_load_failure_exits_1(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("RAYWATCH_KAFKA_BROKERS", "no-port-here")
        monkeypatch.setenv("RAYWATCH_CONFIG", str(tmp_path / "absent.yaml"))
        assert main([str(tmp_path / "unused.jsonl")]) == 1

    def test_replays_file(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        notifications = tmp_path / "notifications.jsonl"
        empty_entry = json.loads(ENTRY_LINE) | {"executed_transaction_count": 0}
        notifications.write_text("\n".join([TX_LINE, ENTRY_LINE, json.dumps(empty_entry)]) + "\n")
        monkeypatch.setenv("RAYWATCH_CONFIG", str(tmp_path / "absent.yaml"))

        with patch("raywatch_relay.producer.kafka_writer.Producer") as producer_cls:
            producer_cls.return_value.flush.return_value = 0
            assert main([str(notifications)]) == 0

        producer = producer_cls.return_value
        assert producer.produce.call_count == 2
        producer.flush.assert_called_once()

    def test_missing_notifications_file_exits_1(
        self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path
    ) -> None:
        monkeypatch.setenv("RAYWATCH_CONFIG", str(tmp_path / "absent.yaml"))
        with patch("raywatch_relay.producer.kafka_writer.Producer") as producer_cls:
            producer_cls.return_value.flush.return_value = 0
            assert main([str(tmp_path / "absent.jsonl")]) == 1

    def test_undecodable_file_not_fatal(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        notifications = tmp_path / "notifications.jsonl"
        notifications.write_bytes(b"\xff\xfe garbage\n" + TX_LINE.encode() + b"\n")
        monkeypatch.setenv("RAYWATCH_CONFIG", str(tmp_path / "absent.yaml"))

        with patch("raywatch_relay.producer.kafka_writer.Producer") as producer_cls:
            producer_cls.return_value.flush.return_value = 0
            assert main([str(notifications)]) == 0

        assert producer_cls.return_value.produce.call_count == 1
