"""
Unit tests for ConfigLoader.

Tests cover:
- read(): JSON and YAML files, unknown keys ignored, numeric casting
- read(): missing file, parse failure, non-mapping, missing kafka_brokers → ConfigError
- load(): falls back to RelayConfig defaults with a warning on ConfigError
- load(): RAYWATCH_KAFKA_BROKERS / RAYWATCH_TOPIC override the file
- load(): the shipped config/relay.yaml parses
"""

import json
from pathlib import Path

import pytest

from raywatch_relay.framework.config_loader import ConfigLoader, RelayConfig
from raywatch_relay.framework.errors import ConfigError

REPO_CONFIG = Path(__file__).resolve().parents[3] / "config" / "relay.yaml"


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(ConfigLoader.ENV_BROKERS, raising=False)
    monkeypatch.delenv(ConfigLoader.ENV_TOPIC, raising=False)


class TestRead:
    """Test strict reading and validation."""

    def test_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text(json.dumps({"kafka_brokers": "b1:9092,b2:9092"}))
        assert ConfigLoader(str(path)).read() == {"kafka_brokers": "b1:9092,b2:9092"}

    def test_host_keys_ignored(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text(
            json.dumps({"libpath": "/opt/libraywatch.so", "kafka_brokers": "b1:9092"})
        )
        assert ConfigLoader(str(path)).read() == {"kafka_brokers": "b1:9092"}

    def test_yaml_file_with_tuning(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.yaml"
        path.write_text(
            "kafka_brokers: b1:9092\n"
            "topic: chain.events\n"
            "message_timeout_ms: '2500'\n"
            "poll_every: 10\n"
            "poll_interval_seconds: 1\n"
        )
        settings = ConfigLoader(str(path)).read()
        assert settings["topic"] == "chain.events"
        assert settings["message_timeout_ms"] == 2500
        assert settings["poll_every"] == 10
        assert settings["poll_interval_seconds"] == 1.0

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(ConfigError, match="cannot read"):
            ConfigLoader(str(tmp_path / "absent.json")).read()

    def test_no_path(self) -> None:
        with pytest.raises(ConfigError):
            ConfigLoader(None).read()

    def test_unparseable(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text('{"kafka_brokers": ')
        with pytest.raises(ConfigError, match="cannot parse"):
            ConfigLoader(str(path)).read()

    def test_not_a_mapping(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text('["b1:9092"]')
        with pytest.raises(ConfigError, match="mapping"):
            ConfigLoader(str(path)).read()

    @pytest.mark.parametrize("content", ['{"topic": "t"}', '{"kafka_brokers": ""}', '{"kafka_brokers": 9092}'])
    def test_missing_or_bad_brokers(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "relay.json"
        path.write_text(content)
        with pytest.raises(ConfigError, match="kafka_brokers"):
            ConfigLoader(str(path)).read()

    def test_bad_numeric_value(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text('{"kafka_brokers": "b1:9092", "poll_every": "often"}')
        with pytest.raises(ConfigError, match="poll_every"):
            ConfigLoader(str(path)).read()


class TestLoad:
    """Test fallback and environment overrides."""

    def test_file_values_used_verbatim(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text(json.dumps({"kafka_brokers": "b1:9092,b2:9092"}))
        config = ConfigLoader(str(path)).load()
        assert config.kafka_brokers == "b1:9092,b2:9092"
        assert config.topic == RelayConfig.topic

    def test_missing_file_falls_back(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        with caplog.at_level("WARNING"):
            config = ConfigLoader(str(tmp_path / "absent.json")).load()
        assert config == RelayConfig()
        assert config.kafka_brokers == "localhost:9092"
        assert "using defaults" in caplog.text

    def test_malformed_file_falls_back(self, tmp_path: Path) -> None:
        path = tmp_path / "relay.json"
        path.write_text("kafka_brokers: [unclosed")
        assert ConfigLoader(str(path)).load().kafka_brokers == "localhost:9092"

    def test_env_overrides_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        path = tmp_path / "relay.json"
        path.write_text(json.dumps({"kafka_brokers": "b1:9092", "topic": "from-file"}))
        monkeypatch.setenv(ConfigLoader.ENV_BROKERS, "env1:9092")
        monkeypatch.setenv(ConfigLoader.ENV_TOPIC, "from-env")

        config = ConfigLoader(str(path)).load()
        assert config.kafka_brokers == "env1:9092"
        assert config.topic == "from-env"

    def test_env_applies_after_fallback(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv(ConfigLoader.ENV_BROKERS, "env1:9092")
        config = ConfigLoader(str(tmp_path / "absent.json")).load()
        assert config.kafka_brokers == "env1:9092"

    def test_blank_env_ignored(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv(ConfigLoader.ENV_BROKERS, "  ")
        config = ConfigLoader(str(tmp_path / "absent.json")).load()
        assert config.kafka_brokers == "localhost:9092"

    def test_shipped_config(self) -> None:
        config = ConfigLoader(str(REPO_CONFIG)).load()
        assert config.kafka_brokers == "localhost:9092"
        assert config.topic == "raywatch.geyser.events"
        assert config.message_timeout_ms == 5000
        assert config.poll_every == 1
