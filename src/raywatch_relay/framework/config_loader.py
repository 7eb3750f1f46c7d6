"""
Relay configuration loading.

Reads the file the host points the plugin at (the host's JSON plugin config
parses as YAML, so both formats work) and applies environment overrides:

Configuration hierarchy (highest to lowest priority):
1. RAYWATCH_KAFKA_BROKERS / RAYWATCH_TOPIC environment variables
2. The config file
3. RelayConfig defaults

A missing or broken file is never fatal: ConfigLoader.load() logs a warning
and continues with defaults so the plugin still loads against localhost.
"""

import logging
import os
from dataclasses import dataclass
from typing import Any, Optional

import yaml

from raywatch_relay.framework.errors import ConfigError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RelayConfig:
    """Resolved relay settings, fixed for the plugin's loaded lifetime."""

    kafka_brokers: str = "localhost:9092"
    topic: str = "raywatch.geyser.events"
    message_timeout_ms: int = 5000
    poll_every: int = 1
    poll_interval_seconds: float = 0.0
    shutdown_timeout_seconds: float = 0.0


_FIELD_TYPES: dict[str, type] = {
    "kafka_brokers": str,
    "topic": str,
    "message_timeout_ms": int,
    "poll_every": int,
    "poll_interval_seconds": float,
    "shutdown_timeout_seconds": float,
}


class ConfigLoader:
    """
    Loads RelayConfig from a YAML/JSON file.

    Usage (GeyserRelayPlugin.on_load):
        config = ConfigLoader(config_file).load()
    """

    ENV_BROKERS = "RAYWATCH_KAFKA_BROKERS"
    ENV_TOPIC = "RAYWATCH_TOPIC"

    def __init__(self, config_path: Optional[str]) -> None:
        """
        Args:
            config_path: Path to the config file. None behaves like a missing file.
        """
        self.config_path = config_path

    def read(self) -> dict[str, Any]:
        """
        Read and validate the config file.

        Unknown keys (e.g. the host's own "libpath") are ignored.

        Returns:
            Dict of recognised settings, always including kafka_brokers.

        Raises:
            ConfigError: If the file is missing, unreadable, not a mapping,
                         or has no usable kafka_brokers string.
        """
        if not self.config_path:
            raise ConfigError("no config file given")
        try:
            with open(self.config_path) as f:
                raw = yaml.safe_load(f)
        except OSError as exc:
            raise ConfigError(f"cannot read {self.config_path}: {exc}") from exc
        except yaml.YAMLError as exc:
            raise ConfigError(f"cannot parse {self.config_path}: {exc}") from exc

        if not isinstance(raw, dict):
            raise ConfigError(f"{self.config_path} does not contain a mapping")

        brokers = raw.get("kafka_brokers")
        if not isinstance(brokers, str) or not brokers.strip():
            raise ConfigError(f"{self.config_path} has no kafka_brokers string")

        settings: dict[str, Any] = {}
        for name, cast in _FIELD_TYPES.items():
            if name not in raw:
                continue
            try:
                settings[name] = cast(raw[name])
            except (TypeError, ValueError) as exc:
                raise ConfigError(f"invalid {name}={raw[name]!r}: {exc}") from exc
        return settings

    def load(self) -> RelayConfig:
        """
        Resolve the effective RelayConfig, falling back to defaults on ConfigError.

        Returns:
            RelayConfig with file values and environment overrides applied.
        """
        try:
            settings = self.read()
        except ConfigError as exc:
            logger.warning(
                "Relay config unavailable — using defaults | path=%s | error=%s",
                self.config_path,
                exc,
            )
            settings = {}

        env_brokers = os.getenv(self.ENV_BROKERS, "").strip()
        if env_brokers:
            settings["kafka_brokers"] = env_brokers
        env_topic = os.getenv(self.ENV_TOPIC, "").strip()
        if env_topic:
            settings["topic"] = env_topic

        config = RelayConfig(**settings)
        logger.info(
            "Relay config resolved | brokers=%s | topic=%s | message_timeout_ms=%d",
            config.kafka_brokers,
            config.topic,
            config.message_timeout_ms,
        )
        return config
