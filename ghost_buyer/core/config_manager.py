"""
GHOST BUYER - Configuration Manager
===================================

Centralized configuration for the stealth buyer.

Features:
- YAML/JSON configuration loading
- Environment variable overrides (GHOST_SECTION__KEY=value)
- Configuration validation
- Validated StealthSettings construction

Author: GHOST Development Team
Version: 1.0.0
"""

import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from shared.ghost_core.constants import (
    BASE_ASSET,
    DEFAULT_HISTORY_CAPACITY,
    DEFAULT_VENUE,
    SUPPORTED_VENUES,
)
from shared.ghost_core.exceptions import GhostError, InvalidConfigError
from shared.ghost_core.plan_generator import StealthSettings

logger = logging.getLogger("GHOST_ConfigManager")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class StealthConfig:
    """Chunking and timing bounds."""

    min_chunk: float = 25.0
    max_chunk: float = 100.0
    min_delay_seconds: float = 30.0
    max_delay_seconds: float = 180.0
    mode: str = "stealth"


@dataclass
class ExecutionConfig:
    """Execution configuration."""

    token_in: str = BASE_ASSET
    venue: str = DEFAULT_VENUE
    wallet_address: str = ""
    check_balance: bool = True


@dataclass
class HistoryConfig:
    """Execution history configuration."""

    capacity: int = DEFAULT_HISTORY_CAPACITY


@dataclass
class MonitoringConfig:
    """Monitoring configuration."""

    log_level: str = "INFO"
    alert_on_high_risk: bool = True
    max_consecutive_failures: int = 3


@dataclass
class SystemConfig:
    """Complete system configuration."""

    mode: str = "paper"  # paper, live
    stealth: StealthConfig = field(default_factory=StealthConfig)
    execution: ExecutionConfig = field(default_factory=ExecutionConfig)
    history: HistoryConfig = field(default_factory=HistoryConfig)
    monitoring: MonitoringConfig = field(default_factory=MonitoringConfig)


class ConfigManager:
    """
    Configuration manager.

    Example:
        config_manager = ConfigManager()
        config_manager.load("config/paper.yaml")

        settings = config_manager.stealth_settings()
        venue = config_manager.get("execution.venue")
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None, env_prefix: str = "GHOST_"):
        self._config_path: Optional[Path] = None
        self._config: SystemConfig = SystemConfig()
        self._raw_config: Dict[str, Any] = {}
        self._loaded_at: Optional[datetime] = None
        self._env_prefix = env_prefix

        if config_path:
            self.load(config_path)

        logger.info("ConfigManager initialized")

    def load(self, path: Union[str, Path]) -> bool:
        """
        Load configuration from file.

        Args:
            path: Path to config file (YAML or JSON)

        Returns:
            True if loaded successfully
        """
        path = Path(path)

        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return False

        try:
            with open(path, "r") as f:
                if path.suffix in [".yaml", ".yml"]:
                    self._raw_config = yaml.safe_load(f) or {}
                elif path.suffix == ".json":
                    self._raw_config = json.load(f)
                else:
                    logger.error(f"Unsupported config format: {path.suffix}")
                    return False
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load config: {e}")
            return False

        self.load_dict(self._raw_config)

        self._config_path = path
        logger.info(f"Configuration loaded from: {path}")
        return True

    def load_dict(self, raw: Dict[str, Any]) -> None:
        """Load configuration from an in-memory mapping."""
        self._raw_config = raw
        self._apply_env_overrides()
        self._parse_config()
        self._loaded_at = datetime.now(timezone.utc)

    def _apply_env_overrides(self) -> None:
        """Apply environment variable overrides."""
        for key, value in os.environ.items():
            if key.startswith(self._env_prefix):
                config_key = key[len(self._env_prefix):].lower().replace("__", ".")
                self._set_nested(config_key, self._parse_value(value))

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        return value

    def _set_nested(self, key: str, value: Any) -> None:
        """Set a nested config value using dot notation."""
        parts = key.split(".")
        current = self._raw_config

        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = value

    def _parse_config(self) -> None:
        """Parse raw config into structured config."""
        raw = self._raw_config
        defaults = SystemConfig()

        self._config = SystemConfig(mode=raw.get("mode", defaults.mode))

        s = raw.get("stealth") or {}
        self._config.stealth = StealthConfig(
            min_chunk=s.get("min_chunk", defaults.stealth.min_chunk),
            max_chunk=s.get("max_chunk", defaults.stealth.max_chunk),
            min_delay_seconds=s.get("min_delay_seconds", defaults.stealth.min_delay_seconds),
            max_delay_seconds=s.get("max_delay_seconds", defaults.stealth.max_delay_seconds),
            mode=s.get("mode", defaults.stealth.mode),
        )

        e = raw.get("execution") or {}
        self._config.execution = ExecutionConfig(
            token_in=e.get("token_in", defaults.execution.token_in),
            venue=e.get("venue", defaults.execution.venue),
            wallet_address=e.get("wallet_address", defaults.execution.wallet_address),
            check_balance=e.get("check_balance", defaults.execution.check_balance),
        )

        h = raw.get("history") or {}
        self._config.history = HistoryConfig(
            capacity=h.get("capacity", defaults.history.capacity),
        )

        m = raw.get("monitoring") or {}
        self._config.monitoring = MonitoringConfig(
            log_level=m.get("log_level", defaults.monitoring.log_level),
            alert_on_high_risk=m.get("alert_on_high_risk", defaults.monitoring.alert_on_high_risk),
            max_consecutive_failures=m.get(
                "max_consecutive_failures", defaults.monitoring.max_consecutive_failures
            ),
        )

    def get(self, key: str, default: Any = None) -> Any:
        """
        Get configuration value by key.

        Args:
            key: Dot-notation key (e.g., "stealth.min_chunk")
            default: Default value if not found
        """
        parts = key.split(".")
        current = self._raw_config

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value (runtime only)."""
        self._set_nested(key, value)
        self._parse_config()

    @property
    def config(self) -> SystemConfig:
        """Get the structured configuration."""
        return self._config

    @property
    def stealth(self) -> StealthConfig:
        return self._config.stealth

    @property
    def execution(self) -> ExecutionConfig:
        return self._config.execution

    @property
    def history(self) -> HistoryConfig:
        return self._config.history

    @property
    def monitoring(self) -> MonitoringConfig:
        return self._config.monitoring

    @property
    def is_paper(self) -> bool:
        """Check if running against the paper venue."""
        return self._config.mode == "paper"

    def stealth_settings(self) -> StealthSettings:
        """
        Build validated stealth settings from the stealth section.

        Raises:
            InvalidSettingsError: bounds are malformed
        """
        return StealthSettings.from_dict({
            "min_chunk": self.stealth.min_chunk,
            "max_chunk": self.stealth.max_chunk,
            "min_delay_seconds": self.stealth.min_delay_seconds,
            "max_delay_seconds": self.stealth.max_delay_seconds,
            "mode": self.stealth.mode,
        })

    def reload(self) -> bool:
        """Reload configuration from file."""
        if self._config_path:
            return self.load(self._config_path)
        return False

    def save(self, path: Optional[Union[str, Path]] = None) -> bool:
        """
        Save configuration to file.

        Args:
            path: Optional path (uses loaded path if not specified)

        Returns:
            True if saved successfully
        """
        path = Path(path) if path else self._config_path

        if not path:
            logger.error("No config path specified")
            return False

        try:
            with open(path, "w") as f:
                if path.suffix in [".yaml", ".yml"]:
                    yaml.safe_dump(self._raw_config, f, default_flow_style=False)
                else:
                    json.dump(self._raw_config, f, indent=2)
        except OSError as e:
            logger.error(f"Failed to save config: {e}")
            return False

        logger.info(f"Configuration saved to: {path}")
        return True

    def validate(self) -> List[str]:
        """
        Validate configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        errors = []

        try:
            self.stealth_settings()
        except GhostError as e:
            errors.append(f"stealth: {e.message}")

        if self._config.execution.venue not in SUPPORTED_VENUES:
            errors.append(f"execution.venue must be one of {list(SUPPORTED_VENUES)}")

        capacity = self._config.history.capacity
        if isinstance(capacity, bool) or not isinstance(capacity, int) or capacity < 1:
            errors.append("history.capacity must be a positive integer")

        if self._config.mode not in ["paper", "live"]:
            errors.append("mode must be 'paper' or 'live'")

        log_level = self._config.monitoring.log_level
        if not isinstance(log_level, str) or log_level.upper() not in LOG_LEVELS:
            errors.append(f"monitoring.log_level must be one of {list(LOG_LEVELS)}")

        failures = self._config.monitoring.max_consecutive_failures
        if isinstance(failures, bool) or not isinstance(failures, int) or failures < 1:
            errors.append("monitoring.max_consecutive_failures must be a positive integer")

        return errors

    def validate_or_raise(self) -> None:
        """Raise InvalidConfigError listing every validation error."""
        errors = self.validate()
        if errors:
            raise InvalidConfigError("; ".join(errors), details={"errors": errors})

    def get_info(self) -> Dict[str, Any]:
        """Get configuration info."""
        return {
            "path": str(self._config_path) if self._config_path else None,
            "loaded_at": self._loaded_at.isoformat() if self._loaded_at else None,
            "mode": self._config.mode,
            "stealth_mode": self._config.stealth.mode,
            "venue": self._config.execution.venue,
            "validation_errors": self.validate(),
        }


# =============================================================================
# EXPORTS
# =============================================================================

__all__ = [
    "LOG_LEVELS",
    "StealthConfig",
    "ExecutionConfig",
    "HistoryConfig",
    "MonitoringConfig",
    "SystemConfig",
    "ConfigManager",
]
