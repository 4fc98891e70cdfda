"""Configuration management for Stock Tracker."""

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


@dataclass
class DataConfig:
    """Data storage configuration."""

    storage_dir: Path
    backend: str = "json"


@dataclass
class AlertsConfig:
    """Alert window configuration."""

    horizon_days: int = 30
    lowest_stocked_limit: int = 5


@dataclass
class AssistantConfig:
    """Language model configuration."""

    model: str = "claude-sonnet-4-5"
    max_tokens: int = 4096
    api_key_env: str = "ANTHROPIC_API_KEY"


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "WARNING"
    file: Path | None = None


@dataclass
class Config:
    """Complete application configuration."""

    data: DataConfig
    alerts: AlertsConfig = field(default_factory=AlertsConfig)
    assistant: AssistantConfig = field(default_factory=AssistantConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


class ConfigManager:
    """Manages application configuration from TOML files."""

    def __init__(self, config_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            config_path: Optional explicit path to config file.
                        If not provided, searches standard locations.
        """
        self.config_path = config_path or self._find_config()
        self._config = self._load_config()

    @property
    def data(self) -> DataConfig:
        """Get data configuration."""
        return self._config.data

    @property
    def alerts(self) -> AlertsConfig:
        """Get alerts configuration."""
        return self._config.alerts

    @property
    def assistant(self) -> AssistantConfig:
        """Get assistant configuration."""
        return self._config.assistant

    @property
    def logging(self) -> LoggingConfig:
        """Get logging configuration."""
        return self._config.logging

    def _find_config(self) -> Path:
        """Find config file in standard locations."""
        locations = [
            Path.cwd() / "config.toml",
            Path.home() / ".config" / "stock-tracker" / "config.toml",
            Path.home() / ".stock-tracker" / "config.toml",
        ]

        for loc in locations:
            if loc.exists():
                return loc

        # Return default location if none found
        return Path.home() / ".config" / "stock-tracker" / "config.toml"

    def _load_config(self) -> Config:
        """Load configuration from TOML file."""
        if not self.config_path.exists():
            return self._default_config()

        with open(self.config_path, "rb") as f:
            data = tomllib.load(f)

        data_section = data.get("data", {})
        alerts = data.get("alerts", {})
        assistant = data.get("assistant", {})
        logging_section = data.get("logging", {})
        log_file = logging_section.get("file")

        return Config(
            data=DataConfig(
                storage_dir=Path(
                    data_section.get("storage_dir", "~/stock-tracker/data")
                ).expanduser(),
                backend=data_section.get("backend", "json"),
            ),
            alerts=AlertsConfig(
                horizon_days=alerts.get("horizon_days", 30),
                lowest_stocked_limit=alerts.get("lowest_stocked_limit", 5),
            ),
            assistant=AssistantConfig(
                model=assistant.get("model", "claude-sonnet-4-5"),
                max_tokens=assistant.get("max_tokens", 4096),
                api_key_env=assistant.get("api_key_env", "ANTHROPIC_API_KEY"),
            ),
            logging=LoggingConfig(
                level=logging_section.get("level", "WARNING"),
                file=Path(log_file).expanduser() if log_file else None,
            ),
        )

    def _default_config(self) -> Config:
        """Return default configuration."""
        return Config(data=DataConfig(storage_dir=Path.home() / "stock-tracker" / "data"))

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get config value by dot-notation path.

        Args:
            key_path: Dot-separated path like 'data.storage_dir'
            default: Default value if path not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split(".")
        value: Any = self._config

        for key in keys:
            if not hasattr(value, key):
                return default
            value = getattr(value, key)

        return value if value is not None else default
