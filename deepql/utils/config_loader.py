"""
Configuration Loader - Load and validate configuration from YAML.

A single config.yaml holds the agent hyperparameters plus device, logging
and diagnostics settings. Missing sections fall back to defaults and
unknown keys are ignored.
"""
import logging
import math
import yaml
from pathlib import Path
from typing import Optional, Any, List
from dataclasses import dataclass, field

logger = logging.getLogger(__name__)


class ConfigurationError(ValueError):
    """Raised when a configuration value is invalid."""


@dataclass
class AgentConfig:
    """DQN agent hyperparameters."""
    learning_rate: float = 0.001
    discount_factor: float = 0.95
    replay_size: int = 2000
    batch_size: int = 32
    training_epochs: int = 1
    memory_interval: int = 1
    # >= 1: hard copy every N steps, (0, 1): soft blend factor, 0: disabled
    target_update_interval: float = 0.0
    target_update_on_episode_end: bool = False
    hidden_layers: List[int] = field(default_factory=lambda: [24, 24])

    def validate(self) -> None:
        """
        Check every field, raising on the first invalid one.

        Raises:
            ConfigurationError: If a value is out of range
        """
        if self.batch_size <= 0:
            raise ConfigurationError(f"batch_size must be positive, got {self.batch_size}")
        if self.replay_size <= 0:
            raise ConfigurationError(f"replay_size must be positive, got {self.replay_size}")
        if self.training_epochs <= 0:
            raise ConfigurationError(
                f"training_epochs must be positive, got {self.training_epochs}"
            )
        if self.memory_interval <= 0:
            raise ConfigurationError(
                f"memory_interval must be positive, got {self.memory_interval}"
            )
        if not math.isfinite(self.target_update_interval) or self.target_update_interval < 0:
            raise ConfigurationError(
                "target_update_interval must be in [0, inf), "
                f"got {self.target_update_interval}"
            )
        if any(size <= 0 for size in self.hidden_layers):
            raise ConfigurationError(
                f"hidden_layers sizes must be positive, got {self.hidden_layers}"
            )

    def sync_policy(self):
        """Resolve the target network sync policy from the raw settings."""
        from ..ai.target_sync import resolve_sync_policy

        return resolve_sync_policy(
            self.target_update_interval,
            self.target_update_on_episode_end
        )


@dataclass
class DeviceConfig:
    """Device selection configuration."""
    preferred: str = "auto"
    force_cpu: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    log_file: Optional[str] = None


@dataclass
class DiagnosticsConfig:
    """Diagnostics settings."""
    window: int = 100
    terminal: bool = False


@dataclass
class Config:
    """Complete application configuration."""
    agent: AgentConfig = field(default_factory=AgentConfig)
    device: DeviceConfig = field(default_factory=DeviceConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    diagnostics: DiagnosticsConfig = field(default_factory=DiagnosticsConfig)


_SECTIONS = {
    'agent': AgentConfig,
    'device': DeviceConfig,
    'logging': LoggingConfig,
    'diagnostics': DiagnosticsConfig,
}


def _dict_to_dataclass(data: dict, cls: type) -> Any:
    """Convert a dictionary to a dataclass instance."""
    if not data:
        return cls()

    # Get the fields that the dataclass expects
    field_names = {f.name for f in cls.__dataclass_fields__.values()}

    # Filter to only include valid fields
    filtered_data = {k: v for k, v in data.items() if k in field_names}

    return cls(**filtered_data)


def config_from_dict(data: Optional[dict]) -> Config:
    """
    Build and validate a Config from a plain dictionary.

    Args:
        data: Nested dictionary, one key per section

    Returns:
        Config object with all settings

    Raises:
        ConfigurationError: If the agent section is invalid
    """
    config = Config()

    for section, cls in _SECTIONS.items():
        if data and section in data:
            setattr(config, section, _dict_to_dataclass(data[section], cls))

    config.agent.validate()
    return config


def load_config(config_path: Optional[str] = None) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        config_path: Path to config file (defaults to project root config.yaml)

    Returns:
        Config object with all settings
    """
    # Find config file
    if config_path is None:
        possible_paths = [
            Path("config.yaml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]

        for path in possible_paths:
            if path.exists():
                config_path = str(path)
                break

    if config_path is None or not Path(config_path).exists():
        logger.info("No config file found, using defaults")
        return Config()

    with open(config_path, 'r') as f:
        data = yaml.safe_load(f)

    logger.debug("Loaded config from %s", config_path)
    return config_from_dict(data)


def save_config(config: Config, config_path: str):
    """
    Save configuration to a YAML file.

    Args:
        config: Config object to save
        config_path: Path to save to
    """
    from dataclasses import asdict

    data = asdict(config)

    Path(config_path).parent.mkdir(parents=True, exist_ok=True)
    with open(config_path, 'w') as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
