from .config_loader import (
    AgentConfig,
    Config,
    ConfigurationError,
    DeviceConfig,
    DiagnosticsConfig,
    LoggingConfig,
    config_from_dict,
    load_config,
    save_config,
)
from .logging_setup import setup_logging

__all__ = [
    "AgentConfig",
    "Config",
    "ConfigurationError",
    "DeviceConfig",
    "DiagnosticsConfig",
    "LoggingConfig",
    "config_from_dict",
    "load_config",
    "save_config",
    "setup_logging",
]
