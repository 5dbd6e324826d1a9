"""
Logging setup - routes the deepql loggers through a Rich console handler.
"""
import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from .config_loader import LoggingConfig

ROOT_LOGGER = "deepql"


def setup_logging(config: Optional[LoggingConfig] = None) -> logging.Logger:
    """
    Configure the package logger.

    Args:
        config: Logging settings (level and optional log file)

    Returns:
        The configured "deepql" logger
    """
    config = config or LoggingConfig()

    level = logging.getLevelName(config.level.upper())
    if not isinstance(level, int):
        level = logging.INFO

    log = logging.getLogger(ROOT_LOGGER)
    log.setLevel(level)

    # Drop handlers from an earlier call so repeated setup doesn't duplicate output
    for handler in list(log.handlers):
        log.removeHandler(handler)
        handler.close()

    console = Console(stderr=True, legacy_windows=False)
    log.addHandler(RichHandler(console=console, show_path=False, markup=False))

    if config.log_file:
        Path(config.log_file).parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(config.log_file)
        file_handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s: %(message)s"
        ))
        log.addHandler(file_handler)

    log.propagate = False
    return log
