"""
Core module for spot-reshuffle.

This module provides the foundational components used throughout the application:
    - exceptions: Custom exception classes for error handling
    - config: Configuration loading and validation
    - logger: Console and file logging

Usage:
    from spot_reshuffle.core import (
        Config, load_config,
        setup_logging, get_logger,
        SpotReshuffleError, ConfigError, SpotifyError
    )
"""

from spot_reshuffle.core.config import (
    Config,
    LoggingConfig,
    MAX_ITEMS_PER_REQUEST,
    MAX_SEARCH_LIMIT,
    ReshuffleConfig,
    SpotifyConfig,
    check_credentials,
    load_config,
)
from spot_reshuffle.core.exceptions import (
    ConfigError,
    InvalidTrackUriError,
    SpotifyError,
    SpotReshuffleError,
)
from spot_reshuffle.core.logger import (
    get_logger,
    setup_logging,
    shutdown_logging,
)

__all__ = [
    # Config
    "Config",
    "SpotifyConfig",
    "ReshuffleConfig",
    "LoggingConfig",
    "MAX_ITEMS_PER_REQUEST",
    "MAX_SEARCH_LIMIT",
    "load_config",
    "check_credentials",
    # Exceptions
    "SpotReshuffleError",
    "ConfigError",
    "SpotifyError",
    "InvalidTrackUriError",
    # Logger
    "setup_logging",
    "get_logger",
    "shutdown_logging",
]
