"""Configuration management for Sophy."""

from sophy.core.config.loader import (
    configure_logging,
    detect_format,
    load_config,
    load_sophy_config,
)
from sophy.core.config.models import (
    ConfigBase,
    LocalAdapterConfig,
    LoggingConfig,
    SophyConfig,
)

__all__ = [
    # Loaders
    "configure_logging",
    "detect_format",
    "load_config",
    "load_sophy_config",
    # Models
    "ConfigBase",
    "LocalAdapterConfig",
    "LoggingConfig",
    "SophyConfig",
]
