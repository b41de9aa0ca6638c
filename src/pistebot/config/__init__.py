from .bridge_config import (
    BridgeConfig,
    ConfigurationError,
    LedgerConfig,
    LoggingConfig,
    OutputConfig,
    TelegramConfig,
)
from .logging_config import setup_logging

__all__ = [
    "BridgeConfig",
    "ConfigurationError",
    "LedgerConfig",
    "LoggingConfig",
    "OutputConfig",
    "TelegramConfig",
    "setup_logging",
]
