"""
Bridge Configuration Module

Centralized configuration for the bot with environment variable support.
Values are validated once at startup; the pipeline never re-validates them.
"""
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional

from dotenv import load_dotenv

DEFAULT_OUTPUT_PATH = "./output_messages"
DEFAULT_PARTY = "Intermediary"
OFFSET_FILE_NAME = ".ledger_offset"


class ConfigurationError(Exception):
    """Raised when the environment holds an invalid setting"""
    pass


def _parse_bool(name: str, value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "true", "yes", "on"):
        return True
    if lowered in ("0", "false", "no", "off", ""):
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {value!r}")


def _parse_port(value: str) -> int:
    try:
        port = int(value)
    except ValueError:
        raise ConfigurationError(f"SANDBOX_PORT must be an integer, got {value!r}")
    if not 1 <= port <= 65535:
        raise ConfigurationError(f"SANDBOX_PORT out of range: {port}")
    return port


@dataclass
class LedgerConfig:
    """Ledger JSON API configuration"""
    host: str = "localhost"
    port: int = 7600
    use_tls: bool = False
    token: Optional[str] = None
    user_id: str = "pistebot"
    party: str = DEFAULT_PARTY

    @classmethod
    def from_env(cls) -> "LedgerConfig":
        """Create config from environment variables"""
        return cls(
            host=os.getenv("SANDBOX_HOST", "localhost"),
            port=_parse_port(os.getenv("SANDBOX_PORT", "7600")),
            use_tls=_parse_bool("LEDGER_USE_TLS", os.getenv("LEDGER_USE_TLS", "false")),
            token=os.getenv("LEDGER_TOKEN") or None,
            user_id=os.getenv("LEDGER_USER_ID", "pistebot"),
            party=os.getenv("LEDGER_PARTY", DEFAULT_PARTY),
        )


@dataclass
class TelegramConfig:
    """Telegram Bot API configuration; both values unset disables the channel"""
    bot_token: Optional[str] = None
    chat_id: Optional[str] = None

    @property
    def enabled(self) -> bool:
        return bool(self.bot_token and self.chat_id)

    @classmethod
    def from_env(cls) -> "TelegramConfig":
        """Create config from environment variables"""
        return cls(
            bot_token=os.getenv("BOT_TOKEN") or None,
            chat_id=os.getenv("CHAT_ID") or None,
        )


@dataclass
class OutputConfig:
    """Settlement file output configuration"""
    output_path: str = DEFAULT_OUTPUT_PATH
    offset_file: Optional[str] = None

    @property
    def cursor_path(self) -> str:
        return self.offset_file or str(Path(self.output_path) / OFFSET_FILE_NAME)

    @classmethod
    def from_env(cls) -> "OutputConfig":
        """Create config from environment variables"""
        return cls(
            output_path=os.getenv("OUTPUT_PATH", DEFAULT_OUTPUT_PATH),
            offset_file=os.getenv("LEDGER_OFFSET_FILE") or None,
        )


@dataclass
class LoggingConfig:
    """Logging configuration"""
    level: str = "INFO"
    log_file: Optional[str] = None

    @classmethod
    def from_env(cls) -> "LoggingConfig":
        """Create config from environment variables"""
        level = os.getenv("LOG_LEVEL", "INFO").upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ConfigurationError(f"Unknown LOG_LEVEL: {level}")
        return cls(level=level, log_file=os.getenv("LOG_FILE") or None)


@dataclass
class BridgeConfig:
    """Complete bot configuration"""
    ledger: LedgerConfig
    telegram: TelegramConfig
    output: OutputConfig
    logging: LoggingConfig

    @classmethod
    def from_env(cls, env_file: Optional[str] = None) -> "BridgeConfig":
        """
        Load ``.env`` (if present) and build the configuration

        Args:
            env_file: Explicit dotenv file; defaults to searching for ``.env``

        Raises:
            ConfigurationError: If a value is invalid
        """
        load_dotenv(env_file)
        return cls(
            ledger=LedgerConfig.from_env(),
            telegram=TelegramConfig.from_env(),
            output=OutputConfig.from_env(),
            logging=LoggingConfig.from_env(),
        )

    def to_display_dict(self) -> Dict[str, str]:
        """Flattened settings with secrets masked"""
        def mask(value: Optional[str]) -> str:
            return "****" if value else "(not set)"

        return {
            "Ledger host": self.ledger.host,
            "Ledger port": str(self.ledger.port),
            "Ledger TLS": str(self.ledger.use_tls),
            "Ledger token": mask(self.ledger.token),
            "Ledger user": self.ledger.user_id,
            "Party": self.ledger.party,
            "Output path": self.output.output_path,
            "Offset file": self.output.cursor_path,
            "Telegram token": mask(self.telegram.bot_token),
            "Telegram chat": self.telegram.chat_id or "(not set)",
            "Log level": self.logging.level,
            "Log file": self.logging.log_file or "(stderr only)",
        }
