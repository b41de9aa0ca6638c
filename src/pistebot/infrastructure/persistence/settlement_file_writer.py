"""
Settlement File Writer

Writes each settlement message to ``MT202_<uetr>.txt`` in the output directory.
The UETR is the idempotency key and part of the file name; generated UETRs are
unique, so existing files are not checked for.
"""

import logging
from pathlib import Path
from typing import Optional

from pistebot.config.bridge_config import ConfigurationError
from pistebot.domain.ports.settlement_sink_port import ISettlementSink
from pistebot.domain.settlement.mt202 import SettlementMessage, is_valid_uetr

logger = logging.getLogger(__name__)


def ensure_output_dir(path: str) -> Path:
    """
    Create the output directory if needed

    Raises:
        ConfigurationError: If the directory cannot be created
    """
    output_dir = Path(path)
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ConfigurationError(f"Could not create output directory {path}: {e}") from e
    if not output_dir.is_dir():
        raise ConfigurationError(f"Output path is not a directory: {path}")
    return output_dir


class SettlementFileWriter(ISettlementSink):
    """File system implementation of ISettlementSink"""

    def __init__(self, output_dir: str):
        """
        Args:
            output_dir: Existing directory the messages are written to
        """
        self.output_dir = Path(output_dir)

    def write(self, message: SettlementMessage) -> Optional[Path]:
        if not is_valid_uetr(message.uetr):
            logger.warning(
                f"Swift message contains invalid UETR {message.uetr!r}, expected a UUID. "
                f"Not writing the message into a file."
            )
            return None

        output_path = self.output_dir / message.file_name
        try:
            # newline="" keeps the CRLF separators of the FIN text block
            with open(output_path, "w", encoding="utf-8", newline="") as f:
                f.write(message.render())
        except OSError as e:
            logger.warning(f"Could not write the message into {output_path}: {e}")
            return None

        logger.info(f"Settlement message {message.uetr} written to {output_path}")
        return output_path


class InMemorySettlementSink(ISettlementSink):
    """Settlement sink for tests; keeps every accepted message"""

    def __init__(self):
        self.messages: list[SettlementMessage] = []
        self.write_attempts = 0

    def write(self, message: SettlementMessage) -> Optional[Path]:
        self.write_attempts += 1
        if not is_valid_uetr(message.uetr):
            return None
        self.messages.append(message)
        return Path(message.file_name)
