"""
Offset Stores

Durable cursor implementations for the transaction stream.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional

from pistebot.domain.ports.offset_store_port import IOffsetStore

logger = logging.getLogger(__name__)


class FileOffsetStore(IOffsetStore):
    """
    Keeps the last processed offset in a one-line text file.

    Writes go to a temporary file that replaces the cursor file, so a crash
    never leaves a truncated offset behind.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        offset = self.path.read_text(encoding="utf-8").strip()
        return offset or None

    def save(self, offset: str) -> None:
        """
        Record ``offset``; a failed write is logged and the previous cursor kept

        Args:
            offset: Offset of the last fully processed transaction
        """
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(offset, encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.warning(f"Could not save ledger offset {offset} to {self.path}: {e}")
            return
        logger.debug(f"Saved ledger offset {offset} to {self.path}")


class InMemoryOffsetStore(IOffsetStore):
    """Offset store for tests; remembers every saved offset"""

    def __init__(self, offset: Optional[str] = None):
        self._offset = offset
        self.saved: List[str] = []

    def load(self) -> Optional[str]:
        return self._offset

    def save(self, offset: str) -> None:
        self._offset = offset
        self.saved.append(offset)
