"""
Settlement Sink Port (Interface)

Durable output of generated settlement messages.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from pistebot.domain.settlement.mt202 import SettlementMessage


class ISettlementSink(ABC):
    """Settlement message sink interface"""

    @abstractmethod
    def write(self, message: SettlementMessage) -> Optional[Path]:
        """
        Persist a settlement message once, keyed by its UETR.

        Args:
            message: Message to persist

        Returns:
            Location of the stored message, or None when it was discarded.
            Persistence failures are logged, never raised.
        """
        pass
