"""
Offset Store Port (Interface)

Durable cursor over the ledger transaction stream.
"""

from abc import ABC, abstractmethod
from typing import Optional


class IOffsetStore(ABC):
    """Stores the offset of the last fully processed transaction"""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the stored offset, None when nothing was processed yet"""
        pass

    @abstractmethod
    def save(self, offset: str) -> None:
        """Record ``offset`` as fully processed; write failures are logged, never raised"""
        pass
