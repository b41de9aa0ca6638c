"""
Notification Port (Interface)

Best-effort delivery of operator notifications.
"""

from abc import ABC, abstractmethod


class INotificationSink(ABC):
    """
    Notification sink interface.

    Implementations must never raise from ``send``: delivery problems are
    logged and swallowed so event processing is never interrupted.
    """

    @abstractmethod
    async def send(self, text: str) -> None:
        """
        Deliver a notification text.

        Args:
            text: Human readable notification
        """
        pass

    async def close(self) -> None:
        """Release channel resources, if any"""
        return None
