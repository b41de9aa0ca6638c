"""Notification fallback used when no chat channel is configured"""

import logging
from typing import List

from pistebot.domain.ports.notification_port import INotificationSink

logger = logging.getLogger(__name__)


class LoggingNotifier(INotificationSink):
    """Writes notifications to the log instead of delivering them"""

    async def send(self, text: str) -> None:
        logger.info(f"Notification: {text}")


class RecordingNotifier(INotificationSink):
    """
    Notifier that records messages in memory for test assertions.

    ``configure(should_succeed=False)`` simulates a failing channel: the
    message is dropped and the failure logged, as a real channel would.
    """

    def __init__(self):
        self.messages: List[str] = []
        self.failed: List[str] = []
        self.should_succeed = True

    def configure(self, should_succeed: bool = True) -> None:
        self.should_succeed = should_succeed

    async def send(self, text: str) -> None:
        if not self.should_succeed:
            self.failed.append(text)
            logger.error(f"Notification delivery failed: {text}")
            return
        self.messages.append(text)

    def reset(self) -> None:
        self.messages.clear()
        self.failed.clear()
        self.should_succeed = True
