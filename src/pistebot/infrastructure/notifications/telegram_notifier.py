"""
Telegram Notifier

Delivers notifications to one Telegram chat through the Bot API ``sendMessage``
method. Delivery is best effort: errors and timeouts are logged, never raised.
"""

import logging
from typing import Optional

import aiohttp
from aiohttp import ClientTimeout

from pistebot.domain.ports.notification_port import INotificationSink

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"
STARTUP_MESSAGE = "Bot started"


class TelegramNotifier(INotificationSink):
    """Telegram Bot API implementation of INotificationSink"""

    def __init__(self,
                 bot_token: str,
                 chat_id: str,
                 api_url: str = TELEGRAM_API_URL,
                 timeout: float = 10.0):
        """
        Initialize the notifier

        Args:
            bot_token: Bot token issued by BotFather
            chat_id: Chat the notifications are posted to
            api_url: Bot API base URL
            timeout: Per-message timeout in seconds, bounds a hung channel
        """
        if not bot_token or not chat_id:
            raise ValueError("Telegram bot token and chat id are required")
        self.chat_id = chat_id
        self._endpoint = f"{api_url}/bot{bot_token}/sendMessage"
        self._timeout = ClientTimeout(total=timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def start(self) -> bool:
        """
        Open the HTTP session and announce the bot in the chat

        Returns:
            True if the startup message was delivered
        """
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(timeout=self._timeout)
        return await self._post(STARTUP_MESSAGE)

    async def send(self, text: str) -> None:
        logger.info(f"Sending Telegram message: {text}")
        await self._post(text)

    async def _post(self, text: str) -> bool:
        if self.session is None:
            logger.error(f"Telegram notifier not started, message dropped: {text}")
            return False
        try:
            async with self.session.post(
                self._endpoint,
                json={"chat_id": self.chat_id, "text": text},
            ) as response:
                result = await response.json(content_type=None)
        except (aiohttp.ClientError, TimeoutError, ValueError) as e:
            logger.error(f"Error sending Telegram message: {e}")
            return False

        if not isinstance(result, dict) or not result.get("ok", False):
            logger.error(f"Telegram rejected message: {result}")
            return False
        return True

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
