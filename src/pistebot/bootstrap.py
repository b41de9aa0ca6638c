"""
Bot composition root

Wires configuration, adapters and the dispatcher together and runs the
connect -> subscribe -> shutdown lifecycle.
"""

import asyncio
import logging
import signal
from typing import Optional

from pistebot.application.dispatch.event_dispatcher import EventDecodeError, EventDispatcher
from pistebot.config.bridge_config import BridgeConfig, TelegramConfig
from pistebot.domain.ports.ledger_client_port import ILedgerClient, LedgerError
from pistebot.domain.ports.notification_port import INotificationSink
from pistebot.infrastructure.ledger.json_api_client import JsonApiLedgerClient
from pistebot.infrastructure.ledger.ledger_connector import LedgerConnector
from pistebot.infrastructure.ledger.offset_store import FileOffsetStore
from pistebot.infrastructure.notifications.logging_notifier import LoggingNotifier
from pistebot.infrastructure.notifications.telegram_notifier import TelegramNotifier
from pistebot.infrastructure.persistence.settlement_file_writer import (
    SettlementFileWriter,
    ensure_output_dir,
)

logger = logging.getLogger(__name__)


async def build_notifier(config: TelegramConfig) -> INotificationSink:
    """
    Telegram when configured and reachable, log output otherwise

    Args:
        config: Telegram settings

    Returns:
        A started notifier
    """
    if not config.enabled:
        logger.warning("Telegram is not configured. Notifications will be printed in the logs.")
        return LoggingNotifier()

    notifier = TelegramNotifier(config.bot_token, config.chat_id)
    if await notifier.start():
        return notifier

    logger.warning(
        "Error setting up the telegram bot. "
        "Telegram messages will be printed in the logs instead of sending them to telegram."
    )
    await notifier.close()
    return LoggingNotifier()


class BridgeApplication:
    """
    Running bot instance

    ``run`` blocks until the subscription ends, fails or shutdown is requested.
    Resources are released on every exit path.
    """

    def __init__(self,
                 connector: LedgerConnector,
                 dispatcher: EventDispatcher,
                 notifier: INotificationSink,
                 party: str):
        self.connector = connector
        self.dispatcher = dispatcher
        self.notifier = notifier
        self.party = party
        self._shutdown_task: Optional[asyncio.Task] = None

    async def run(self) -> None:
        try:
            if not await self.connector.connect():
                return
            await self.connector.subscribe(self.party, self.dispatcher.accept)
        finally:
            await self.connector.stop()
            await self.notifier.close()

    def request_shutdown(self) -> None:
        """Signal-handler friendly: schedules ``connector.stop`` once"""
        if self._shutdown_task is None:
            logger.info("Shutdown requested")
            self._shutdown_task = asyncio.ensure_future(self.connector.stop())


async def build_application(config: BridgeConfig,
                            client: Optional[ILedgerClient] = None,
                            notifier: Optional[INotificationSink] = None,
                            replay: bool = False) -> BridgeApplication:
    """
    Assemble the bot from configuration

    Args:
        config: Validated configuration
        client: Ledger client override (defaults to the JSON API client)
        notifier: Notifier override (defaults to Telegram or log output)
        replay: Ignore the stored cursor and replay from ledger begin

    Raises:
        ConfigurationError: If the output directory cannot be created
    """
    output_dir = ensure_output_dir(config.output.output_path)

    if notifier is None:
        notifier = await build_notifier(config.telegram)

    if client is None:
        client = JsonApiLedgerClient(
            host=config.ledger.host,
            port=config.ledger.port,
            token=config.ledger.token,
            user_id=config.ledger.user_id,
            use_tls=config.ledger.use_tls,
        )

    offset_store = None if replay else FileOffsetStore(config.output.cursor_path)
    dispatcher = EventDispatcher(notifier, SettlementFileWriter(str(output_dir)))
    connector = LedgerConnector(client, offset_store)
    return BridgeApplication(connector, dispatcher, notifier, config.ledger.party)


async def serve(config: BridgeConfig, replay: bool = False) -> int:
    """
    Run the bot until stopped

    Returns:
        Process exit code: 0 after a clean shutdown, 1 after a fatal error
    """
    app = await build_application(config, replay=replay)

    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, app.request_shutdown)
        except NotImplementedError:
            # Windows event loops have no signal handler support
            pass

    logger.info(f"Listening to ledger events of {config.ledger.party}. Press Ctrl+C to stop.")
    try:
        await app.run()
    except EventDecodeError as e:
        logger.critical(f"Stopping on undecodable ledger event: {e}")
        return 1
    except LedgerError as e:
        logger.critical(f"Stopping on ledger failure: {e}")
        return 1
    logger.info("Bot stopped")
    return 0
