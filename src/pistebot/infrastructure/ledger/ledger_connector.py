"""
Ledger Connector

Owns the connection lifecycle to the ledger:
- connect with a fixed 1 second backoff and no retry limit
- one live subscription for a party, replaying history then following live
- idempotent shutdown that releases the subscription and the connection once
"""

import asyncio
import logging
from typing import Awaitable, Callable, Optional

from pistebot.domain.events.ledger_events import LedgerEvent, LedgerTransaction
from pistebot.domain.ports.ledger_client_port import ILedgerClient, LedgerError, LedgerStreamError
from pistebot.domain.ports.offset_store_port import IOffsetStore

logger = logging.getLogger(__name__)

EventHandler = Callable[[LedgerEvent], Awaitable[None]]


class LedgerConnectorError(LedgerError):
    """Raised on misuse of the connector, e.g. a second subscription"""
    pass


class LedgerConnector:
    """
    Ledger connection and subscription manager.

    Connect failures are retried forever. Failures of an open stream are not
    retried: they surface from ``subscribe`` so that history is never silently
    redelivered.
    """

    def __init__(self,
                 client: ILedgerClient,
                 offset_store: Optional[IOffsetStore] = None,
                 retry_delay: float = 1.0):
        """
        Initialize the connector

        Args:
            client: Ledger client adapter
            offset_store: Durable cursor; without one every subscription starts at ledger begin
            retry_delay: Seconds between connect attempts
        """
        self._client = client
        self._offset_store = offset_store
        self._retry_delay = retry_delay

        self._stop_requested = asyncio.Event()
        self._subscription: Optional[asyncio.Task] = None
        self._connected = False
        self._stopped = False
        self._closed = asyncio.Event()
        self.connect_attempts = 0

    @property
    def is_connected(self) -> bool:
        return self._connected

    async def connect(self) -> bool:
        """
        Connect, retrying on any failure until it succeeds or ``stop`` is called

        Returns:
            True once connected, False if shutdown was requested first
        """
        while not self._stop_requested.is_set():
            self.connect_attempts += 1
            try:
                logger.info(f"Connecting to ledger (attempt {self.connect_attempts})")
                await self._client.connect()
                self._connected = True
                logger.info("Connected to ledger")
                return True
            except Exception as e:
                logger.info(f"Ledger not reachable yet: {e}")
                await self._wait_before_retry()
        logger.info("Shutdown requested before ledger connection was established")
        return False

    async def _wait_before_retry(self) -> None:
        try:
            await asyncio.wait_for(self._stop_requested.wait(), timeout=self._retry_delay)
        except asyncio.TimeoutError:
            pass

    async def subscribe(self, party: str, handler: EventHandler) -> None:
        """
        Feed every event visible to ``party`` to ``handler``, in ledger order

        Blocks while the subscription is live and returns when the stream ends
        or ``stop`` is called.

        Args:
            party: Party whose transactions are streamed
            handler: Coroutine called once per event; the next event is not
                delivered before it returns

        Raises:
            LedgerConnectorError: If already subscribed or not connected
            LedgerStreamError: If the stream fails
            Exception: Whatever ``handler`` raises
        """
        if self._subscription is not None:
            raise LedgerConnectorError("A subscription is already active")
        if not self._connected:
            raise LedgerConnectorError("Not connected to the ledger")
        if self._stop_requested.is_set():
            return

        self._subscription = asyncio.create_task(self._consume(party, handler))
        try:
            await self._subscription
        except asyncio.CancelledError:
            if not self._stop_requested.is_set():
                raise
            logger.info(f"Subscription for {party} cancelled by shutdown")

    async def _consume(self, party: str, handler: EventHandler) -> None:
        begin_offset = self._offset_store.load() if self._offset_store else None
        if begin_offset:
            logger.info(f"Subscribing to transactions of {party} after offset {begin_offset}")
        else:
            logger.info(f"Subscribing to transactions of {party} from ledger begin")

        stream = self._client.transactions(party, begin_offset)
        try:
            while True:
                try:
                    transaction = await anext(stream)
                except StopAsyncIteration:
                    logger.info(f"Transaction stream for {party} ended")
                    return
                except LedgerStreamError:
                    raise
                except Exception as e:
                    raise LedgerStreamError(f"Transaction stream for {party} failed: {e}") from e
                await self._process(transaction, handler)
                if self._stop_requested.is_set():
                    return
        finally:
            await self._release(stream)

    async def _process(self, transaction: LedgerTransaction, handler: EventHandler) -> None:
        for event in transaction.events:
            if self._stop_requested.is_set():
                # Partially processed: keep the previous offset so the transaction is redelivered
                return
            await handler(event)
        if self._offset_store:
            self._offset_store.save(transaction.offset)

    async def _release(self, stream) -> None:
        aclose = getattr(stream, "aclose", None)
        if aclose is None:
            return
        try:
            await aclose()
        except Exception as e:
            logger.warning(f"Error releasing transaction stream: {e}")

    async def stop(self) -> None:
        """
        Cancel the subscription and close the connection

        Safe to call any number of times and from another task than the
        subscriber; later calls return once the first one has finished.
        Errors while closing are logged, never raised.
        """
        self._stop_requested.set()
        if self._stopped:
            await self._closed.wait()
            return
        self._stopped = True

        subscription = self._subscription
        # Called from a handler: the consume loop sees the stop flag after the current event.
        if subscription is not None and subscription is not asyncio.current_task() and not subscription.done():
            subscription.cancel()
            try:
                await subscription
            except asyncio.CancelledError:
                pass
            except Exception as e:
                logger.warning(f"Subscription ended with error during shutdown: {e}")

        try:
            await self._client.close()
            logger.info("Ledger connection closed")
        except Exception as e:
            logger.error(f"Error closing ledger connection: {e}")
        finally:
            self._connected = False
            self._closed.set()
