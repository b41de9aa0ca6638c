"""
In-Memory Ledger

Ledger client adapter backed by an in-process transaction log, for tests and
local runs without a ledger.
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import AsyncIterator, Dict, FrozenSet, Iterable, List, Optional, Tuple

from pistebot.domain.commands.ledger_commands import CreateCommand, ExerciseCommand, LedgerCommand
from pistebot.domain.events.ledger_events import LedgerEvent, LedgerTransaction, TemplateId
from pistebot.domain.ports.ledger_client_port import (
    CommandSubmissionError,
    ILedgerClient,
    LedgerConnectionError,
)

logger = logging.getLogger(__name__)


class InMemoryLedgerClient(ILedgerClient):
    """
    In-memory ledger for testing and local runs

    Keeps an append-only, party-scoped transaction log and streams it like the
    real ledger: history first, then live transactions while ``keep_open`` is set.
    Failure behaviour is scriptable for connector tests.
    """

    def __init__(self,
                 connect_failures: int = 0,
                 keep_open: bool = False,
                 stream_error: Optional[Exception] = None,
                 close_error: Optional[Exception] = None,
                 default_observers: Iterable[str] = ()):
        """
        Initialize the in-memory ledger

        Args:
            connect_failures: Number of connect calls that fail before one succeeds
            keep_open: If True, streams wait for new transactions instead of ending
            stream_error: Raised by streams once the existing log was delivered
            close_error: Raised by close(), for shutdown tests
            default_observers: Parties that see every submitted command's effects
        """
        self._connect_failures = connect_failures
        self._keep_open = keep_open
        self._stream_error = stream_error
        self._close_error = close_error
        self._default_observers = frozenset(default_observers)

        self._log: List[Tuple[FrozenSet[str], LedgerTransaction]] = []
        self._changed = asyncio.Event()
        self._closed = False

        # Counters for test assertions
        self.connect_calls = 0
        self.close_calls = 0
        self.streams_opened = 0
        self.streams_released = 0
        self.submitted: List[Tuple[str, LedgerCommand, str]] = []

    @property
    def connected(self) -> bool:
        return self.connect_calls > self._connect_failures and not self._closed

    async def connect(self) -> None:
        self.connect_calls += 1
        if self.connect_calls <= self._connect_failures:
            raise LedgerConnectionError(f"Ledger unavailable (attempt {self.connect_calls})")
        logger.info("In-memory ledger connected")

    def publish(self, events: Iterable[LedgerEvent], visible_to: Iterable[str]) -> LedgerTransaction:
        """
        Append a transaction to the log

        Args:
            events: Events of the transaction, in order
            visible_to: Parties whose streams include the transaction

        Returns:
            The committed transaction
        """
        transaction = LedgerTransaction(
            transaction_id=f"tx-{uuid.uuid4().hex[:12]}",
            offset=str(len(self._log) + 1),
            effective_at=datetime.now(timezone.utc),
            events=tuple(events),
        )
        self._log.append((frozenset(visible_to), transaction))
        self._changed.set()
        return transaction

    def publish_created(self, template_id: TemplateId, payload: Dict, visible_to: Iterable[str]) -> str:
        """Commit a single create and return the new contract id"""
        contract_id = f"cid-{uuid.uuid4().hex[:12]}"
        self.publish([LedgerEvent.created(template_id, contract_id, payload)], visible_to)
        return contract_id

    def transactions(self, party: str, begin_offset: Optional[str] = None) -> AsyncIterator[LedgerTransaction]:
        if self._closed:
            raise LedgerConnectionError("Ledger client is closed")
        return self._stream(party, int(begin_offset) if begin_offset else 0)

    async def _stream(self, party: str, after: int) -> AsyncIterator[LedgerTransaction]:
        self.streams_opened += 1
        position = 0
        try:
            while True:
                while position < len(self._log):
                    visible_to, transaction = self._log[position]
                    position += 1
                    if party in visible_to and int(transaction.offset) > after:
                        yield transaction

                if self._stream_error is not None:
                    raise self._stream_error
                if not self._keep_open or self._closed:
                    return

                self._changed.clear()
                await self._changed.wait()
        finally:
            self.streams_released += 1

    async def submit_and_wait(self, party: str, command: LedgerCommand) -> str:
        if self._closed:
            raise CommandSubmissionError("Ledger client is closed")

        command_id = str(uuid.uuid4())
        visible_to = {party} | self._default_observers
        if isinstance(command, CreateCommand):
            contract_id = f"cid-{uuid.uuid4().hex[:12]}"
            event = LedgerEvent.created(command.template_id, contract_id, command.arguments)
        elif isinstance(command, ExerciseCommand):
            event = LedgerEvent.archived(command.template_id, command.contract_id)
        else:
            raise CommandSubmissionError(f"Unsupported command: {type(command).__name__}")

        transaction = self.publish([event], visible_to)
        self.submitted.append((party, command, command_id))
        logger.info(f"Command {command_id} submitted by {party} as {transaction.transaction_id}")
        return transaction.transaction_id

    async def close(self) -> None:
        self.close_calls += 1
        self._closed = True
        self._changed.set()
        if self._close_error is not None:
            raise self._close_error
