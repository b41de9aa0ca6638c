"""
Ledger Client Port (Interface)

Defines the contract for ledger client implementations.
Part of the hexagonal architecture's port layer.
"""

from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from pistebot.domain.commands.ledger_commands import LedgerCommand
from pistebot.domain.events.ledger_events import LedgerTransaction


class ILedgerClient(ABC):
    """
    Ledger client interface.

    Wraps the wire protocol of the ledger; the rest of the bot only sees
    LedgerTransaction values and LedgerCommand values.
    """

    @abstractmethod
    async def connect(self) -> None:
        """
        Establish the connection to the ledger.

        Raises:
            LedgerConnectionError: If the ledger cannot be reached
        """
        pass

    @abstractmethod
    def transactions(self, party: str, begin_offset: Optional[str] = None) -> AsyncIterator[LedgerTransaction]:
        """
        Stream transactions visible to ``party``.

        Args:
            party: Party whose view of the ledger is streamed
            begin_offset: Stream transactions after this offset; None means from ledger begin

        Returns:
            Async iterator of transactions in ledger order. Replays history first,
            then keeps delivering live transactions until closed.

        Raises:
            LedgerStreamError: If the stream fails after it was opened
        """
        pass

    @abstractmethod
    async def submit_and_wait(self, party: str, command: LedgerCommand) -> str:
        """
        Submit one command as ``party`` and wait until the ledger processed it.

        Args:
            party: Acting party
            command: Command to submit

        Returns:
            Update id of the resulting transaction

        Raises:
            CommandSubmissionError: If the ledger rejects the command
        """
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release the connection"""
        pass


class LedgerError(Exception):
    """Base exception for ledger errors"""
    pass


class LedgerConnectionError(LedgerError):
    """Raised when the ledger cannot be reached"""
    pass


class LedgerStreamError(LedgerError):
    """Raised when an open transaction stream fails"""
    pass


class CommandSubmissionError(LedgerError):
    """Raised when a command is rejected or cannot be submitted"""
    pass
