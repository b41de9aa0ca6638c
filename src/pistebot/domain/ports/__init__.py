from .ledger_client_port import (
    ILedgerClient,
    LedgerError,
    LedgerConnectionError,
    LedgerStreamError,
    CommandSubmissionError,
)
from .notification_port import INotificationSink
from .settlement_sink_port import ISettlementSink
from .offset_store_port import IOffsetStore

__all__ = [
    "ILedgerClient",
    "LedgerError",
    "LedgerConnectionError",
    "LedgerStreamError",
    "CommandSubmissionError",
    "INotificationSink",
    "ISettlementSink",
    "IOffsetStore",
]
