from .ledger_events import (
    EventKind,
    TemplateId,
    LedgerEvent,
    LedgerTransaction,
)

__all__ = [
    "EventKind",
    "TemplateId",
    "LedgerEvent",
    "LedgerTransaction",
]
