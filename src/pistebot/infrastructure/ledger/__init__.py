from .ledger_connector import LedgerConnector, LedgerConnectorError
from .in_memory_ledger import InMemoryLedgerClient
from .json_api_client import JsonApiLedgerClient
from .offset_store import FileOffsetStore, InMemoryOffsetStore

__all__ = [
    "LedgerConnector",
    "LedgerConnectorError",
    "InMemoryLedgerClient",
    "JsonApiLedgerClient",
    "FileOffsetStore",
    "InMemoryOffsetStore",
]
