"""
JSON Ledger API client

Ledger client adapter over the ledger's HTTP/websocket JSON API (v2):
- GET  /v2/version                      connection check
- WS   /v2/updates/flats                flat transaction stream for one party
- POST /v2/commands/submit-and-wait     command submission with deduplication
"""

import json
import logging
import uuid
from typing import Any, AsyncIterator, Dict, Optional

import aiohttp
from aiohttp import ClientTimeout

from pistebot.domain.commands.ledger_commands import CreateCommand, ExerciseCommand, LedgerCommand
from pistebot.domain.events.ledger_events import LedgerEvent, LedgerTransaction, TemplateId
from pistebot.domain.ports.ledger_client_port import (
    CommandSubmissionError,
    ILedgerClient,
    LedgerConnectionError,
    LedgerStreamError,
)

logger = logging.getLogger(__name__)

DEDUPLICATION_SECONDS = 10


def updates_request(party: str, begin_offset: Optional[str]) -> Dict[str, Any]:
    """Request body for a party's flat transaction stream"""
    return {
        "beginExclusive": int(begin_offset) if begin_offset else 0,
        "verbose": True,
        "filter": {
            "filtersByParty": {
                party: {
                    "cumulative": [
                        {"identifierFilter": {"WildcardFilter": {"value": {"includeCreatedEventBlob": False}}}}
                    ]
                }
            }
        },
    }


def parse_event(raw: Dict[str, Any]) -> Optional[LedgerEvent]:
    """
    Convert one JSON event to a LedgerEvent

    Returns:
        The event, or None for event kinds a flat stream does not deliver to us
    """
    if "CreatedEvent" in raw:
        created = raw["CreatedEvent"]
        return LedgerEvent.created(
            TemplateId.parse(created["templateId"]),
            created["contractId"],
            created.get("createArgument") or {},
        )
    if "ArchivedEvent" in raw:
        archived = raw["ArchivedEvent"]
        return LedgerEvent.archived(TemplateId.parse(archived["templateId"]), archived["contractId"])
    return None


def parse_update(message: Dict[str, Any]) -> Optional[LedgerTransaction]:
    """
    Convert one stream message to a LedgerTransaction

    Args:
        message: Decoded websocket message

    Returns:
        The transaction, or None for checkpoints and other non-transaction updates

    Raises:
        LedgerStreamError: If the message is an error report
    """
    if "code" in message and "update" not in message:
        raise LedgerStreamError(f"Ledger reported {message.get('code')}: {message.get('cause', '')}")

    update = message.get("update") or {}
    transaction = (update.get("Transaction") or {}).get("value")
    if transaction is None:
        return None

    events = [parse_event(raw) for raw in transaction.get("events", [])]
    return LedgerTransaction(
        transaction_id=transaction["updateId"],
        offset=str(transaction["offset"]),
        effective_at=transaction.get("effectiveAt"),
        events=tuple(event for event in events if event is not None),
    )


def command_body(party: str, command: LedgerCommand, user_id: str, command_id: str) -> Dict[str, Any]:
    """Request body for submit-and-wait"""
    if isinstance(command, CreateCommand):
        wire_command = {
            "CreateCommand": {
                "templateId": str(command.template_id),
                "createArguments": command.arguments,
            }
        }
    elif isinstance(command, ExerciseCommand):
        wire_command = {
            "ExerciseCommand": {
                "templateId": str(command.template_id),
                "contractId": command.contract_id,
                "choice": command.choice,
                "choiceArgument": command.argument,
            }
        }
    else:
        raise CommandSubmissionError(f"Unsupported command: {type(command).__name__}")

    return {
        "commands": [wire_command],
        "commandId": command_id,
        "userId": user_id,
        "actAs": [party],
        "readAs": [],
        "deduplicationPeriod": {
            "DeduplicationDuration": {"value": {"seconds": DEDUPLICATION_SECONDS, "nanos": 0}}
        },
    }


class JsonApiLedgerClient(ILedgerClient):
    """JSON API implementation of ILedgerClient"""

    def __init__(self,
                 host: str,
                 port: int,
                 token: Optional[str] = None,
                 user_id: str = "pistebot",
                 use_tls: bool = False,
                 request_timeout: float = 30.0):
        """
        Initialize the client

        Args:
            host: JSON API host
            port: JSON API port
            token: Bearer token, sent when set
            user_id: Ledger user on whose behalf commands are submitted
            use_tls: Use https/wss
            request_timeout: Timeout in seconds for plain HTTP requests
        """
        self.user_id = user_id
        self.base_url = f"{'https' if use_tls else 'http'}://{host}:{port}"
        self.ws_url = f"{'wss' if use_tls else 'ws'}://{host}:{port}"
        self._headers = {"Authorization": f"Bearer {token}"} if token else {}
        self._request_timeout = ClientTimeout(total=request_timeout)
        self.session: Optional[aiohttp.ClientSession] = None

    async def connect(self) -> None:
        if self.session is None or self.session.closed:
            # No total timeout: the transaction stream is long lived
            self.session = aiohttp.ClientSession(
                headers=self._headers,
                timeout=ClientTimeout(total=None, connect=10),
            )
        try:
            async with self.session.get(f"{self.base_url}/v2/version", timeout=self._request_timeout) as response:
                response.raise_for_status()
                version = await response.json()
        except (aiohttp.ClientError, TimeoutError) as e:
            raise LedgerConnectionError(f"Cannot reach ledger at {self.base_url}: {e}") from e
        logger.info(f"Connected to ledger JSON API {version.get('version', 'unknown')} at {self.base_url}")

    def transactions(self, party: str, begin_offset: Optional[str] = None) -> AsyncIterator[LedgerTransaction]:
        if self.session is None:
            raise LedgerConnectionError("Not connected")
        return self._stream(party, begin_offset)

    async def _stream(self, party: str, begin_offset: Optional[str]) -> AsyncIterator[LedgerTransaction]:
        url = f"{self.ws_url}/v2/updates/flats"
        async with self.session.ws_connect(url, protocols=("daml.ws.auth",), heartbeat=30) as ws:
            await ws.send_json(updates_request(party, begin_offset))
            async for msg in ws:
                if msg.type == aiohttp.WSMsgType.TEXT:
                    transaction = parse_update(json.loads(msg.data))
                    if transaction is not None:
                        yield transaction
                elif msg.type == aiohttp.WSMsgType.ERROR:
                    raise LedgerStreamError(f"Transaction stream error: {ws.exception()}")
            if ws.close_code not in (None, aiohttp.WSCloseCode.OK):
                raise LedgerStreamError(f"Transaction stream closed with code {ws.close_code}")

    async def submit_and_wait(self, party: str, command: LedgerCommand) -> str:
        if self.session is None:
            raise CommandSubmissionError("Not connected")

        command_id = str(uuid.uuid4())
        body = command_body(party, command, self.user_id, command_id)
        try:
            async with self.session.post(
                f"{self.base_url}/v2/commands/submit-and-wait",
                json=body,
                timeout=self._request_timeout,
            ) as response:
                result = await response.json(content_type=None)
                if response.status != 200:
                    raise CommandSubmissionError(
                        f"Command {command_id} rejected ({response.status}): {result}"
                    )
        except (aiohttp.ClientError, TimeoutError) as e:
            raise CommandSubmissionError(f"Command {command_id} could not be submitted: {e}") from e

        logger.info(f"Command {command_id} processed as update {result.get('updateId')}")
        return result.get("updateId", "")

    async def close(self) -> None:
        if self.session and not self.session.closed:
            await self.session.close()
        self.session = None
        logger.info("Ledger JSON API session closed")
