"""
Ledger event dispatcher

Routes each created contract event to the handler for its template:
- CouponEvent and KnockOutEvent produce an operator notification
- PaymentInstructions produce an MT202 settlement message, persist it and notify

Archived events and templates the bot does not know are skipped silently.
"""
import logging
from typing import Awaitable, Callable, Dict, Optional, Tuple, Type

from pydantic import ValidationError

from pistebot.domain.contracts.structured_products import (
    CouponEvent,
    KnockOutEvent,
    LedgerRecord,
    PaymentInstruction,
)
from pistebot.domain.events.ledger_events import LedgerEvent
from pistebot.domain.ports.notification_port import INotificationSink
from pistebot.domain.ports.settlement_sink_port import ISettlementSink
from pistebot.domain.settlement.codec import SettlementCodec
from pistebot.domain.settlement.mt202 import SettlementMessage, format_plain_amount

logger = logging.getLogger(__name__)

UNKNOWN_REASON = "unknown"


class EventDecodeError(Exception):
    """Raised when the payload of a known template cannot be decoded"""
    pass


def coupon_notification(event: CouponEvent) -> str:
    return f"Coupon event occurred on trade {event.trade_id} between {event.issuer} and {event.owner}"


def knock_out_notification(event: KnockOutEvent) -> str:
    reason = event.knock_out_reason if event.knock_out_reason is not None else UNKNOWN_REASON
    return f"DCN {event.trade_id} has knocked out, reason: {reason}"


def payment_notification(message: SettlementMessage) -> str:
    return (
        f"SWIFT transfer initiated from {message.sender} to beneficiary {message.receiver} "
        f"for {format_plain_amount(message.amount)} {message.currency} on {message.value_date_text} "
        f"(ref={message.transaction_reference}, id={message.uetr})"
    )


Handler = Callable[[LedgerRecord], Awaitable[None]]


class EventDispatcher:
    """
    Single entry point for ledger events.

    Processes one event at a time; ``accept`` returns only after the
    notification and persistence for that event were attempted.
    """

    def __init__(self,
                 notifier: INotificationSink,
                 settlement_sink: ISettlementSink,
                 codec: Optional[SettlementCodec] = None):
        """
        Initialize the dispatcher

        Args:
            notifier: Channel for operator notifications
            settlement_sink: Durable output for settlement messages
            codec: Settlement message encoder (default: uuid4 UETRs)
        """
        self._notifier = notifier
        self._settlement_sink = settlement_sink
        self._codec = codec or SettlementCodec()
        self._routes: Dict[str, Tuple[Type[LedgerRecord], Handler]] = {
            CouponEvent.TEMPLATE_ID.qualified_name: (CouponEvent, self.process_coupon_event),
            KnockOutEvent.TEMPLATE_ID.qualified_name: (KnockOutEvent, self.process_knock_out_event),
            PaymentInstruction.TEMPLATE_ID.qualified_name: (PaymentInstruction, self.process_payment_instruction),
        }

    async def accept(self, event: LedgerEvent) -> None:
        """
        Handle one ledger event

        Args:
            event: Event delivered by the subscription

        Raises:
            EventDecodeError: If the payload of a known template is malformed
        """
        logger.debug(f"Accepted event: {event}")
        if not event.is_created:
            return

        route = self._routes.get(event.template_id.qualified_name)
        if route is None:
            logger.debug(f"Ignoring event of template {event.template_id}")
            return

        record_type, handler = route
        record = self._decode(event, record_type)
        try:
            await handler(record)
        except Exception as e:
            logger.error(f"Error processing event {event.contract_id}: {e}")
            raise

    def _decode(self, event: LedgerEvent, record_type: Type[LedgerRecord]) -> LedgerRecord:
        try:
            return record_type.model_validate(event.payload)
        except ValidationError as e:
            logger.error(
                f"Could not decode {event.template_id} payload of contract {event.contract_id}: {e}"
            )
            raise EventDecodeError(
                f"Malformed {event.template_id.entity_name} payload in contract {event.contract_id}"
            ) from e

    async def process_coupon_event(self, event: CouponEvent) -> None:
        logger.debug(f"CouponEvent received: {event}")
        await self._notifier.send(coupon_notification(event))

    async def process_knock_out_event(self, event: KnockOutEvent) -> None:
        logger.debug(f"KnockOutEvent received: {event}")
        await self._notifier.send(knock_out_notification(event))

    async def process_payment_instruction(self, instruction: PaymentInstruction) -> None:
        """
        Encode, persist, then notify

        The notification embeds the UETR so operators can find the written file;
        persistence is therefore attempted first.
        """
        logger.debug(f"PaymentInstruction received: {instruction}")
        message = self._codec.encode(instruction)
        logger.info(f"Sending SWIFT message: {message.render()}")
        self._settlement_sink.write(message)
        await self._notifier.send(payment_notification(message))
