"""
Tests for EventDispatcher routing, notification texts and payment handling.
"""

import logging

import pytest

from pistebot.application.dispatch.event_dispatcher import EventDecodeError, EventDispatcher
from pistebot.domain.contracts import DCN_MODULE, CouponEvent, PaymentInstruction
from pistebot.domain.events import LedgerEvent, TemplateId
from pistebot.domain.settlement import SettlementCodec
from pistebot.infrastructure.notifications import RecordingNotifier
from pistebot.infrastructure.persistence import InMemorySettlementSink

UETR = "b6e5a2c4-3f1d-4a8e-9c2b-7d1e0f4a5b6c"


class ExplodingSink(InMemorySettlementSink):
    def write(self, message):
        raise RuntimeError("disk on fire")


class OrderTrackingSink(InMemorySettlementSink):
    """Records how many notifications were sent when a message was written"""

    def __init__(self, notifier):
        super().__init__()
        self.notifier = notifier
        self.notifications_before_write = []

    def write(self, message):
        self.notifications_before_write.append(len(self.notifier.messages))
        return super().write(message)


class TestEventDispatcher:
    """Tests for EventDispatcher"""

    def setup_method(self):
        self.notifier = RecordingNotifier()
        self.sink = InMemorySettlementSink()
        self.dispatcher = EventDispatcher(
            self.notifier,
            self.sink,
            SettlementCodec(uetr_factory=lambda: UETR),
        )

    @pytest.mark.asyncio
    async def test_coupon_event_sends_notification(self, coupon_event):
        # Act
        await self.dispatcher.accept(coupon_event)

        # Assert
        assert self.notifier.messages == [
            "Coupon event occurred on trade tradeId between issuer and owner"
        ]
        assert self.sink.write_attempts == 0

    @pytest.mark.asyncio
    async def test_knock_out_event_sends_notification(self, knock_out_event):
        await self.dispatcher.accept(knock_out_event)

        assert self.notifier.messages == [
            "DCN tradeId has knocked out, reason: Some reason for knock out"
        ]

    @pytest.mark.asyncio
    async def test_knock_out_without_reason_reports_unknown(self, knock_out_payload):
        payload = knock_out_payload()
        del payload["knockOutReason"]
        event = LedgerEvent.created(TemplateId.parse(f"pkg:{DCN_MODULE}:KnockOutEvent"), "cid-9", payload)

        await self.dispatcher.accept(event)

        assert self.notifier.messages == ["DCN tradeId has knocked out, reason: unknown"]

    @pytest.mark.asyncio
    async def test_payment_instruction_writes_message_and_notifies(self, payment_event):
        # Act
        await self.dispatcher.accept(payment_event)

        # Assert
        assert len(self.sink.messages) == 1
        message = self.sink.messages[0]
        assert message.uetr == UETR
        assert message.sender == "payerBicAXXX"
        assert self.notifier.messages == [
            "SWIFT transfer initiated from payerBicAXXX to beneficiary payeeBicXXXX "
            f"for 10 USD on 191118 (ref=txRefCode, id={UETR})"
        ]

    @pytest.mark.asyncio
    async def test_payment_is_persisted_before_notification(self, payment_event):
        # Arrange
        sink = OrderTrackingSink(self.notifier)
        dispatcher = EventDispatcher(self.notifier, sink)

        # Act
        await dispatcher.accept(payment_event)

        # Assert
        assert sink.notifications_before_write == [0]
        assert len(self.notifier.messages) == 1
        assert sink.messages[0].uetr in self.notifier.messages[0]

    @pytest.mark.asyncio
    async def test_rejected_uetr_still_notifies(self, payment_event):
        dispatcher = EventDispatcher(self.notifier, self.sink, SettlementCodec(uetr_factory=lambda: "bad"))

        await dispatcher.accept(payment_event)

        assert self.sink.write_attempts == 1
        assert self.sink.messages == []
        assert len(self.notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_archived_events_are_ignored(self):
        event = LedgerEvent.archived(CouponEvent.TEMPLATE_ID, "cid-1")

        await self.dispatcher.accept(event)

        assert self.notifier.messages == []

    @pytest.mark.asyncio
    async def test_unknown_templates_are_ignored(self, coupon_payload):
        event = LedgerEvent.created(TemplateId.parse(f"{DCN_MODULE}:FixingEvent"), "cid-1", coupon_payload())

        await self.dispatcher.accept(event)

        assert self.notifier.messages == []
        assert self.sink.write_attempts == 0

    @pytest.mark.asyncio
    async def test_same_entity_in_other_module_is_ignored(self, coupon_payload):
        event = LedgerEvent.created(TemplateId.parse("Other.Module:CouponEvent"), "cid-1", coupon_payload())

        await self.dispatcher.accept(event)

        assert self.notifier.messages == []

    @pytest.mark.asyncio
    async def test_malformed_payload_raises_decode_error(self, caplog):
        event = LedgerEvent.created(PaymentInstruction.TEMPLATE_ID, "cid-bad", {"amount": "lots"})

        with caplog.at_level(logging.ERROR):
            with pytest.raises(EventDecodeError, match="cid-bad"):
                await self.dispatcher.accept(event)

        assert "cid-bad" in caplog.text
        assert self.notifier.messages == []
        assert self.sink.write_attempts == 0

    @pytest.mark.asyncio
    async def test_handler_failure_is_logged_and_raised(self, payment_event, caplog):
        dispatcher = EventDispatcher(self.notifier, ExplodingSink())

        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError, match="disk on fire"):
                await dispatcher.accept(payment_event)

        assert "Error processing event cid-1" in caplog.text

    @pytest.mark.asyncio
    async def test_failing_notifier_does_not_interrupt_processing(self, coupon_event, payment_event):
        self.notifier.configure(should_succeed=False)

        await self.dispatcher.accept(coupon_event)
        await self.dispatcher.accept(payment_event)

        assert len(self.notifier.failed) == 2
        assert len(self.sink.messages) == 1
