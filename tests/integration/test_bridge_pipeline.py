"""
End-to-end tests: in-memory ledger -> connector -> dispatcher -> files and notifications.
"""

import asyncio
import logging
import shutil

import pytest

from pistebot.application.dispatch.event_dispatcher import EventDecodeError
from pistebot.bootstrap import build_application
from pistebot.config import BridgeConfig, LedgerConfig, LoggingConfig, OutputConfig, TelegramConfig
from pistebot.domain.commands import CreateCommand, ExerciseCommand
from pistebot.domain.contracts import CouponEvent, KnockOutEvent, PaymentInstruction
from pistebot.domain.events import TemplateId
from pistebot.domain.settlement import is_valid_uetr
from pistebot.infrastructure.ledger import InMemoryLedgerClient
from pistebot.infrastructure.notifications import RecordingNotifier

pytestmark = pytest.mark.integration

PARTY = "Intermediary"


def make_config(tmp_path):
    return BridgeConfig(
        ledger=LedgerConfig(party=PARTY),
        telegram=TelegramConfig(),
        output=OutputConfig(output_path=str(tmp_path / "out")),
        logging=LoggingConfig(),
    )


async def submit_market_activity(client, coupon_payload, knock_out_payload, payment_payload):
    await client.submit_and_wait("Issuer", CreateCommand(
        template_id=CouponEvent.TEMPLATE_ID, arguments=coupon_payload(trade_id="T-1")
    ))
    await client.submit_and_wait("Issuer", CreateCommand(
        template_id=TemplateId.parse("Other.Module:Unrelated"), arguments={"x": 1}
    ))
    await client.submit_and_wait("Issuer", CreateCommand(
        template_id=PaymentInstruction.TEMPLATE_ID, arguments=payment_payload(reference="PAY-1")
    ))
    await client.submit_and_wait("Issuer", CreateCommand(
        template_id=KnockOutEvent.TEMPLATE_ID, arguments=knock_out_payload(trade_id="T-1", reason="barrier hit")
    ))


class TestBridgePipeline:
    """Tests for the assembled bot"""

    @pytest.mark.asyncio
    async def test_ledger_activity_produces_files_and_notifications(
            self, tmp_path, coupon_payload, knock_out_payload, payment_payload):
        # Arrange
        client = InMemoryLedgerClient(default_observers=[PARTY])
        await submit_market_activity(client, coupon_payload, knock_out_payload, payment_payload)
        notifier = RecordingNotifier()
        app = await build_application(make_config(tmp_path), client=client, notifier=notifier)

        # Act
        await app.run()

        # Assert
        files = sorted((tmp_path / "out").glob("MT202_*.txt"))
        assert len(files) == 1
        uetr = files[0].name[len("MT202_"):-len(".txt")]
        assert is_valid_uetr(uetr)
        assert ":20:PAY-1\r\n" in files[0].read_text(encoding="utf-8", newline="")

        assert notifier.messages == [
            "Coupon event occurred on trade T-1 between issuer and owner",
            "SWIFT transfer initiated from payerBicAXXX to beneficiary payeeBicXXXX "
            f"for 10 USD on 191118 (ref=PAY-1, id={uetr})",
            "DCN T-1 has knocked out, reason: barrier hit",
        ]
        assert (tmp_path / "out" / ".ledger_offset").read_text() == "4"
        assert client.close_calls == 1

    @pytest.mark.asyncio
    async def test_restart_resumes_after_stored_offset(
            self, tmp_path, coupon_payload, knock_out_payload, payment_payload):
        # Arrange
        config = make_config(tmp_path)
        first_client = InMemoryLedgerClient(default_observers=[PARTY])
        await submit_market_activity(first_client, coupon_payload, knock_out_payload, payment_payload)
        await (await build_application(config, client=first_client, notifier=RecordingNotifier())).run()

        second_client = InMemoryLedgerClient(default_observers=[PARTY])
        await submit_market_activity(second_client, coupon_payload, knock_out_payload, payment_payload)
        await second_client.submit_and_wait("Issuer", CreateCommand(
            template_id=CouponEvent.TEMPLATE_ID, arguments=coupon_payload(trade_id="T-2")
        ))
        notifier = RecordingNotifier()

        # Act
        await (await build_application(config, client=second_client, notifier=notifier)).run()

        # Assert
        assert notifier.messages == ["Coupon event occurred on trade T-2 between issuer and owner"]

    @pytest.mark.asyncio
    async def test_replay_ignores_stored_offset(self, tmp_path, coupon_payload):
        config = make_config(tmp_path)
        (tmp_path / "out").mkdir()
        (tmp_path / "out" / ".ledger_offset").write_text("99")
        client = InMemoryLedgerClient(default_observers=[PARTY])
        await client.submit_and_wait("Issuer", CreateCommand(
            template_id=CouponEvent.TEMPLATE_ID, arguments=coupon_payload()
        ))
        notifier = RecordingNotifier()

        await (await build_application(config, client=client, notifier=notifier, replay=True)).run()

        assert len(notifier.messages) == 1

    @pytest.mark.asyncio
    async def test_archives_are_not_notified(self, tmp_path, coupon_payload):
        client = InMemoryLedgerClient(default_observers=[PARTY])
        await client.submit_and_wait("Issuer", ExerciseCommand(
            template_id=CouponEvent.TEMPLATE_ID, contract_id="cid-1", choice="Archive"
        ))
        notifier = RecordingNotifier()

        await (await build_application(make_config(tmp_path), client=client, notifier=notifier)).run()

        assert notifier.messages == []

    @pytest.mark.asyncio
    async def test_malformed_event_stops_the_bot(self, tmp_path):
        # Arrange
        client = InMemoryLedgerClient(default_observers=[PARTY])
        await client.submit_and_wait("Issuer", CreateCommand(
            template_id=PaymentInstruction.TEMPLATE_ID, arguments={"amount": "n/a"}
        ))
        app = await build_application(make_config(tmp_path), client=client, notifier=RecordingNotifier())

        # Act / Assert
        with pytest.raises(EventDecodeError):
            await app.run()
        assert client.close_calls == 1
        assert not (tmp_path / "out" / ".ledger_offset").exists()

    @pytest.mark.asyncio
    async def test_shutdown_request_ends_live_subscription(self, tmp_path, coupon_payload):
        # Arrange
        client = InMemoryLedgerClient(keep_open=True, default_observers=[PARTY])
        notifier = RecordingNotifier()
        app = await build_application(make_config(tmp_path), client=client, notifier=notifier)
        run_task = asyncio.create_task(app.run())
        await client.submit_and_wait("Issuer", CreateCommand(
            template_id=CouponEvent.TEMPLATE_ID, arguments=coupon_payload()
        ))
        for _ in range(100):
            if notifier.messages:
                break
            await asyncio.sleep(0.01)

        # Act
        app.request_shutdown()
        app.request_shutdown()
        await asyncio.wait_for(run_task, timeout=1)

        # Assert
        assert len(notifier.messages) == 1
        assert client.close_calls == 1
        assert client.streams_released == 1

    @pytest.mark.asyncio
    async def test_output_lost_after_startup_keeps_the_bot_running(
            self, tmp_path, coupon_payload, payment_payload, caplog):
        # Arrange
        client = InMemoryLedgerClient(default_observers=[PARTY])
        await client.submit_and_wait("Issuer", CreateCommand(
            template_id=PaymentInstruction.TEMPLATE_ID, arguments=payment_payload(reference="PAY-9")
        ))
        await client.submit_and_wait("Issuer", CreateCommand(
            template_id=CouponEvent.TEMPLATE_ID, arguments=coupon_payload(trade_id="T-9")
        ))
        notifier = RecordingNotifier()
        app = await build_application(make_config(tmp_path), client=client, notifier=notifier)
        output_dir = tmp_path / "out"
        shutil.rmtree(output_dir)
        output_dir.write_text("not a directory any more")

        # Act
        with caplog.at_level(logging.WARNING):
            await app.run()

        # Assert
        assert len(notifier.messages) == 2
        assert "(ref=PAY-9" in notifier.messages[0]
        assert notifier.messages[1] == "Coupon event occurred on trade T-9 between issuer and owner"
        assert "Could not write the message" in caplog.text
        assert "Could not save ledger offset" in caplog.text
        assert client.close_calls == 1
