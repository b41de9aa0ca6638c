"""
Property-based tests for settlement message encoding using Hypothesis.

Properties that must hold for every well-formed payment instruction:
- LT addresses are always 12 characters for 8 and 11 character BICs
- SWIFT amounts parse back to the original amount
- Each encoding gets its own UETR and a file name derived from it
- The value date is the UTC calendar date of the payment date
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

from hypothesis import given, settings, strategies as st

from pistebot.domain.contracts import PaymentInstruction
from pistebot.domain.settlement import (
    SettlementCodec,
    format_swift_amount,
    is_valid_uetr,
    logical_terminal_address,
)

bic8 = st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", min_size=8, max_size=8)
bic11 = st.text(alphabet="ABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789", min_size=11, max_size=11)
bics = st.one_of(bic8, bic11)
amounts = st.decimals(min_value=Decimal("0.01"), max_value=Decimal("1000000000"), places=4)
payment_dates = st.datetimes(
    min_value=datetime(2000, 1, 1),
    max_value=datetime(2099, 12, 31),
    timezones=st.sampled_from([timezone.utc, timezone(timedelta(hours=9)), timezone(timedelta(hours=-7))]),
)


def instruction(payer_bic, payee_bic, amount, payment_date):
    return PaymentInstruction(
        payer_details={"name": "payer", "bic": payer_bic, "iban": "DE89370400440532013000"},
        payee_details={"name": "payee", "bic": payee_bic, "iban": "GB29NWBK60161331926819"},
        transaction_reference="REF",
        amount=amount,
        currency="EUR",
        payment_date=payment_date,
        regulator="regulator",
    )


class TestSettlementProperties:

    @given(bic=bics, terminal=st.sampled_from(["A", "X"]))
    def test_lt_address_is_twelve_characters(self, bic, terminal):
        address = logical_terminal_address(bic, terminal)

        assert len(address) == 12
        assert address[:8] == bic[:8]
        assert address[8] == terminal

    @given(amount=amounts)
    def test_swift_amount_round_trips(self, amount):
        text = format_swift_amount(amount)

        assert text.count(",") == 1
        assert Decimal(text.rstrip(",").replace(",", ".")) == amount

    @given(payer=bics, payee=bics, amount=amounts, payment_date=payment_dates)
    @settings(max_examples=50)
    def test_encoding_invariants(self, payer, payee, amount, payment_date):
        # Arrange
        codec = SettlementCodec()
        payment = instruction(payer, payee, amount, payment_date)

        # Act
        first = codec.encode(payment)
        second = codec.encode(payment)

        # Assert
        assert is_valid_uetr(first.uetr)
        assert first.uetr != second.uetr
        assert first.file_name == f"MT202_{first.uetr}.txt"
        assert first.value_date == payment_date.astimezone(timezone.utc).date()
        assert f":32A:{first.value_date_text}EUR{format_swift_amount(amount)}\r\n" in first.render()
