"""
Settlement Codec

Turns a PaymentInstruction into an MT202 SettlementMessage. Deterministic apart
from the freshly generated UETR; performs no validation, truncation or currency
lookup, the ledger is trusted for well-formed inputs.
"""

from datetime import date, datetime, timezone
from typing import Callable
from uuid import uuid4

from pistebot.domain.contracts.structured_products import PaymentInstruction
from pistebot.domain.settlement.mt202 import SettlementMessage


def new_uetr() -> str:
    return str(uuid4())


def utc_value_date(moment: datetime) -> date:
    """Calendar date of ``moment`` in UTC; naive datetimes are taken as UTC"""
    if moment.tzinfo is None:
        return moment.date()
    return moment.astimezone(timezone.utc).date()


class SettlementCodec:
    """
    Encoder from payment instructions to settlement messages.

    Args:
        uetr_factory: Source of unique end-to-end references (uuid4 by default)
    """

    def __init__(self, uetr_factory: Callable[[], str] = new_uetr):
        self._uetr_factory = uetr_factory

    def encode(self, instruction: PaymentInstruction) -> SettlementMessage:
        return SettlementMessage(
            sender_bic=instruction.payer_details.bic,
            receiver_bic=instruction.payee_details.bic,
            transaction_reference=instruction.transaction_reference,
            related_reference=instruction.transaction_reference,
            value_date=utc_value_date(instruction.payment_date),
            currency=instruction.currency,
            amount=instruction.amount,
            beneficiary_account=instruction.payee_details.iban,
            beneficiary_bic=instruction.payee_details.bic,
            uetr=self._uetr_factory(),
        )
