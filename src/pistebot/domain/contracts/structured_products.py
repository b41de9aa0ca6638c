"""
Structured Products Contract Records

Typed views of the Digital Coupon Note (DCN) templates this bot reacts to.
The ledger encodes fields in camelCase and numerics as strings; the records
expose snake_case attributes and proper Decimal/datetime types.
"""

from datetime import datetime
from decimal import Decimal
from typing import ClassVar, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from pistebot.domain.events.ledger_events import TemplateId

DCN_MODULE = "DA.RefApps.StructuredProducts.DCN"


class LedgerRecord(BaseModel):
    """
    Base class for decoded contract arguments.

    Immutable; accepts both the ledger's camelCase keys and attribute names.
    Unknown keys are ignored so template upgrades that add fields do not break decoding.
    """

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class PriceAndCurrency(LedgerRecord):
    price: Optional[Decimal] = None
    ccy: Optional[str] = None


class ClosingPrice(LedgerRecord):
    asset_id: Optional[str] = None
    price: Optional[PriceAndCurrency] = None


class DayCountFraction(LedgerRecord):
    numerator: Optional[int] = None
    denominator: Optional[int] = None


class AccountDetails(LedgerRecord):
    """Bank account of a payment party; BIC and IBAN are carried verbatim"""
    name: str = Field(..., description="Account holder")
    bic: str = Field(..., description="Bank identifier code")
    iban: str = Field(..., description="Account number")


class CouponEvent(LedgerRecord):
    """
    Coupon payment observed on a trade.

    Notification only: no settlement message is produced for it.
    """

    TEMPLATE_ID: ClassVar[TemplateId] = TemplateId(module_name=DCN_MODULE, entity_name="CouponEvent")

    trade_id: str = Field(..., description="Trade the coupon belongs to")
    issuer: str = Field(..., description="Issuing party")
    owner: str = Field(..., description="Owning party")
    product_id: Optional[str] = None
    coupon_rate: Optional[Decimal] = None
    day_count_fraction: Optional[DayCountFraction] = None
    event_time: Optional[datetime] = None
    strike1: Optional[PriceAndCurrency] = None
    price_index1: Optional[ClosingPrice] = None
    strike2: Optional[PriceAndCurrency] = None
    price_index2: Optional[ClosingPrice] = None
    regulator: Optional[str] = None


class KnockOutEvent(LedgerRecord):
    """Early termination of a trade"""

    TEMPLATE_ID: ClassVar[TemplateId] = TemplateId(module_name=DCN_MODULE, entity_name="KnockOutEvent")

    trade_id: str = Field(..., description="Trade that knocked out")
    knock_out_reason: Optional[str] = Field(None, description="Free text, may be absent")
    product_id: Optional[str] = None
    event_time: Optional[datetime] = None
    index1_ko: Optional[PriceAndCurrency] = Field(None, alias="index1KO")
    closing_price_index1: Optional[ClosingPrice] = None
    index2_ko: Optional[PriceAndCurrency] = Field(None, alias="index2KO")
    closing_price_index2: Optional[ClosingPrice] = None
    issuer: Optional[str] = None
    owner: Optional[str] = None
    regulator: Optional[str] = None


class PaymentInstruction(LedgerRecord):
    """
    Instruction to move cash between two accounts.

    Drives generation of one MT202 settlement message.
    """

    TEMPLATE_ID: ClassVar[TemplateId] = TemplateId(module_name=DCN_MODULE, entity_name="PaymentInstructions")

    payer_details: AccountDetails
    payee_details: AccountDetails
    transaction_reference: str
    amount: Decimal
    currency: str
    payment_date: datetime
    regulator: str
