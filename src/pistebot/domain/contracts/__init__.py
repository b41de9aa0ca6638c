from .structured_products import (
    DCN_MODULE,
    LedgerRecord,
    AccountDetails,
    PriceAndCurrency,
    ClosingPrice,
    DayCountFraction,
    CouponEvent,
    KnockOutEvent,
    PaymentInstruction,
)

__all__ = [
    "DCN_MODULE",
    "LedgerRecord",
    "AccountDetails",
    "PriceAndCurrency",
    "ClosingPrice",
    "DayCountFraction",
    "CouponEvent",
    "KnockOutEvent",
    "PaymentInstruction",
]
