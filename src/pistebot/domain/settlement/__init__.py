from .mt202 import (
    SettlementMessage,
    UETR_PATTERN,
    is_valid_uetr,
    logical_terminal_address,
    format_plain_amount,
    format_swift_amount,
)
from .codec import SettlementCodec, utc_value_date

__all__ = [
    "SettlementMessage",
    "SettlementCodec",
    "UETR_PATTERN",
    "is_valid_uetr",
    "logical_terminal_address",
    "format_plain_amount",
    "format_swift_amount",
    "utc_value_date",
]
