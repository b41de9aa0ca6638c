"""
MT202 Settlement Message

General financial institution transfer, reduced to the fields this bot populates:
sender/receiver, transaction and related reference (:20:, :21:), value date,
currency and amount (:32A:), beneficiary institution (:58A:) and the unique
end-to-end transaction reference (UETR, block 3 tag 121).
"""

import re
from datetime import date
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

MESSAGE_TYPE = "202"
SENDER_TERMINAL = "A"
RECEIVER_TERMINAL = "X"
DEFAULT_BRANCH = "XXX"
DATE_FORMAT = "%y%m%d"
CRLF = "\r\n"

UETR_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def is_valid_uetr(value: str) -> bool:
    """True when ``value`` is a well-formed UUID version 4 string"""
    return bool(UETR_PATTERN.match(value or ""))


def logical_terminal_address(bic: str, terminal: str) -> str:
    """
    Expand a BIC to the 12 character logical terminal address

    Args:
        bic: 8 or 11 character BIC, or an already expanded 12 character address
        terminal: Terminal code inserted after the first 8 characters

    Returns:
        The LT address; other lengths are returned unchanged
    """
    if len(bic) == 8:
        return f"{bic}{terminal}{DEFAULT_BRANCH}"
    if len(bic) == 11:
        return f"{bic[:8]}{terminal}{bic[8:]}"
    return bic


def format_plain_amount(amount: Decimal) -> str:
    """Decimal in plain notation without trailing fractional zeros (10.00 -> '10')"""
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text


def format_swift_amount(amount: Decimal) -> str:
    """Decimal in SWIFT notation: decimal comma, always present (10 -> '10,')"""
    text = format_plain_amount(amount).replace(".", ",")
    if "," not in text:
        text += ","
    return text


class SettlementMessage(BaseModel):
    """
    MT202 Settlement Message

    Immutable. ``uetr`` is not validated here: the message is a plain carrier and
    the output sink owns the decision whether an identifier is fit for storage.
    """

    model_config = ConfigDict(frozen=True)

    sender_bic: str = Field(..., description="Payer institution BIC")
    receiver_bic: str = Field(..., description="Payee institution BIC")
    transaction_reference: str = Field(..., description="Field 20")
    related_reference: str = Field(..., description="Field 21")
    value_date: date = Field(..., description="Field 32A date")
    currency: str = Field(..., description="Field 32A ISO currency code")
    amount: Decimal = Field(..., description="Field 32A amount")
    beneficiary_account: str = Field(..., description="Field 58A account (IBAN)")
    beneficiary_bic: str = Field(..., description="Field 58A BIC")
    uetr: str = Field(..., description="Unique end-to-end transaction reference")

    @property
    def sender(self) -> str:
        return logical_terminal_address(self.sender_bic, SENDER_TERMINAL)

    @property
    def receiver(self) -> str:
        return logical_terminal_address(self.receiver_bic, RECEIVER_TERMINAL)

    @property
    def value_date_text(self) -> str:
        return self.value_date.strftime(DATE_FORMAT)

    @property
    def file_name(self) -> str:
        return f"MT{MESSAGE_TYPE}_{self.uetr}.txt"

    def render(self) -> str:
        """
        Render the message in FIN block format

        Returns:
            Message text, CRLF separated inside the text block
        """
        basic_header = f"{{1:F01{self.sender}0000000000}}"
        application_header = f"{{2:I{MESSAGE_TYPE}{self.receiver}N}}"
        user_header = f"{{3:{{121:{self.uetr}}}}}"
        fields = [
            f":20:{self.transaction_reference}",
            f":21:{self.related_reference}",
            f":32A:{self.value_date_text}{self.currency}{format_swift_amount(self.amount)}",
            f":58A:/{self.beneficiary_account}",
            self.beneficiary_bic,
        ]
        text_block = "{4:" + CRLF + CRLF.join(fields) + CRLF + "-}"
        return basic_header + application_header + user_header + text_block
