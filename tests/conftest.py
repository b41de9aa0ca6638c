"""Shared ledger payloads in the ledger's JSON encoding"""

import pytest

from pistebot.domain.contracts import CouponEvent, KnockOutEvent, PaymentInstruction
from pistebot.domain.events import LedgerEvent


def _coupon_payload(trade_id="tradeId", issuer="issuer", owner="owner"):
    return {
        "tradeId": trade_id,
        "productId": "productId",
        "couponRate": "0.0200000000",
        "dayCountFraction": {"numerator": "1", "denominator": "2"},
        "eventTime": "2019-11-11T00:00:00Z",
        "strike1": {"price": "100.0000000000", "ccy": "USD"},
        "priceIndex1": {"assetId": "asset-1", "price": {"price": "100.0000000000", "ccy": "USD"}},
        "strike2": {"price": "100.0000000000", "ccy": "USD"},
        "priceIndex2": {"assetId": "asset-2", "price": {"price": "100.0000000000", "ccy": "USD"}},
        "issuer": issuer,
        "owner": owner,
        "regulator": "regulator",
    }


def _knock_out_payload(trade_id="tradeId", reason="Some reason for knock out"):
    return {
        "tradeId": trade_id,
        "productId": "productId",
        "eventTime": "2022-02-08T00:00:00Z",
        "index1KO": {"price": "100.0000000000", "ccy": "USD"},
        "closingPriceIndex1": {"assetId": "asset-1", "price": {"price": "100.0000000000", "ccy": "USD"}},
        "index2KO": {"price": "100.0000000000", "ccy": "USD"},
        "closingPriceIndex2": {"assetId": "asset-2", "price": {"price": "100.0000000000", "ccy": "USD"}},
        "knockOutReason": reason,
        "issuer": "issuer",
        "owner": "owner",
        "regulator": "regulator",
    }


def _payment_payload(reference="txRefCode",
                    amount="10.0000000000",
                    currency="USD",
                    payment_date="2019-11-18T10:30:00Z",
                    payer_bic="payerBic",
                    payee_bic="payeeBic"):
    return {
        "payerDetails": {"name": "payer", "bic": payer_bic, "iban": "payerIban"},
        "payeeDetails": {"name": "payee", "bic": payee_bic, "iban": "payeeIban"},
        "transactionReference": reference,
        "amount": amount,
        "currency": currency,
        "paymentDate": payment_date,
        "regulator": "regulator",
    }


def _created(record_type, payload, contract_id="cid-1"):
    return LedgerEvent.created(record_type.TEMPLATE_ID, contract_id, payload)


@pytest.fixture
def coupon_event():
    return _created(CouponEvent, _coupon_payload())


@pytest.fixture
def knock_out_event():
    return _created(KnockOutEvent, _knock_out_payload())


@pytest.fixture
def payment_event():
    return _created(PaymentInstruction, _payment_payload())


@pytest.fixture
def coupon_payload():
    """Factory for CouponEvent arguments"""
    return _coupon_payload


@pytest.fixture
def knock_out_payload():
    """Factory for KnockOutEvent arguments"""
    return _knock_out_payload


@pytest.fixture
def payment_payload():
    """Factory for PaymentInstructions arguments"""
    return _payment_payload


BRIDGE_ENV_KEYS = [
    "SANDBOX_HOST", "SANDBOX_PORT", "LEDGER_USE_TLS", "LEDGER_TOKEN", "LEDGER_USER_ID",
    "LEDGER_PARTY", "BOT_TOKEN", "CHAT_ID", "OUTPUT_PATH", "LEDGER_OFFSET_FILE",
    "LOG_LEVEL", "LOG_FILE",
]


@pytest.fixture
def clean_env(monkeypatch):
    """Unset every bot setting for the duration of a test"""
    for key in BRIDGE_ENV_KEYS:
        # setenv first so values loaded from dotenv files are removed again on teardown
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
