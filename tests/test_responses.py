import json
from datetime import timedelta

import pytest
from pydantic import ValidationError

from runeswap import errors
from runeswap.errors import AuthRequiredError, UpstreamError
from runeswap.models import LiquidiumToken
from runeswap.models.base import utcnow
from runeswap.services.token_store import is_expired
from runeswap.web.responses import classify_error, error, success
from runeswap.web.schemas import PsbtConfirmBody, QuoteBody
from runeswap.web.validation import flatten_errors


def test_success_envelope():
    response = success({"runes": []}, status=201)

    assert response.status_code == 201
    assert json.loads(response.body) == {"data": {"runes": []}}


def test_error_envelope_keeps_null_details():
    response = error("Rune not found")

    assert response.status_code == 500
    assert json.loads(response.body) == {"error": "Rune not found", "details": None}


@pytest.mark.parametrize(
    "exc, expected",
    [
        (UpstreamError("x", "missing", 404), ("Resource not found", "missing", 404)),
        (UpstreamError("x", None, 400), ("Bad request", "x", 400)),
        (UpstreamError("x", "teapot", 418), ("Failed to load", "teapot", 418)),
        (UpstreamError("x", "no status"), ("Failed to load", "no status", 500)),
        (AuthRequiredError(details="log in"), ("Liquidium authentication required", "log in", 401)),
        (errors.ValidationError(details="{}"), ("Invalid request parameters", "{}", 400)),
        (KeyError("offers"), ("Failed to load", "'offers'", 500)),
    ],
)
def test_classify_error(exc, expected):
    info = classify_error(exc, "Failed to load")

    assert (info.message, info.details, info.status) == expected


def test_flatten_errors_groups_by_wire_name():
    with pytest.raises(ValidationError) as exc_info:
        QuoteBody.model_validate({"btcAmount": 0})

    fields = flatten_errors(exc_info.value)

    assert set(fields) == {"btcAmount", "runeName", "address"}
    assert all(isinstance(messages, list) and messages for messages in fields.values())


def test_flatten_errors_model_level():
    body = {
        "orders": [],
        "address": "1A1zP1eP5QGefi2DMPTfTL5SLmv7DivfNa",
        "publicKey": "k",
        "paymentAddress": "p",
        "paymentPublicKey": "pk",
        "signedPsbtBase64": "s",
        "swapId": "id",
        "runeName": "DOG",
        "rbfProtection": True,
    }
    with pytest.raises(ValidationError) as exc_info:
        PsbtConfirmBody.model_validate(body)

    assert list(flatten_errors(exc_info.value)) == ["_errors"]


def test_quote_body_accepts_snake_case_in_python():
    body = QuoteBody(btc_amount=1, rune_name="DOG", address="bc1q")

    assert body.wire() == {"btcAmount": "1", "runeName": "DOG", "address": "bc1q"}


def test_token_expiry():
    now = utcnow()
    token = LiquidiumToken(wallet_address="w", ordinals_address="w", jwt="j", expires_at=now + timedelta(seconds=1))

    assert not is_expired(token, now=now)
    assert is_expired(token, now=now + timedelta(seconds=2))
    token.expires_at = None
    assert not is_expired(token, now=now + timedelta(days=365))
