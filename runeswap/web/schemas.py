"""Request schemas for the route handlers.

Query models are fed ``dict(request.query_params)``, so numbers and booleans
arrive as strings and rely on pydantic's lax coercion.
"""

from __future__ import annotations

from typing import Annotated, Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, field_validator, model_validator
from pydantic.alias_generators import to_camel

NonEmptyStr = Annotated[str, Field(min_length=1)]
DigitStr = Annotated[str, Field(pattern=r"^\d+$")]

BITCOIN_ADDRESS_PATTERN = r"^(bc1[qpzry9x8gf2tvdw0s3jn54khce6mua7l]{11,71}|[13][a-km-zA-HJ-NP-Z1-9]{25,34})$"


class CamelModel(BaseModel):
    """Fields are snake_case in Python and camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def wire(self, **kwargs: Any) -> dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True, mode="json", **kwargs)


# ============================================================================
# Liquidium
# ============================================================================


class ChallengeQuery(CamelModel):
    ordinals_address: NonEmptyStr
    payment_address: NonEmptyStr
    wallet: str = "xverse"


class AuthSubmitBody(CamelModel):
    ordinals_address: NonEmptyStr
    payment_address: NonEmptyStr
    ordinals_signature: NonEmptyStr
    ordinals_nonce: NonEmptyStr
    payment_signature: Optional[str] = None
    payment_nonce: Optional[str] = None


class BorrowRangesQuery(CamelModel):
    rune_id: NonEmptyStr
    address: NonEmptyStr


class BorrowQuotesQuery(CamelModel):
    rune_id: NonEmptyStr
    rune_amount: DigitStr
    address: NonEmptyStr


class BorrowPrepareBody(BaseModel):
    instant_offer_id: UUID
    fee_rate: PositiveFloat
    token_amount: DigitStr
    borrower_payment_address: NonEmptyStr
    borrower_payment_pubkey: NonEmptyStr
    borrower_ordinal_address: NonEmptyStr
    borrower_ordinal_pubkey: NonEmptyStr
    collateral_asset_id: Optional[str] = None
    address: NonEmptyStr

    def upstream_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"address"}, exclude_none=True, mode="json")


class BorrowSubmitBody(BaseModel):
    signed_psbt_base_64: NonEmptyStr
    prepare_offer_id: UUID
    address: NonEmptyStr

    def upstream_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"address"}, mode="json")


class RepayBody(CamelModel):
    loan_id: NonEmptyStr
    address: NonEmptyStr
    signed_psbt: Optional[str] = None


class AddressQuery(BaseModel):
    address: NonEmptyStr


# ============================================================================
# SatsTerminal
# ============================================================================


class QuoteBody(CamelModel):
    btc_amount: str
    rune_name: NonEmptyStr
    address: NonEmptyStr
    sell: Optional[bool] = None

    @field_validator("btc_amount", mode="before")
    @classmethod
    def _stringify_amount(cls, value: Any) -> str:
        if isinstance(value, bool):
            raise ValueError("Expected a non-empty string or a positive number")
        if isinstance(value, (int, float)):
            if value <= 0:
                raise ValueError("Number must be greater than 0")
            return str(value)
        if isinstance(value, str) and value:
            return value
        raise ValueError("Expected a non-empty string or a positive number")


class SearchQuery(BaseModel):
    query: NonEmptyStr
    sell: Optional[str] = None


class RuneOrder(CamelModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    id: NonEmptyStr
    market: NonEmptyStr
    price: float
    formatted_amount: float
    from_token_amount: Optional[str] = None
    slippage: Optional[float] = None
    listing_amount: Optional[float] = None
    seller_address: Optional[str] = None
    token_amount: Optional[str] = None
    listing_price: Optional[str] = None
    updated_at: Optional[str] = None
    formatted_unit_price: Optional[str] = None
    alkanes_id: Optional[str] = None
    name: Optional[str] = None
    amount: Optional[str] = None


class PsbtCreateBody(CamelModel):
    orders: List[RuneOrder]
    address: NonEmptyStr
    public_key: NonEmptyStr
    payment_address: NonEmptyStr
    payment_public_key: NonEmptyStr
    rune_name: NonEmptyStr
    sell: Optional[bool] = None
    rbf_protection: Optional[bool] = None
    fee_rate: Optional[float] = None
    slippage: Optional[float] = None


class PsbtConfirmBody(CamelModel):
    orders: List[RuneOrder]
    address: Annotated[str, Field(pattern=BITCOIN_ADDRESS_PATTERN)]
    public_key: NonEmptyStr
    payment_address: NonEmptyStr
    payment_public_key: NonEmptyStr
    signed_psbt_base64: NonEmptyStr
    swap_id: NonEmptyStr
    rune_name: NonEmptyStr
    sell: Optional[bool] = None
    rbf_protection: Optional[bool] = None
    signed_rbf_psbt_base64: Optional[str] = None

    @model_validator(mode="after")
    def _rbf_needs_signature(self) -> "PsbtConfirmBody":
        if self.rbf_protection is True and not self.signed_rbf_psbt_base64:
            raise ValueError("signedRbfPsbtBase64 is required when rbfProtection is true")
        return self


# ============================================================================
# Ordiscan
# ============================================================================


class RuneInfoQuery(BaseModel):
    name: NonEmptyStr


__all__ = [
    "AddressQuery",
    "AuthSubmitBody",
    "BITCOIN_ADDRESS_PATTERN",
    "BorrowPrepareBody",
    "BorrowQuotesQuery",
    "BorrowRangesQuery",
    "BorrowSubmitBody",
    "ChallengeQuery",
    "PsbtConfirmBody",
    "PsbtCreateBody",
    "QuoteBody",
    "RepayBody",
    "RuneInfoQuery",
    "RuneOrder",
    "SearchQuery",
]
