"""
Pydantic schemas for payment endpoints.

Amounts are accepted as any JSON number. Sign, finiteness and precision are
checked by the coordinator so that every amount problem produces the same
"Invalid amount." validation error.
"""

from decimal import Decimal

from pydantic import Field, field_validator

from povy_sandbox.schemas.base import ApiModel, Money, stringify


class PaymentRequest(ApiModel):
    """Request body for POST /api/payments."""
    account_number: str = Field(min_length=1)
    amount: Decimal
    currency: str | None = None
    description: str | None = None
    merchant_name: str | None = None

    @field_validator("account_number", mode="before")
    @classmethod
    def coerce_account_number(cls, value):
        return stringify(value)


class CardPaymentRequest(ApiModel):
    """Request body for POST /api/payments/card."""
    card_number: str = Field(min_length=1)
    exp_month: str = Field(min_length=1)
    exp_year: str = Field(min_length=1)
    cvv: str = Field(min_length=1)
    amount: Decimal
    currency: str | None = None
    description: str | None = None
    merchant_name: str | None = None

    @field_validator("card_number", "exp_month", "exp_year", "cvv", mode="before")
    @classmethod
    def coerce_card_fields(cls, value):
        return stringify(value)


class PaymentResponse(ApiModel):
    """Result of a payment attempt, approved or declined."""
    status: str
    transaction_id: str
    message: str
    amount: Money
    currency: str
    description: str
    account_number: str
    remaining_balance: Money


class CardPaymentResponse(PaymentResponse):
    """Card payments add the last four digits, never the full card."""
    card_last4: str
