"""
Pydantic schemas for account endpoints.

The sandbox exposes the full synthetic card on account responses: these are
test credentials a developer needs to try card payments, not real card data.
"""

from datetime import datetime
from decimal import Decimal

from povy_sandbox.schemas.base import ApiModel, Money


class AccountCreateRequest(ApiModel):
    """Request body for POST /api/accounts. Every field is optional."""
    owner_name: str | None = None
    currency: str | None = None
    initial_balance: Decimal | None = None


class AccountUpdateRequest(ApiModel):
    """
    Request body for PATCH /api/accounts/{accountNumber}.

    `balance` sets the balance outright, `addBalance` adds a signed amount.
    They are mutually exclusive.
    """
    currency: str | None = None
    balance: Decimal | None = None
    add_balance: Decimal | None = None


class CardResponse(ApiModel):
    card_number: str
    exp_month: str
    exp_year: str
    cvv: str


class AccountResponse(ApiModel):
    """Public representation of a test account."""
    account_number: str
    owner_name: str
    balance: Money
    currency: str
    card: CardResponse
    created_at: datetime
    updated_at: datetime


class AccountDeletedResponse(ApiModel):
    message: str
    account_number: str
