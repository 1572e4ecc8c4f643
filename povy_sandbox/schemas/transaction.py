"""Pydantic schemas for ledger history."""

from datetime import datetime

from povy_sandbox.schemas.base import ApiModel, Money


class TransactionResponse(ApiModel):
    """Public representation of one ledger entry."""
    id: int
    account_number: str
    type: str
    amount: Money
    currency: str
    description: str | None
    source: str
    transaction_id: str | None
    balance_after: Money
    merchant_name: str | None
    created_at: datetime
