"""
Transaction model — one immutable ledger entry per balance-affecting event.

Every payment attempt (approved or declined) and every manual top-up
appends exactly one row. Rows are never updated or deleted.

Key fields:
  - type: "credit" or "debit" — the direction of the event
  - amount_cents: Magnitude only (the direction is carried by type)
  - source: which flow produced the entry (account_payment, card_payment,
    manual_topup)
  - transaction_id: Correlation id returned to the payment caller (NULL for
    manual top-ups)
  - balance_after_cents: The account balance right after this event, so
    history can be audited without replaying it

No foreign key to accounts:
  Entries reference an account by its number only. Deleting an account
  leaves its history in place (orphaned rows stay listable).

Ordering:
  History is ordered by created_at, newest first. created_at is the time of
  the event, stamped by the coordinator when its decision is final, so a
  retried write keeps its place. The autoincrement id breaks ties between
  entries stamped within the same clock tick.
"""

import enum
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, CheckConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from povy_sandbox.database import Base
from povy_sandbox.money import from_cents


class TransactionType(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class TransactionSource(str, enum.Enum):
    ACCOUNT_PAYMENT = "account_payment"
    CARD_PAYMENT = "card_payment"
    MANUAL_TOPUP = "manual_topup"


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        # Magnitude only: direction is indicated by type
        CheckConstraint("amount_cents >= 0", name="ck_transactions_amount_magnitude"),
        # History query: WHERE account_number = ? ORDER BY created_at DESC
        Index("ix_transactions_account_created", "account_number", "created_at"),
    )

    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        autoincrement=True,
    )

    account_number: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    # TransactionType value
    type: Mapped[str] = mapped_column(
        String(10),
        nullable=False,
    )

    amount_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
    )

    description: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
    )

    # TransactionSource value
    source: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )

    transaction_id: Mapped[str | None] = mapped_column(
        String(64),
        nullable=True,
        index=True,
    )

    balance_after_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )

    merchant_name: Mapped[str | None] = mapped_column(
        String(120),
        nullable=True,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)

    @property
    def balance_after(self) -> Decimal:
        return from_cents(self.balance_after_cents)
