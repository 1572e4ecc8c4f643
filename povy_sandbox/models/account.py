"""
Account model — a sandbox test account with a synthetic card.

Each account has:
  - A unique account number ("001-" + 8 digits, generated at creation)
  - An owner name (free text, no identity behind it)
  - A balance in integer cents, never negative
  - A currency from a fixed set (USD, MXN, JPY)
  - One synthetic card, embedded in the account row

Balance management:
  `balance_cents` is the single current balance. It is only ever changed by
  the stores through conditional UPDATE statements (compare-and-set or
  "balance + delta >= 0"), never by assigning in memory and flushing. The
  CHECK constraint is the database's last word on the non-negative
  invariant.

Card:
  The card is a value object (number, expiry month/year, CVV, all strings)
  mapped with `composite()` onto four columns of the account row. It is
  issued once at creation and never changes. The card number is unique so a
  card payment resolves to at most one account.
"""

import enum
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import String, Integer, DateTime, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, composite

from povy_sandbox.database import Base
from povy_sandbox.money import from_cents


class Currency(str, enum.Enum):
    """Currencies an account can hold. No conversion happens between them."""
    USD = "USD"
    MXN = "MXN"
    JPY = "JPY"

    @classmethod
    def values(cls) -> list[str]:
        return [member.value for member in cls]


@dataclass
class CardDetails:
    """Synthetic card issued with an account."""
    card_number: str
    exp_month: str
    exp_year: str
    cvv: str

    @property
    def last4(self) -> str:
        return self.card_number[-4:]

    def matches(self, exp_month: str, exp_year: str, cvv: str) -> bool:
        """Exact string comparison of the presented expiry and CVV."""
        return (
            self.exp_month == exp_month
            and self.exp_year == exp_year
            and self.cvv == cvv
        )


class Account(Base):
    __tablename__ = "accounts"

    # Database-level constraint: balance can never be negative
    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_accounts_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Public identity of the account, immutable after creation
    account_number: Mapped[str] = mapped_column(
        String(20),
        unique=True,
        nullable=False,
        index=True,
    )

    owner_name: Mapped[str] = mapped_column(
        String(120),
        nullable=False,
    )

    balance_cents: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        default=0,
    )

    # One of Currency.values()
    currency: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        default=Currency.USD.value,
    )

    # --- Embedded card columns ---
    card_number: Mapped[str] = mapped_column(String(19), unique=True, nullable=False, index=True)
    card_exp_month: Mapped[str] = mapped_column(String(2), nullable=False)
    card_exp_year: Mapped[str] = mapped_column(String(4), nullable=False)
    card_cvv: Mapped[str] = mapped_column(String(4), nullable=False)

    card: Mapped[CardDetails] = composite(
        "card_number", "card_exp_month", "card_exp_year", "card_cvv"
    )

    # Audit timestamps
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents)
