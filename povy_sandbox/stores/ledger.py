"""
Ledger store — append-only transaction history.

Only two operations exist: append one entry, and read an account's most
recent entries. Nothing here updates or deletes a row.
"""

import logging
from dataclasses import dataclass, asdict, field
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from povy_sandbox.exceptions import PersistenceError
from povy_sandbox.models.transaction import Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class LedgerEntry:
    """
    A fully populated ledger entry, ready to append.

    created_at is the moment the event happened, not the moment the row is
    written: a retried or delayed write still sorts where its event belongs.
    """
    account_number: str
    type: str
    amount_cents: int
    currency: str
    description: str | None
    source: str
    balance_after_cents: int
    merchant_name: str | None = None
    transaction_id: str | None = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))


class LedgerStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append(self, entry: LedgerEntry) -> Transaction:
        """
        Insert one ledger entry.

        Raises:
            PersistenceError: If the insert fails.
        """
        txn = Transaction(**asdict(entry))
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    session.add(txn)
                    await session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError("The ledger store is unavailable.") from exc
        return txn

    async def list_for_account(
        self,
        account_number: str,
        limit: int = 50,
    ) -> list[Transaction]:
        """
        Most recent entries for an account, newest first.

        Works for deleted accounts too: their history is never removed.
        """
        try:
            async with self._session_factory() as session:
                result = await session.execute(
                    select(Transaction)
                    .where(Transaction.account_number == account_number)
                    .order_by(Transaction.created_at.desc(), Transaction.id.desc())
                    .limit(limit)
                )
                return list(result.scalars().all())
        except SQLAlchemyError as exc:
            logger.exception("Ledger store failed listing %s", account_number)
            raise PersistenceError("The ledger store is unavailable.") from exc
