"""
Account store — durable, mutable account records.

Each method opens its own short session and commits before returning, so a
balance written here is persisted before any caller reports success.

Balance writes are always single conditional UPDATE statements evaluated by
the database:

  - compare_and_set_balance(): "set balance to N where it is still M"
  - apply_adjustment(): "add D where 0 <= balance + D <= MAX_CENTS", or an
    absolute set

There is no "load, change in memory, flush" path for balances. Two workers
racing on the same row cannot both succeed against the same starting
balance, even without the in-process locks held by the coordinator.

Driver errors are logged here and re-raised as PersistenceError, so no
SQLAlchemy detail travels past the store.
"""

import logging
from contextlib import asynccontextmanager

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from povy_sandbox.exceptions import PersistenceError
from povy_sandbox.models.account import Account
from povy_sandbox.money import MAX_CENTS

logger = logging.getLogger(__name__)


class AccountStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _transaction(self, operation: str):
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield session
        except SQLAlchemyError as exc:
            logger.exception("Account store failed during %s", operation)
            raise PersistenceError("The account store is unavailable.") from exc

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_by_number(self, account_number: str) -> Account | None:
        async with self._transaction("get_by_number") as session:
            result = await session.execute(
                select(Account).where(Account.account_number == account_number)
            )
            return result.scalar_one_or_none()

    async def get_by_card_number(self, card_number: str) -> Account | None:
        async with self._transaction("get_by_card_number") as session:
            result = await session.execute(
                select(Account).where(Account.card_number == card_number)
            )
            return result.scalar_one_or_none()

    async def exists(self, account_number: str) -> bool:
        async with self._transaction("exists") as session:
            result = await session.execute(
                select(Account.id).where(Account.account_number == account_number)
            )
            return result.first() is not None

    async def list_recent(self) -> list[Account]:
        """All accounts, newest first."""
        async with self._transaction("list_recent") as session:
            result = await session.execute(
                select(Account).order_by(Account.created_at.desc())
            )
            return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def create(self, account: Account) -> Account:
        async with self._transaction("create") as session:
            session.add(account)
            await session.flush()
        return account

    async def delete(self, account_number: str) -> Account | None:
        """
        Delete an account and return the removed row, or None if absent.

        Ledger entries referencing the account are left untouched.
        """
        async with self._transaction("delete") as session:
            result = await session.execute(
                select(Account).where(Account.account_number == account_number)
            )
            account = result.scalar_one_or_none()
            if account is None:
                return None
            await session.delete(account)
            return account

    # ------------------------------------------------------------------
    # Balance writes
    # ------------------------------------------------------------------

    async def compare_and_set_balance(
        self,
        account_number: str,
        expected_cents: int,
        new_cents: int,
    ) -> bool:
        """
        Write a new balance only if the stored balance still equals the one
        the caller decided on.

        Returns:
            True if the row was updated, False if the balance had moved (or
            the account is gone) and the caller must re-read.
        """
        async with self._transaction("compare_and_set_balance") as session:
            result = await session.execute(
                update(Account)
                .where(Account.account_number == account_number)
                .where(Account.balance_cents == expected_cents)
                .values(balance_cents=new_cents)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    async def apply_adjustment(
        self,
        account_number: str,
        *,
        currency: str | None = None,
        balance_cents: int | None = None,
        delta_cents: int | None = None,
    ) -> Account | None:
        """
        Apply a manual adjustment in a single database transaction.

        The delta is applied first, conditionally on the result staying
        between zero and MAX_CENTS. If that condition fails nothing else is
        written.

        Returns:
            The updated account, or None if the account is missing or the
            delta would have moved the balance out of that range.
        """
        async with self._transaction("apply_adjustment") as session:
            if delta_cents is not None:
                result = await session.execute(
                    update(Account)
                    .where(Account.account_number == account_number)
                    .where(Account.balance_cents + delta_cents >= 0)
                    .where(Account.balance_cents + delta_cents <= MAX_CENTS)
                    .values(balance_cents=Account.balance_cents + delta_cents)
                    .execution_options(synchronize_session=False)
                )
                if result.rowcount != 1:
                    return None

            values = {}
            if currency is not None:
                values["currency"] = currency
            if balance_cents is not None:
                values["balance_cents"] = balance_cents
            if values:
                await session.execute(
                    update(Account)
                    .where(Account.account_number == account_number)
                    .values(**values)
                    .execution_options(synchronize_session=False)
                )

            result = await session.execute(
                select(Account).where(Account.account_number == account_number)
            )
            return result.scalar_one_or_none()
