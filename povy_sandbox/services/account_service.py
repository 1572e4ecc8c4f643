"""
Account service — provisioning and lookup of sandbox accounts.

This module handles:
  - Account creation (unique account number + synthetic card)
  - Account retrieval (single or list, newest first)
  - Account deletion

Balance changes are NOT made here: they all go through the
BalanceCoordinator so they serialize per account and reach the ledger.

Defaults are forgiving on purpose: a developer creating a test account with
an empty body gets a USD account with 10000 and a working card.
"""

import logging
import random
import string
from datetime import datetime, timezone

from povy_sandbox.exceptions import AccountNotFoundError
from povy_sandbox.models.account import Account, CardDetails, Currency
from povy_sandbox.money import to_cents
from povy_sandbox.stores.accounts import AccountStore

logger = logging.getLogger(__name__)

CARD_PREFIX = "411111"


def _generate_account_number() -> str:
    """Account numbers look like 001-00012345."""
    return f"001-{random.randint(1, 99_999_999):08d}"


def _generate_card(now: datetime | None = None) -> CardDetails:
    """
    Generate a synthetic Visa-like test card.

    16 digits starting with 411111, expiring in December three years from
    now (two-digit year), with a random 3-digit CVV.
    """
    now = now or datetime.now(timezone.utc)
    card_number = CARD_PREFIX + "".join(random.choices(string.digits, k=10))
    return CardDetails(
        card_number=card_number,
        exp_month="12",
        exp_year=str(now.year + 3)[-2:],
        cvv=str(random.randint(100, 999)),
    )


async def create_account(
    accounts: AccountStore,
    owner_name: str | None = None,
    currency: str | None = None,
    initial_balance=None,
    default_owner_name: str = "Test user",
    default_initial_balance=10000,
) -> Account:
    """
    Create a new test account with a card.

    Unsupported or missing currency falls back to USD, a missing or
    negative initial balance falls back to the default.

    Raises:
        ValidationError: If the initial balance has more than two decimals.
        RuntimeError: If no free account number was found in 10 tries.
    """
    name = owner_name.strip() if owner_name and owner_name.strip() else default_owner_name
    normalized_currency = currency if currency in Currency.values() else Currency.USD.value

    if initial_balance is None or initial_balance < 0:
        initial_balance = default_initial_balance
    balance_cents = to_cents(initial_balance, message="Invalid initial balance.", allow_zero=True)

    # Generate a unique account number (retry if collision)
    for _ in range(10):
        account_number = _generate_account_number()
        if not await accounts.exists(account_number):
            break
    else:
        raise RuntimeError("Failed to generate a unique account number")

    account = Account(
        account_number=account_number,
        owner_name=name,
        balance_cents=balance_cents,
        currency=normalized_currency,
        card=_generate_card(),
    )
    await accounts.create(account)
    logger.info("Created account %s (%s)", account_number, normalized_currency)
    return account


async def list_accounts(accounts: AccountStore) -> list[Account]:
    """All accounts, newest first."""
    return await accounts.list_recent()


async def get_account(accounts: AccountStore, account_number: str) -> Account:
    """
    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await accounts.get_by_number(account_number)
    if account is None:
        raise AccountNotFoundError(account_number)
    return account


async def delete_account(accounts: AccountStore, account_number: str) -> Account:
    """
    Delete an account. Its ledger history stays in place.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await accounts.delete(account_number)
    if account is None:
        raise AccountNotFoundError(account_number)
    logger.info("Deleted account %s", account_number)
    return account
