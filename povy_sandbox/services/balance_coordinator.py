"""
Balance mutation coordinator — THE CORE OF THE SANDBOX.

Every change to an account balance goes through this class:
  - Payments by account number
  - Payments by card (number + expiry + CVV)
  - Manual adjustments (currency, absolute balance, signed top-up)

Atomicity:
  For each account, "read balance -> decide -> write balance" runs while
  holding that account's lock from AccountLocks, so two payments on the same
  account cannot both approve against the same starting balance. The write
  itself is a compare-and-set in the database. If another process moved the
  balance in between, the write matches no row and the payment re-reads and
  decides again (bounded by max_write_retries).

  Payments on different accounts hold different locks and never wait on
  each other.

Ledger:
  Once the balance decision is final and committed, the lock is released
  and one ledger entry is handed to the TransactionRecorder, which writes it
  in the background. Declined attempts get an entry too (with the unchanged
  balance). Validation, not-found and card-authentication failures happen
  before any write and produce no entry.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from decimal import Decimal

from povy_sandbox.exceptions import (
    AccountNotFoundError,
    CardAuthenticationError,
    CardNotFoundError,
    ConflictError,
    PersistenceError,
    ValidationError,
)
from povy_sandbox.models.account import Account, Currency
from povy_sandbox.models.transaction import TransactionSource, TransactionType
from povy_sandbox.money import from_cents, to_cents
from povy_sandbox.services.authorizer import Decision, decide
from povy_sandbox.services.locks import AccountLocks
from povy_sandbox.services.recorder import TransactionRecorder
from povy_sandbox.stores.accounts import AccountStore
from povy_sandbox.stores.ledger import LedgerEntry

logger = logging.getLogger(__name__)

APPROVED_MESSAGE = "Payment approved."
DECLINED_MESSAGE = "Insufficient funds in the account."
TOPUP_DESCRIPTION = "Manual balance adjustment (test top-up)"


@dataclass
class PaymentResult:
    """Outcome of one payment attempt. Declined is a result, not an error."""
    status: str
    transaction_id: str
    message: str
    amount: Decimal
    currency: str
    description: str
    account_number: str
    remaining_balance: Decimal
    card_last4: str | None = None


def new_transaction_id(prefix: str = "POVY") -> str:
    """Correlation id: epoch milliseconds plus a random suffix, unique per attempt."""
    return f"{prefix}-{time.time_ns() // 1_000_000}-{uuid.uuid4().hex[:8].upper()}"


def _check_currency(currency: str | None) -> str | None:
    """An empty currency counts as absent."""
    if not currency:
        return None
    if currency not in Currency.values():
        raise ValidationError("Unsupported currency. Use USD, MXN or JPY.")
    return currency


class BalanceCoordinator:
    def __init__(
        self,
        accounts: AccountStore,
        recorder: TransactionRecorder,
        locks: AccountLocks | None = None,
        default_merchant_name: str = "Povy Test",
        max_write_retries: int = 5,
    ) -> None:
        self._accounts = accounts
        self._recorder = recorder
        self._locks = locks or AccountLocks()
        self._default_merchant_name = default_merchant_name
        self._max_write_retries = max(1, max_write_retries)

    # ------------------------------------------------------------------
    # Payments
    # ------------------------------------------------------------------

    async def pay_by_account_number(
        self,
        account_number: str,
        amount,
        currency: str | None = None,
        description: str | None = None,
        merchant_name: str | None = None,
    ) -> PaymentResult:
        """
        Charge an account identified by its number.

        Raises:
            ValidationError: Missing account number, missing/invalid amount,
                or unsupported currency (checked before any store access).
            AccountNotFoundError: No account with that number.
            PersistenceError: The balance write failed; nothing was charged
                and no ledger entry was written.
        """
        if not account_number or amount is None:
            raise ValidationError("Missing required fields: accountNumber and amount.")
        amount_cents = to_cents(amount)
        currency = _check_currency(currency)

        account_number = str(account_number)
        if not await self._accounts.exists(account_number):
            raise AccountNotFoundError(account_number)

        return await self._charge(
            account_number,
            amount_cents,
            currency=currency,
            description=description or "Test payment by account number",
            merchant_name=merchant_name,
            source=TransactionSource.ACCOUNT_PAYMENT,
            id_prefix="POVY",
        )

    async def pay_by_card(
        self,
        card_number: str,
        exp_month: str,
        exp_year: str,
        cvv: str,
        amount,
        currency: str | None = None,
        description: str | None = None,
        merchant_name: str | None = None,
    ) -> PaymentResult:
        """
        Charge the account holding a card, after checking expiry and CVV.

        Only the last four digits of the card travel back in the result.

        Raises:
            ValidationError: Any card field or the amount missing/invalid.
            CardNotFoundError: No account holds this card number.
            CardAuthenticationError: The card exists but expiry or CVV differ.
            PersistenceError: The balance write failed.
        """
        if not (card_number and exp_month and exp_year and cvv) or amount is None:
            raise ValidationError("Missing required fields for card payment.")
        amount_cents = to_cents(amount)
        currency = _check_currency(currency)

        card_number = "".join(str(card_number).split())
        account = await self._accounts.get_by_card_number(card_number)
        if account is None:
            raise CardNotFoundError()
        if not account.card.matches(str(exp_month), str(exp_year), str(cvv)):
            logger.info("Card authentication failed for account %s", account.account_number)
            raise CardAuthenticationError()

        result = await self._charge(
            account.account_number,
            amount_cents,
            currency=currency,
            description=description or "Test card payment",
            merchant_name=merchant_name,
            source=TransactionSource.CARD_PAYMENT,
            id_prefix="POVY-CARD",
        )
        result.card_last4 = account.card.last4
        return result

    async def _charge(
        self,
        account_number: str,
        amount_cents: int,
        *,
        currency: str | None,
        description: str,
        merchant_name: str | None,
        source: TransactionSource,
        id_prefix: str,
    ) -> PaymentResult:
        async with self._locks.hold(account_number):
            account, decision = await self._decide_and_write(account_number, amount_cents)
            decided_at = datetime.now(timezone.utc)

        transaction_id = new_transaction_id(id_prefix)
        effective_currency = currency or account.currency

        # Ledger write happens outside the lock and never blocks the result
        self._recorder.record(
            LedgerEntry(
                account_number=account_number,
                type=TransactionType.DEBIT.value,
                amount_cents=amount_cents,
                currency=effective_currency,
                description=description,
                source=source.value,
                transaction_id=transaction_id,
                balance_after_cents=decision.new_balance_cents,
                merchant_name=merchant_name or self._default_merchant_name,
                created_at=decided_at,
            )
        )

        logger.info(
            "Payment %s %s: account=%s amount_cents=%d balance_after_cents=%d",
            transaction_id, decision.outcome.value, account_number,
            amount_cents, decision.new_balance_cents,
        )

        return PaymentResult(
            status=decision.outcome.value,
            transaction_id=transaction_id,
            message=APPROVED_MESSAGE if decision.approved else DECLINED_MESSAGE,
            amount=from_cents(amount_cents),
            currency=effective_currency,
            description=description,
            account_number=account_number,
            remaining_balance=from_cents(decision.new_balance_cents),
        )

    async def _decide_and_write(
        self,
        account_number: str,
        amount_cents: int,
    ) -> tuple[Account, Decision]:
        """Fresh read, decision, compare-and-set. Caller holds the account lock."""
        for attempt in range(1, self._max_write_retries + 1):
            account = await self._accounts.get_by_number(account_number)
            if account is None:
                raise AccountNotFoundError(account_number)

            decision = decide(account.balance_cents, amount_cents)
            if not decision.approved:
                return account, decision

            written = await self._accounts.compare_and_set_balance(
                account_number, account.balance_cents, decision.new_balance_cents
            )
            if written:
                return account, decision

            logger.warning(
                "Balance of %s changed before the write, retrying (attempt %d/%d)",
                account_number, attempt, self._max_write_retries,
            )

        raise PersistenceError("The account balance is changing too quickly, please retry.")

    # ------------------------------------------------------------------
    # Manual adjustments
    # ------------------------------------------------------------------

    async def adjust_balance(
        self,
        account_number: str,
        currency: str | None = None,
        balance=None,
        add_balance=None,
    ) -> Account:
        """
        Change an account's currency and/or balance.

        `balance` sets the balance outright; `add_balance` adds a signed
        delta and is recorded in the ledger as a manual top-up. Supplying
        both is rejected.

        The absolute set writes no ledger entry. That asymmetry with
        add_balance is kept as-is and logged.

        Raises:
            ConflictError: Both balance and add_balance supplied.
            ValidationError: Unsupported currency, invalid numbers, or a
                delta that would take the balance below zero or above
                MAX_CENTS.
            AccountNotFoundError: No account with that number.
        """
        if balance is not None and add_balance is not None:
            raise ConflictError('Use "balance" (set) or "addBalance" (add), not both.')
        currency = _check_currency(currency)

        balance_cents = None
        if balance is not None:
            balance_cents = to_cents(balance, message="Invalid balance.", allow_zero=True)
        delta_cents = None
        if add_balance is not None:
            delta_cents = to_cents(
                add_balance,
                message="Invalid top-up amount.",
                allow_zero=True,
                allow_negative=True,
            )

        async with self._locks.hold(account_number):
            if not await self._accounts.exists(account_number):
                raise AccountNotFoundError(account_number)

            account = await self._accounts.apply_adjustment(
                account_number,
                currency=currency,
                balance_cents=balance_cents,
                delta_cents=delta_cents,
            )
            if account is None:
                raise ValidationError(
                    "The adjustment would take the balance below zero or above the maximum."
                )
            decided_at = datetime.now(timezone.utc)

        if balance_cents is not None:
            logger.info(
                "Balance of %s set to %d cents without a ledger entry",
                account_number, balance_cents,
            )

        if delta_cents is not None:
            self._recorder.record(
                LedgerEntry(
                    account_number=account_number,
                    type=(TransactionType.CREDIT if delta_cents >= 0 else TransactionType.DEBIT).value,
                    amount_cents=abs(delta_cents),
                    currency=account.currency,
                    description=TOPUP_DESCRIPTION,
                    source=TransactionSource.MANUAL_TOPUP.value,
                    balance_after_cents=account.balance_cents,
                    merchant_name=self._default_merchant_name,
                    created_at=decided_at,
                )
            )

        return account
