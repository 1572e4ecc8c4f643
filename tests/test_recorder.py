"""
Tests for the background ledger recorder.

These tests verify:
  - A transient ledger failure is retried and the entry still lands
  - A persistent failure is logged and abandoned, never raised
  - Unexpected errors are logged and not retried
  - A failing ledger does not change an approved payment or its balance
  - drain() waits for every write still in flight
  - A retried write keeps the timestamp of its payment, so history order holds
"""

import asyncio
import logging

from povy_sandbox.exceptions import PersistenceError
from povy_sandbox.services import account_service
from povy_sandbox.services.balance_coordinator import BalanceCoordinator
from povy_sandbox.services.recorder import TransactionRecorder
from povy_sandbox.stores.ledger import LedgerEntry, LedgerStore

RECORDER_LOGGER = "povy_sandbox.services.recorder"


def _entry() -> LedgerEntry:
    return LedgerEntry(
        account_number="001-12345678",
        type="debit",
        amount_cents=1000,
        currency="USD",
        description="Test payment by account number",
        source="account_payment",
        balance_after_cents=0,
        transaction_id="POVY-1-ABCDEF12",
    )


class FlakyLedger:
    """Fails the first `failures` appends with PersistenceError, then succeeds."""

    def __init__(self, failures=0, error=None, delay=0):
        self.failures = failures
        self.error = error
        self.delay = delay
        self.calls = 0
        self.appended = []

    async def append(self, entry):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.calls <= self.failures:
            raise PersistenceError("The ledger store is unavailable.")
        self.appended.append(entry)
        return entry


class TestRecorderRetries:
    """Tests for retry and give-up behaviour."""

    async def test_successful_write(self):
        ledger = FlakyLedger()
        recorder = TransactionRecorder(ledger, retry_delay=0)

        entry = _entry()
        assert await recorder.record(entry) is True
        assert ledger.appended == [entry]

    async def test_transient_failure_is_retried(self, caplog):
        caplog.set_level(logging.WARNING, logger=RECORDER_LOGGER)
        ledger = FlakyLedger(failures=2)
        recorder = TransactionRecorder(ledger, max_attempts=3, retry_delay=0)

        assert await recorder.record(_entry()) is True
        assert ledger.calls == 3
        assert len(ledger.appended) == 1
        warnings = [r for r in caplog.records if r.levelno == logging.WARNING]
        assert len(warnings) == 2

    async def test_persistent_failure_is_abandoned_and_logged(self, caplog):
        caplog.set_level(logging.WARNING, logger=RECORDER_LOGGER)
        ledger = FlakyLedger(failures=10)
        recorder = TransactionRecorder(ledger, max_attempts=3, retry_delay=0)

        assert await recorder.record(_entry()) is False
        assert ledger.calls == 3
        errors = [r for r in caplog.records if r.levelno == logging.ERROR]
        assert len(errors) == 1
        assert "Abandoned ledger entry" in errors[0].getMessage()
        message = errors[0].getMessage()
        for field in (
            "account_number='001-12345678'",
            "amount_cents=1000",
            "balance_after_cents=0",
            "currency='USD'",
            "description='Test payment by account number'",
            "source='account_payment'",
            "transaction_id='POVY-1-ABCDEF12'",
            "created_at=",
        ):
            assert field in message

    async def test_unexpected_error_is_not_retried(self, caplog):
        caplog.set_level(logging.WARNING, logger=RECORDER_LOGGER)
        ledger = FlakyLedger(error=RuntimeError("disk on fire"))
        recorder = TransactionRecorder(ledger, max_attempts=3, retry_delay=0)

        assert await recorder.record(_entry()) is False
        assert ledger.calls == 1
        assert any(r.exc_info for r in caplog.records)


class TestRecorderDrain:
    """Tests for waiting on background writes."""

    async def test_drain_waits_for_pending_writes(self):
        ledger = FlakyLedger(delay=0.01)
        recorder = TransactionRecorder(ledger, retry_delay=0)

        for _ in range(3):
            recorder.record(_entry())
        assert recorder.pending == 3

        await recorder.drain()
        assert recorder.pending == 0
        assert len(ledger.appended) == 3

    async def test_drain_with_nothing_pending(self):
        recorder = TransactionRecorder(FlakyLedger())
        await recorder.drain()
        assert recorder.pending == 0


class TestLedgerFailureDuringPayment:
    """The payment result is the primary contract; the ledger is secondary."""

    async def test_payment_unaffected_by_ledger_failure(self, services, caplog):
        caplog.set_level(logging.ERROR, logger=RECORDER_LOGGER)
        account = await account_service.create_account(services.accounts, initial_balance=100)
        recorder = TransactionRecorder(FlakyLedger(failures=10), max_attempts=2, retry_delay=0)
        coordinator = BalanceCoordinator(services.accounts, recorder)

        result = await coordinator.pay_by_account_number(account.account_number, 40)

        assert result.status == "approved"
        assert result.remaining_balance == 60
        stored = await services.accounts.get_by_number(account.account_number)
        assert stored.balance_cents == 60_00

        await recorder.drain()
        assert any("Abandoned ledger entry" in r.getMessage() for r in caplog.records)

    async def test_payment_returns_before_ledger_write(self, services):
        account = await account_service.create_account(services.accounts, initial_balance=100)
        ledger = FlakyLedger(delay=0.05)
        recorder = TransactionRecorder(ledger, retry_delay=0)
        coordinator = BalanceCoordinator(services.accounts, recorder)

        result = await coordinator.pay_by_account_number(account.account_number, 10)

        assert result.status == "approved"
        assert ledger.appended == []
        await recorder.drain()
        assert len(ledger.appended) == 1


class _FirstWriteFailsLedger(LedgerStore):
    """A real ledger whose very first append fails once."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.calls = 0

    async def append(self, entry):
        self.calls += 1
        if self.calls == 1:
            raise PersistenceError("The ledger store is unavailable.")
        return await super().append(entry)


class TestHistoryOrderAfterRetry:
    """Entries are ordered by when the payment happened, not when the row landed."""

    async def test_retried_entry_keeps_its_place(self, services, session_factory):
        account = await account_service.create_account(services.accounts, initial_balance=100)
        number = account.account_number
        ledger = _FirstWriteFailsLedger(session_factory)
        recorder = TransactionRecorder(ledger, max_attempts=3, retry_delay=0.05)
        coordinator = BalanceCoordinator(services.accounts, recorder)

        first = await coordinator.pay_by_account_number(number, 10, description="first")
        second = await coordinator.pay_by_account_number(number, 10, description="second")
        await recorder.drain()

        entries = await services.ledger.list_for_account(number)
        assert [e.description for e in entries] == ["second", "first"]
        assert [e.transaction_id for e in entries] == [second.transaction_id, first.transaction_id]
        # The newest entry matches the account's current balance
        stored = await services.accounts.get_by_number(number)
        assert entries[0].balance_after_cents == stored.balance_cents == 80_00
        assert ledger.calls == 3
