"""
Tests for transaction history (GET /api/accounts/{accountNumber}/transactions)
and the ledger store behind it.

These tests verify:
  - History is returned newest first
  - History is capped at the configured limit (50 by default)
  - An unknown account has an empty history, not a 404
  - Entries of a deleted account stay listable
  - Entries are never rewritten by later payments
"""

from povy_sandbox.models.transaction import TransactionSource, TransactionType
from povy_sandbox.stores.ledger import LedgerEntry


def _entry(account_number: str, amount_cents: int) -> LedgerEntry:
    return LedgerEntry(
        account_number=account_number,
        type=TransactionType.DEBIT.value,
        amount_cents=amount_cents,
        currency="USD",
        description="Seeded entry",
        source=TransactionSource.ACCOUNT_PAYMENT.value,
        balance_after_cents=0,
    )


class TestTransactionHistory:
    """Tests for the history endpoint."""

    async def test_newest_first(self, client, create_account, history):
        account = await create_account(initialBalance=100)
        number = account["accountNumber"]

        for amount in (10, 20, 30):
            await client.post("/api/payments", json={"accountNumber": number, "amount": amount})
            # Wait for each entry so insertion order is deterministic
            await history(number)

        entries = await history(number)
        assert [e["amount"] for e in entries] == [30, 20, 10]
        assert [e["balanceAfter"] for e in entries] == [40, 70, 90]

    async def test_entry_shape(self, client, create_account, history):
        account = await create_account(initialBalance=100)
        number = account["accountNumber"]
        await client.post("/api/payments", json={"accountNumber": number, "amount": 5})

        entry = (await history(number))[0]
        assert set(entry) == {
            "id", "accountNumber", "type", "amount", "currency", "description",
            "source", "transactionId", "balanceAfter", "merchantName", "createdAt",
        }
        assert entry["accountNumber"] == number

    async def test_unknown_account_has_empty_history(self, history):
        assert await history("001-00000000") == []

    async def test_history_survives_account_deletion(self, client, create_account, history):
        account = await create_account(initialBalance=100)
        number = account["accountNumber"]
        await client.post("/api/payments", json={"accountNumber": number, "amount": 25})
        await client.post("/api/payments", json={"accountNumber": number, "amount": 500})
        await history(number)

        await client.delete(f"/api/accounts/{number}")

        entries = await history(number)
        assert len(entries) == 2
        assert {e["balanceAfter"] for e in entries} == {75}

    async def test_history_capped_at_limit(self, services, create_account, history):
        account = await create_account()
        number = account["accountNumber"]
        for i in range(55):
            await services.ledger.append(_entry(number, i + 1))

        entries = await history(number)
        assert len(entries) == 50
        # The 50 most recent: amounts 55 down to 6
        assert entries[0]["amount"] == 0.55
        assert entries[-1]["amount"] == 0.06

    async def test_history_is_per_account(self, client, create_account, history):
        first = await create_account(initialBalance=100)
        second = await create_account(initialBalance=100)
        await client.post(
            "/api/payments", json={"accountNumber": first["accountNumber"], "amount": 10}
        )

        assert len(await history(first["accountNumber"])) == 1
        assert await history(second["accountNumber"]) == []


class TestLedgerStore:
    """Tests for the append-only store used by the recorder."""

    async def test_list_respects_limit_argument(self, services):
        for i in range(5):
            await services.ledger.append(_entry("001-11111111", 100 + i))

        entries = await services.ledger.list_for_account("001-11111111", limit=2)
        assert [e.amount_cents for e in entries] == [104, 103]

    async def test_earlier_entries_unchanged_by_later_payments(self, client, create_account, history):
        account = await create_account(initialBalance=100)
        number = account["accountNumber"]
        await client.post("/api/payments", json={"accountNumber": number, "amount": 10})
        first = (await history(number))[0]

        await client.post("/api/payments", json={"accountNumber": number, "amount": 20})
        await client.patch(f"/api/accounts/{number}", json={"addBalance": 5})

        entries = await history(number)
        assert len(entries) == 3
        assert entries[-1] == first
