"""
Per-account mutual exclusion for the read -> decide -> write sequence.

One asyncio.Lock per account number, created on first use and dropped as
soon as nobody holds or waits on it, so the registry only ever contains
accounts with work in flight. Distinct account numbers never share a lock.
"""

import asyncio
from contextlib import asynccontextmanager


class AccountLocks:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._users: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, account_number: str):
        lock = self._locks.setdefault(account_number, asyncio.Lock())
        self._users[account_number] = self._users.get(account_number, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[account_number] -= 1
            if self._users[account_number] == 0:
                del self._users[account_number]
                del self._locks[account_number]

    def __len__(self) -> int:
        return len(self._locks)
