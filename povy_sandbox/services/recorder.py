"""
Transaction recorder — best-effort, non-blocking ledger writes.

The payment result is the primary contract; the ledger entry is secondary.
record() schedules the write as its own asyncio task and returns at once,
so a slow or failing ledger never delays or fails the caller. The task
retries a bounded number of times with a linearly growing delay, then logs
every field of the entry it had to abandon.

drain() waits for every write still in flight. The application calls it on
shutdown and the tests call it before reading history back.
"""

import asyncio
import logging
from dataclasses import asdict

from povy_sandbox.exceptions import PersistenceError
from povy_sandbox.stores.ledger import LedgerEntry, LedgerStore

logger = logging.getLogger(__name__)


class TransactionRecorder:
    def __init__(
        self,
        ledger: LedgerStore,
        max_attempts: int = 3,
        retry_delay: float = 0.1,
    ) -> None:
        self._ledger = ledger
        self._max_attempts = max(1, max_attempts)
        self._retry_delay = retry_delay
        self._pending: set[asyncio.Task] = set()

    def record(self, entry: LedgerEntry) -> asyncio.Task:
        """Schedule a ledger write. Must be called from a running event loop."""
        task = asyncio.create_task(self._write(entry))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return task

    @property
    def pending(self) -> int:
        return len(self._pending)

    async def drain(self) -> None:
        """Wait until every scheduled write has finished or given up."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def _write(self, entry: LedgerEntry) -> bool:
        for attempt in range(1, self._max_attempts + 1):
            try:
                await self._ledger.append(entry)
                return True
            except PersistenceError as exc:
                logger.warning(
                    "Ledger write for %s failed (attempt %d/%d): %s",
                    entry.account_number, attempt, self._max_attempts, exc.__cause__ or exc,
                )
            except Exception:
                # Never let a ledger problem escape into the event loop
                logger.exception("Unexpected error writing ledger entry for %s", entry.account_number)
                break

            if attempt < self._max_attempts:
                await asyncio.sleep(self._retry_delay * attempt)

        logger.error(
            "Abandoned ledger entry: %s",
            " ".join(f"{name}={value!r}" for name, value in asdict(entry).items()),
        )
        return False
