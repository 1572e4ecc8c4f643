"""Explicit wiring of stores and services, built once per process."""

from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from povy_sandbox.config import Settings
from povy_sandbox.services.balance_coordinator import BalanceCoordinator
from povy_sandbox.services.recorder import TransactionRecorder
from povy_sandbox.stores.accounts import AccountStore
from povy_sandbox.stores.ledger import LedgerStore


@dataclass(slots=True)
class Services:
    settings: Settings
    accounts: AccountStore
    ledger: LedgerStore
    recorder: TransactionRecorder
    coordinator: BalanceCoordinator


def build_services(
    session_factory: async_sessionmaker[AsyncSession],
    settings: Settings,
) -> Services:
    accounts = AccountStore(session_factory)
    ledger = LedgerStore(session_factory)
    recorder = TransactionRecorder(
        ledger,
        max_attempts=settings.LEDGER_MAX_ATTEMPTS,
        retry_delay=settings.LEDGER_RETRY_DELAY_SECONDS,
    )
    coordinator = BalanceCoordinator(
        accounts,
        recorder,
        default_merchant_name=settings.DEFAULT_MERCHANT_NAME,
        max_write_retries=settings.BALANCE_WRITE_MAX_RETRIES,
    )
    return Services(
        settings=settings,
        accounts=accounts,
        ledger=ledger,
        recorder=recorder,
        coordinator=coordinator,
    )
