"""
FastAPI dependencies.

The stores and the coordinator are built once in the application lifespan
and stored on app.state. Route handlers receive them through these
dependencies instead of reaching for module-level globals, which is also
how the tests swap in services bound to a throwaway database.
"""

from fastapi import Depends, Request

from povy_sandbox.container import Services
from povy_sandbox.services.balance_coordinator import BalanceCoordinator
from povy_sandbox.stores.accounts import AccountStore


def get_services(request: Request) -> Services:
    return request.app.state.services


def get_account_store(services: Services = Depends(get_services)) -> AccountStore:
    return services.accounts


def get_coordinator(services: Services = Depends(get_services)) -> BalanceCoordinator:
    return services.coordinator
