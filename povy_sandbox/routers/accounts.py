"""
Accounts router — test account management.

Endpoints:
  POST   /api/accounts                   — Create a test account with a card
  GET    /api/accounts                   — List accounts, newest first
  GET    /api/accounts/{accountNumber}   — Get one account
  PATCH  /api/accounts/{accountNumber}   — Change currency / set or top up balance
  DELETE /api/accounts/{accountNumber}   — Delete an account (history is kept)

Balance changes made through PATCH go through the BalanceCoordinator, like
payments do, so they serialize with concurrent payments on the same account.
"""

from fastapi import APIRouter, Depends, status

from povy_sandbox.container import Services
from povy_sandbox.dependencies import get_account_store, get_coordinator, get_services
from povy_sandbox.schemas.account import (
    AccountCreateRequest,
    AccountDeletedResponse,
    AccountResponse,
    AccountUpdateRequest,
)
from povy_sandbox.services import account_service
from povy_sandbox.services.balance_coordinator import BalanceCoordinator
from povy_sandbox.stores.accounts import AccountStore

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a test account",
)
async def create_account(
    request: AccountCreateRequest | None = None,
    services: Services = Depends(get_services),
):
    """
    Create a test account with a synthetic card.

    All fields are optional: owner name defaults to "Test user", currency to
    USD (also used for unsupported currencies) and the balance to 10000.
    """
    request = request or AccountCreateRequest()
    return await account_service.create_account(
        services.accounts,
        owner_name=request.owner_name,
        currency=request.currency,
        initial_balance=request.initial_balance,
        default_owner_name=services.settings.DEFAULT_OWNER_NAME,
        default_initial_balance=services.settings.DEFAULT_INITIAL_BALANCE,
    )


@router.get(
    "",
    response_model=list[AccountResponse],
    summary="List test accounts",
)
async def list_accounts(accounts: AccountStore = Depends(get_account_store)):
    """List every test account, newest first."""
    return await account_service.list_accounts(accounts)


@router.get(
    "/{account_number}",
    response_model=AccountResponse,
    summary="Get a test account",
)
async def get_account(
    account_number: str,
    accounts: AccountStore = Depends(get_account_store),
):
    """Returns 404 if no account has this number."""
    return await account_service.get_account(accounts, account_number)


@router.patch(
    "/{account_number}",
    response_model=AccountResponse,
    summary="Update currency or balance",
)
async def update_account(
    account_number: str,
    request: AccountUpdateRequest,
    coordinator: BalanceCoordinator = Depends(get_coordinator),
):
    """
    Update an account's currency and/or balance.

    - **currency**: USD, MXN or JPY
    - **balance**: set the balance to this exact, non-negative value
    - **addBalance**: add a signed amount (recorded as a manual top-up)

    `balance` and `addBalance` cannot be combined.
    """
    return await coordinator.adjust_balance(
        account_number,
        currency=request.currency,
        balance=request.balance,
        add_balance=request.add_balance,
    )


@router.delete(
    "/{account_number}",
    response_model=AccountDeletedResponse,
    summary="Delete a test account",
)
async def delete_account(
    account_number: str,
    accounts: AccountStore = Depends(get_account_store),
):
    """Delete an account. Its transaction history stays readable."""
    deleted = await account_service.delete_account(accounts, account_number)
    return AccountDeletedResponse(
        message="Account deleted.",
        account_number=deleted.account_number,
    )
