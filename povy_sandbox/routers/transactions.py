"""
Transactions router — ledger history for an account.

  GET /api/accounts/{accountNumber}/transactions — newest first, capped

The history is read straight from the ledger store. It does not check that
the account still exists: entries of deleted accounts remain listable.
"""

from fastapi import APIRouter, Depends

from povy_sandbox.container import Services
from povy_sandbox.dependencies import get_services
from povy_sandbox.schemas.transaction import TransactionResponse

router = APIRouter()


@router.get(
    "/{account_number}/transactions",
    response_model=list[TransactionResponse],
    summary="List an account's transactions",
)
async def list_transactions(
    account_number: str,
    services: Services = Depends(get_services),
):
    """The most recent ledger entries for an account, newest first."""
    return await services.ledger.list_for_account(
        account_number,
        limit=services.settings.TRANSACTION_HISTORY_LIMIT,
    )
