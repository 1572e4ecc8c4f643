"""
Payments router — simulated charges against test accounts.

Endpoints:
  POST /api/payments       — Charge by account number
  POST /api/payments/card  — Charge by card number + expiry + CVV

Both return 200 for approved AND declined payments: insufficient funds is a
normal outcome reported in `status`, not an error. Every attempt that reaches
a decision is recorded in the account's transaction history.
"""

from fastapi import APIRouter, Depends

from povy_sandbox.dependencies import get_coordinator
from povy_sandbox.schemas.payment import (
    CardPaymentRequest,
    CardPaymentResponse,
    PaymentRequest,
    PaymentResponse,
)
from povy_sandbox.services.balance_coordinator import BalanceCoordinator

router = APIRouter()


@router.post(
    "",
    response_model=PaymentResponse,
    summary="Simulate a payment by account number",
)
async def create_payment(
    request: PaymentRequest,
    coordinator: BalanceCoordinator = Depends(get_coordinator),
):
    """
    Charge an account by its number.

    - Approved if the balance covers the amount (the full balance included)
    - Declined otherwise, leaving the balance unchanged
    - **currency** defaults to the account's currency (no conversion)
    """
    return await coordinator.pay_by_account_number(
        request.account_number,
        request.amount,
        currency=request.currency,
        description=request.description,
        merchant_name=request.merchant_name,
    )


@router.post(
    "/card",
    response_model=CardPaymentResponse,
    summary="Simulate a card payment",
)
async def create_card_payment(
    request: CardPaymentRequest,
    coordinator: BalanceCoordinator = Depends(get_coordinator),
):
    """
    Charge the account that holds a card.

    The expiry month/year and CVV must match the card exactly. An unknown
    card returns 404; a known card with wrong details returns 400. Only the
    last four digits of the card are echoed back.
    """
    return await coordinator.pay_by_card(
        request.card_number,
        request.exp_month,
        request.exp_year,
        request.cvv,
        request.amount,
        currency=request.currency,
        description=request.description,
        merchant_name=request.merchant_name,
    )
