#!/usr/bin/env python3
"""
Demo seed script — populates the sandbox with sample accounts and payments.

!! NOT FOR PRODUCTION !!
This script creates test accounts with synthetic cards and simulated
payment history. It is intended ONLY for local demos and frontend
development.

Usage:
    # With the API server running on localhost:4000:
    python demo/seed.py

    # Delete the SQLite database first (restart the server afterwards):
    python demo/seed.py --reset

    # Custom server URL:
    python demo/seed.py --base-url http://localhost:9000
"""

import argparse
import asyncio
import os
import random
import sys

import httpx

BASE_URL = "http://localhost:4000"

# ---------------------------------------------------------------------------
# Demo accounts
# ---------------------------------------------------------------------------

ACCOUNTS = [
    {"ownerName": "Alice Chen", "currency": "USD", "initialBalance": 850.00},
    {"ownerName": "Bruno Martínez", "currency": "MXN", "initialBalance": 12_500.00},
    {"ownerName": "Chika Sato", "currency": "JPY", "initialBalance": 90_000},
    {"ownerName": "Dave Johnson", "currency": "USD", "initialBalance": 60.00},
]

MERCHANTS = [
    "Coffee shop", "Grocery store", "Gas station", "Online subscription",
    "Restaurant", "Bookstore", "Pharmacy", "Movie tickets",
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


async def create_account(client: httpx.AsyncClient, body: dict) -> dict:
    resp = await client.post(f"{BASE_URL}/api/accounts", json=body)
    resp.raise_for_status()
    return resp.json()


async def pay(client: httpx.AsyncClient, account_number: str, amount: float,
              merchant: str) -> dict:
    resp = await client.post(f"{BASE_URL}/api/payments", json={
        "accountNumber": account_number,
        "amount": amount,
        "description": f"Purchase at {merchant}",
        "merchantName": merchant,
    })
    resp.raise_for_status()
    return resp.json()


async def pay_by_card(client: httpx.AsyncClient, card: dict, amount: float) -> dict:
    resp = await client.post(f"{BASE_URL}/api/payments/card", json={
        "cardNumber": card["cardNumber"],
        "expMonth": card["expMonth"],
        "expYear": card["expYear"],
        "cvv": card["cvv"],
        "amount": amount,
        "merchantName": random.choice(MERCHANTS),
    })
    resp.raise_for_status()
    return resp.json()


async def top_up(client: httpx.AsyncClient, account_number: str, amount: float) -> dict:
    resp = await client.patch(
        f"{BASE_URL}/api/accounts/{account_number}",
        json={"addBalance": amount},
    )
    resp.raise_for_status()
    return resp.json()


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str) -> None:
    global BASE_URL
    BASE_URL = base_url

    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(timeout=30.0) as client:
        try:
            health = await client.get(f"{BASE_URL}/health")
            health.raise_for_status()
        except (httpx.ConnectError, httpx.HTTPStatusError):
            print(f"  ERROR: Cannot connect to {BASE_URL}")
            print("  Start the server first: python -m povy_sandbox\n")
            sys.exit(1)

        created: list[dict] = []
        for body in ACCOUNTS:
            account = await create_account(client, body)
            created.append(account)
            print(f"\nCreated {account['ownerName']} ({account['currency']})")
            log(f"Account: {account['accountNumber']}")
            log(f"Card:    {account['card']['cardNumber']} "
                f"{account['card']['expMonth']}/{account['card']['expYear']} "
                f"CVV {account['card']['cvv']}")

            # A handful of payments; small balances will see declines
            for _ in range(random.randint(3, 6)):
                merchant = random.choice(MERCHANTS)
                amount = round(random.uniform(5, 120), 2)
                result = await pay(client, account["accountNumber"], amount, merchant)
                log(f"{result['status']:<8s} {amount:>10,.2f} at {merchant}")

            result = await pay_by_card(client, account["card"], round(random.uniform(5, 40), 2))
            log(f"card {result['status']:<8s} (**** {result['cardLast4']})")

        print("\nTopping up the smallest account...")
        smallest = min(created, key=lambda a: a["balance"])
        topped = await top_up(client, smallest["accountNumber"], 500)
        log(f"{topped['accountNumber']}: balance now {topped['balance']:,.2f}")

        print("\n========================================")
        print("  SEED COMPLETE — Test accounts")
        print("========================================")
        print(f"\n  {'Owner':<20s} {'Account':<14s} {'Card':<18s} {'Balance'}")
        print(f"  {'─' * 20} {'─' * 14} {'─' * 18} {'─' * 10}")
        for account in created:
            resp = await client.get(f"{BASE_URL}/api/accounts/{account['accountNumber']}")
            current = resp.json()
            print(f"  {current['ownerName']:<20s} {current['accountNumber']:<14s} "
                  f"{current['card']['cardNumber']:<18s} {current['balance']:,.2f} {current['currency']}")
        print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "povy_sandbox.db")
    db_path = os.path.normpath(db_path)

    if os.path.exists(db_path):
        os.remove(db_path)
        print(f"\n  Deleted {db_path}")
        print("  Restart the server to recreate empty tables.\n")
    else:
        print(f"\n  No database found at {db_path}\n")


# ---------------------------------------------------------------------------
# CLI
# ---------------------------------------------------------------------------

async def main() -> None:
    parser = argparse.ArgumentParser(
        description="Demo seed script — NOT FOR PRODUCTION",
        epilog="Creates sample test accounts and simulated payments.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:4000",
        help="Base URL of the running API (default: http://localhost:4000)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the SQLite database file and exit",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url)


if __name__ == "__main__":
    asyncio.run(main())
