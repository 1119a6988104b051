#!/usr/bin/env python3
"""
Demo seed script — populates a running Ledger API with sample data.

!! NOT FOR PRODUCTION !!
This script creates users with known passwords, funds their accounts with
administrative balance updates, and runs a batch of random transfers
between them. It is intended ONLY for local demos.

Usage:
    # With the API server running on localhost:8000:
    python demo/seed.py

    # Delete the local database file (restart the server afterwards):
    python demo/seed.py --reset

    # Custom server URL / number of transfers:
    python demo/seed.py --base-url http://localhost:9000 --transfers 50
"""

import argparse
import asyncio
import os
import random
from decimal import Decimal

import httpx

# ---------------------------------------------------------------------------
# Demo users
# ---------------------------------------------------------------------------

USERS = [
    {"username": "alice", "email": "alice.chen@example.com", "password": "AliceDemo123!",
     "balances": ["850.00", "5000.00"]},
    {"username": "bob", "email": "bob.martinez@example.com", "password": "BobDemo123!",
     "balances": ["1200.00"]},
    {"username": "carol", "email": "carol.nguyen@example.com", "password": "CarolDemo123!",
     "balances": ["3200.00", "12000.00"]},
    {"username": "dave", "email": "dave.johnson@example.com", "password": "DaveDemo123!",
     "balances": ["600.00"]},
]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def log(msg: str) -> None:
    print(f"  {msg}")


async def create_user(client: httpx.AsyncClient, user: dict) -> int:
    resp = await client.post("/users", json={
        "username": user["username"],
        "email": user["email"],
        "password": user["password"],
    })
    resp.raise_for_status()
    return resp.json()["id"]


async def create_account(client: httpx.AsyncClient, user_id: int, balance: str) -> int:
    resp = await client.post("/accounts", json={"userId": user_id, "account_balance": balance})
    resp.raise_for_status()
    return resp.json()["id"]


async def do_transfer(client: httpx.AsyncClient, sender: int, receiver: int, amount: Decimal) -> dict:
    """Attempt a transfer; rejections are returned, not raised."""
    resp = await client.post("/transactions", json={
        "senderAccount": sender,
        "receiverAccount": receiver,
        "amount": str(amount),
    })
    return resp.json()


async def get_balance(client: httpx.AsyncClient, account_id: int) -> Decimal:
    resp = await client.get(f"/accounts/{account_id}")
    resp.raise_for_status()
    return Decimal(resp.json()["account_balance"])


# ---------------------------------------------------------------------------
# Seed logic
# ---------------------------------------------------------------------------

async def seed(base_url: str, transfers: int) -> None:
    print("\n========================================")
    print("  DEMO SEED — NOT FOR PRODUCTION")
    print("========================================\n")

    async with httpx.AsyncClient(base_url=base_url, timeout=30.0) as client:
        try:
            health = await client.get("/health")
            health.raise_for_status()
        except httpx.HTTPError as exc:
            print(f"  API not reachable at {base_url}: {exc}")
            return

        accounts: list[int] = []
        print("Creating users and accounts...")
        for user in USERS:
            user_id = await create_user(client, user)
            for balance in user["balances"]:
                account_id = await create_account(client, user_id, balance)
                accounts.append(account_id)
                log(f"{user['username']}: account {account_id} opened with {balance}")

        opening_total = sum([await get_balance(client, a) for a in accounts], Decimal("0"))

        print(f"\nRunning {transfers} random transfers...")
        outcomes: dict[str, int] = {}
        for _ in range(transfers):
            sender, receiver = random.sample(accounts, 2)
            amount = Decimal(random.randint(1_00, 900_00)) / 100
            result = await do_transfer(client, sender, receiver, amount)
            outcome = result.get("error_type", "ok")
            outcomes[outcome] = outcomes.get(outcome, 0) + 1
        for outcome, count in sorted(outcomes.items()):
            log(f"{outcome}: {count}")

        closing_total = sum([await get_balance(client, a) for a in accounts], Decimal("0"))

    print("\n========================================")
    print("  SEED COMPLETE")
    print("========================================")
    log(f"Total funds before transfers: {opening_total}")
    log(f"Total funds after transfers:  {closing_total}")
    print()


def reset_database() -> None:
    """Delete the SQLite database file so the server recreates it on restart."""
    db_path = os.path.join(os.path.dirname(__file__), "..", "ledger.db")
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
        epilog="Creates sample users, accounts, and transfers for demos.",
    )
    parser.add_argument(
        "--base-url", default="http://localhost:8000",
        help="Base URL of the running API (default: http://localhost:8000)",
    )
    parser.add_argument(
        "--transfers", type=int, default=25,
        help="Number of random transfers to attempt (default: 25)",
    )
    parser.add_argument(
        "--reset", action="store_true",
        help="Delete the database file and exit (restart server to recreate)",
    )
    args = parser.parse_args()

    if args.reset:
        reset_database()
        return

    await seed(args.base_url, args.transfers)


if __name__ == "__main__":
    asyncio.run(main())
