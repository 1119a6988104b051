"""
Tests for POST /transactions (atomic money movement between accounts).

These tests verify:
  - A successful transfer returns the recorded transaction and moves funds
  - Each rejection maps to its structured error and changes nothing
  - Concurrent requests can't overdraw the sender
"""

import asyncio
from decimal import Decimal


async def transfer(client, sender, receiver, amount):
    return await client.post(
        "/transactions",
        json={"senderAccount": sender, "receiverAccount": receiver, "amount": amount},
    )


async def balance(client, account_id) -> Decimal:
    response = await client.get(f"/accounts/{account_id}")
    return Decimal(response.json()["account_balance"])


class TestTransferSuccess:

    async def test_transfer_moves_funds(self, client, make_account):
        """A=100, B=50, transfer 30 -> A=70, B=80."""
        a = await make_account("100")
        b = await make_account("50")

        response = await transfer(client, a, b, 30)

        assert response.status_code == 201
        data = response.json()
        assert set(data) == {"id", "senderAccount", "receiverAccount", "amount", "createdAt"}
        assert data["senderAccount"] == a
        assert data["receiverAccount"] == b
        assert Decimal(data["amount"]) == Decimal("30")
        assert await balance(client, a) == Decimal("70")
        assert await balance(client, b) == Decimal("80")

    async def test_amount_accepted_as_string(self, client, make_account):
        a = await make_account("1")
        b = await make_account()

        response = await transfer(client, a, b, "0.99")

        assert response.status_code == 201
        assert response.json()["amount"] == "0.99"
        assert await balance(client, a) == Decimal("0.01")

    async def test_transfer_is_recorded_in_ledger(self, client, make_account):
        a = await make_account("100")
        b = await make_account()

        created = (await transfer(client, a, b, 5)).json()

        fetched = (await client.get(f"/transactions/{created['id']}")).json()
        for field in ("id", "senderAccount", "receiverAccount", "amount"):
            assert fetched[field] == created[field]
        assert fetched["createdAt"]


class TestTransferFailures:

    async def test_same_account(self, client, make_account):
        a = await make_account("100")

        response = await transfer(client, a, a, 10)

        assert response.status_code == 422
        assert response.json()["error_type"] == "same_account"
        assert await balance(client, a) == Decimal("100")

    async def test_insufficient_funds(self, client, make_account):
        """A=10, transfer 50 -> insufficient_funds, balances unchanged, no record."""
        a = await make_account("10")
        b = await make_account("1")

        response = await transfer(client, a, b, 50)

        assert response.status_code == 422
        data = response.json()
        assert data["error_type"] == "insufficient_funds"
        assert Decimal(data["requested"]) == Decimal("50")
        assert Decimal(data["available"]) == Decimal("10")
        assert await balance(client, a) == Decimal("10")
        assert await balance(client, b) == Decimal("1")
        assert (await client.get("/transactions")).json() == []

    async def test_unknown_account(self, client, make_account):
        a = await make_account("100")

        response = await transfer(client, a, 9999, 10)

        assert response.status_code == 404
        assert response.json()["error_type"] == "account_not_found"
        assert (await client.get("/transactions")).json() == []

    async def test_zero_amount(self, client, make_account):
        a = await make_account("100")
        b = await make_account()

        response = await transfer(client, a, b, 0)

        assert response.status_code == 422
        assert response.json()["error_type"] == "invalid_amount"

    async def test_negative_amount(self, client, make_account):
        a = await make_account("100")
        b = await make_account("100")

        response = await transfer(client, a, b, -25)

        assert response.status_code == 422
        assert await balance(client, b) == Decimal("100")

    async def test_oversized_amount(self, client, make_account):
        a = await make_account("100")
        b = await make_account()

        response = await transfer(client, a, b, "1e30")

        assert response.status_code == 422
        assert response.json()["error_type"] == "invalid_amount"
        assert await balance(client, a) == Decimal("100")

    async def test_malformed_body(self, client):
        response = await client.post("/transactions", json={"senderAccount": 1})
        assert response.status_code == 422


class TestTransferConcurrency:

    async def test_concurrent_requests_cannot_double_spend(self, client, make_account):
        a = await make_account("50")
        b = await make_account()
        c = await make_account()

        responses = await asyncio.gather(
            transfer(client, a, b, 50),
            transfer(client, a, c, 50),
        )

        codes = sorted(r.status_code for r in responses)
        assert codes == [201, 422]
        assert await balance(client, a) == Decimal("0")
        assert len((await client.get("/transactions")).json()) == 1
