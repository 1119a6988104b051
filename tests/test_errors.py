"""
Tests for the error-to-response mapping and the health probe.

These tests verify:
  - Store failures surface as 503 store_unavailable, not a crash
  - A store failure during a transfer applies nothing
  - Domain errors carry a detail message and an error_type
"""

from decimal import Decimal
from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from ledger.exceptions import InsufficientFundsError, LedgerError, NotFoundError
from ledger.services import account_service, ledger_service


def _store_down():
    return OperationalError("SELECT 1", {}, Exception("unable to open database file"))


class TestStoreUnavailable:

    async def test_request_scoped_store_failure_returns_503(self, client):
        with patch.object(account_service, "get_account", side_effect=_store_down()):
            response = await client.get("/accounts/1")

        assert response.status_code == 503
        assert response.json()["error_type"] == "store_unavailable"

    async def test_transfer_store_failure_returns_503_and_applies_nothing(
        self, client, make_account, read_balance, count_transactions
    ):
        a = await make_account("100")
        b = await make_account()

        with patch.object(ledger_service, "append", side_effect=_store_down()):
            response = await client.post(
                "/transactions",
                json={"senderAccount": a, "receiverAccount": b, "amount": 10},
            )

        assert response.status_code == 503
        assert response.json()["error_type"] == "store_unavailable"
        assert await read_balance(a) == Decimal("100")
        assert await count_transactions() == 0


class TestDomainErrors:

    def test_not_found_message_names_entity(self):
        error = NotFoundError(5)
        assert error.detail == "Record 5 not found"
        assert isinstance(error, LedgerError)

    def test_insufficient_funds_content(self):
        error = InsufficientFundsError(account_id=1, requested=Decimal("5.00"), available=Decimal("1.50"))
        content = error.to_content()
        assert content["error_type"] == "insufficient_funds"
        assert content["requested"] == "5.00"
        assert content["available"] == "1.50"
        assert "Insufficient funds" in content["detail"]


class TestHealth:

    async def test_health(self, client):
        response = await client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "ok"
