"""
Custom exception classes and FastAPI exception handlers.

The service layer raises domain-specific errors (like InsufficientFundsError)
without importing HTTP concepts. The handler layer then translates them into
structured JSON responses:

    {"detail": "...", "error_type": "..."}

Rejected transfers, unknown ids and bad owner references are ordinary
outcomes reported to the caller this way. Only StoreUnavailableError (and
any SQLAlchemyError that escapes a service) represents a fault in the
persistence layer; it is surfaced as 503 and retry is left to the caller.

Exception hierarchy:
    LedgerError (base)
    ├── NotFoundError
    │   ├── UserNotFoundError
    │   ├── AccountNotFoundError
    │   └── TransactionNotFoundError
    ├── InvalidOwnerError        — account references a user that doesn't exist
    ├── DuplicateUserError       — username or email already taken
    ├── SameAccountError         — transfer sender == receiver
    ├── InvalidAmountError       — non-positive or sub-cent transfer amount
    ├── InsufficientFundsError   — sender balance below the amount
    └── StoreUnavailableError    — persistence layer failure
"""

import logging
from decimal import Decimal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Base exception
# ---------------------------------------------------------------------------

class LedgerError(Exception):
    """Base exception for all Ledger API domain errors."""

    status_code = 400
    error_type = "ledger_error"

    def __init__(self, detail: str = "An error occurred"):
        self.detail = detail
        super().__init__(self.detail)

    def to_content(self) -> dict:
        return {"detail": self.detail, "error_type": self.error_type}


# ---------------------------------------------------------------------------
# Lookup failures
# ---------------------------------------------------------------------------

class NotFoundError(LedgerError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    error_type = "not_found"
    entity = "Record"

    def __init__(self, entity_id: int):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} {entity_id} not found")


class UserNotFoundError(NotFoundError):
    error_type = "user_not_found"
    entity = "User"


class AccountNotFoundError(NotFoundError):
    error_type = "account_not_found"
    entity = "Account"


class TransactionNotFoundError(NotFoundError):
    error_type = "transaction_not_found"
    entity = "Transaction"


# ---------------------------------------------------------------------------
# Rule violations
# ---------------------------------------------------------------------------

class InvalidOwnerError(LedgerError):
    """Raised when an account is created or updated with an unknown user id."""

    status_code = 422
    error_type = "invalid_owner"

    def __init__(self, user_id: int):
        self.user_id = user_id
        super().__init__(f"User {user_id} does not exist")


class DuplicateUserError(LedgerError):
    """Raised when a username or email is already registered."""

    status_code = 409
    error_type = "duplicate_user"

    def __init__(self, field: str, value: str):
        self.field = field
        self.value = value
        super().__init__(f"A user with {field} {value!r} already exists")


class SameAccountError(LedgerError):
    """Raised when a transfer names the same account as sender and receiver."""

    status_code = 422
    error_type = "same_account"

    def __init__(self, account_id: int):
        self.account_id = account_id
        super().__init__(f"Cannot transfer from account {account_id} to itself")


class InvalidAmountError(LedgerError):
    """Raised when a transfer amount is not a positive whole number of cents."""

    status_code = 422
    error_type = "invalid_amount"

    def __init__(self, amount: Decimal, reason: str):
        self.amount = amount
        super().__init__(f"Invalid transfer amount {amount}: {reason}")


class InsufficientFundsError(LedgerError):
    """
    Raised when the sender's balance cannot cover a transfer.

    Attributes:
        account_id: The account that lacks sufficient funds.
        requested: The amount the caller tried to move.
        available: The current balance of the account.
    """

    status_code = 422
    error_type = "insufficient_funds"

    def __init__(self, account_id: int, requested: Decimal, available: Decimal):
        self.account_id = account_id
        self.requested = requested
        self.available = available
        super().__init__(
            f"Insufficient funds in account {account_id}: "
            f"requested {requested}, available {available}"
        )

    def to_content(self) -> dict:
        content = super().to_content()
        # Strings keep the decimals exact, same as the response schemas
        content["requested"] = str(self.requested)
        content["available"] = str(self.available)
        return content


# ---------------------------------------------------------------------------
# Infrastructure failures
# ---------------------------------------------------------------------------

class StoreUnavailableError(LedgerError):
    """Raised when the persistence layer fails mid-operation."""

    status_code = 503
    error_type = "store_unavailable"

    def __init__(self, detail: str = "The ledger store is unavailable"):
        super().__init__(detail)


# ---------------------------------------------------------------------------
# FastAPI exception handlers
# ---------------------------------------------------------------------------

def register_exception_handlers(app: FastAPI) -> None:
    """
    Register custom exception handlers with the FastAPI application.

    Every LedgerError subclass carries its own status code and error_type,
    so one handler covers the whole hierarchy. Raw SQLAlchemy errors that
    escape a request-scoped service are mapped onto the same shape.

    This is called once during app startup in main.py.
    """

    @app.exception_handler(LedgerError)
    async def ledger_error_handler(request: Request, exc: LedgerError) -> JSONResponse:
        if isinstance(exc, StoreUnavailableError):
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content=exc.to_content())

    @app.exception_handler(IntegrityError)
    async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
        # Lost a race on a unique column (username/email)
        logger.warning("%s %s integrity error: %s", request.method, request.url.path, exc.orig)
        return JSONResponse(
            status_code=409,
            content={"detail": "Conflicting record", "error_type": "conflict"},
        )

    @app.exception_handler(SQLAlchemyError)
    async def store_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
        logger.error(
            "%s %s store failure", request.method, request.url.path, exc_info=exc
        )
        error = StoreUnavailableError()
        return JSONResponse(status_code=error.status_code, content=error.to_content())
