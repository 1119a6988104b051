"""
Transactions router — transfers and the ledger history.

Endpoints:
  POST   /transactions                   — Transfer money between two accounts
  GET    /transactions                   — List transactions (optionally ?accountId=)
  GET    /transactions/{transaction_id}  — Get a single transaction
  DELETE /transactions/{transaction_id}  — Remove a record (balances NOT reversed)

A transfer is atomic: the record, the sender debit and the receiver credit
are committed together or not at all. Rejections come back as structured
errors (see exceptions.py):
  - 422 same_account, invalid_amount, insufficient_funds
  - 404 account_not_found
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db
from ledger.dependencies import get_transfer_engine
from ledger.schemas.transaction import TransactionResponse, TransferRequest
from ledger.services import ledger_service
from ledger.services.transfer_engine import TransferEngine

router = APIRouter()


@router.post(
    "",
    response_model=TransactionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Transfer money between accounts",
)
async def create_transfer(
    request: TransferRequest,
    engine: TransferEngine = Depends(get_transfer_engine),
):
    """
    Move `amount` from `senderAccount` to `receiverAccount`.

    - The two accounts must differ
    - `amount` must be positive with at most two decimal places
    - Both accounts must exist
    - The sender's balance must cover the amount

    Not idempotent: repeating the request performs another transfer.
    """
    return await engine.transfer(
        request.sender_account_id,
        request.receiver_account_id,
        request.amount,
    )


@router.get(
    "",
    response_model=list[TransactionResponse],
    summary="List transactions",
)
async def list_transactions(
    account_id: int | None = Query(
        None, alias="accountId", description="Only transfers sent or received by this account"
    ),
    db: AsyncSession = Depends(get_db),
):
    """List transactions in the order they were recorded."""
    return await ledger_service.list_transactions(db, account_id=account_id)


@router.get(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Get a single transaction",
)
async def get_transaction(transaction_id: int, db: AsyncSession = Depends(get_db)):
    return await ledger_service.get_transaction(db, transaction_id)


@router.delete(
    "/{transaction_id}",
    response_model=TransactionResponse,
    summary="Delete a transaction record",
)
async def delete_transaction(transaction_id: int, db: AsyncSession = Depends(get_db)):
    """
    Remove a transaction from the history and return it.

    This does NOT undo the transfer: both account balances stay as they are.
    """
    return await ledger_service.delete_transaction(db, transaction_id)
