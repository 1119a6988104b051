"""
Accounts router — account management endpoints.

Endpoints:
  POST   /accounts                — Create an account for an existing user
  GET    /accounts                — List accounts (optionally ?userId=)
  GET    /accounts/{account_id}   — Get account details
  PUT    /accounts/{account_id}   — Re-assign owner and/or set balance
  DELETE /accounts/{account_id}   — Remove an account

The PUT endpoint is the administrative balance update. It goes through the
TransferEngine so it takes the same per-account lock as transfers do.
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.database import get_db
from ledger.dependencies import get_transfer_engine
from ledger.schemas.account import (
    AccountCreateRequest,
    AccountResponse,
    AccountUpdateRequest,
)
from ledger.services import account_service
from ledger.services.transfer_engine import TransferEngine

router = APIRouter()


@router.post(
    "",
    response_model=AccountResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an account",
)
async def create_account(
    request: AccountCreateRequest,
    db: AsyncSession = Depends(get_db),
):
    """
    Create an account owned by `userId`.

    Returns 422 (`invalid_owner`) if the user doesn't exist; no account is
    created in that case. `account_balance` defaults to 0.
    """
    return await account_service.create_account(
        db=db,
        user_id=request.user_id,
        balance=request.balance,
    )


@router.get("", response_model=list[AccountResponse], summary="List accounts")
async def list_accounts(
    user_id: int | None = Query(None, alias="userId", description="Only this user's accounts"),
    db: AsyncSession = Depends(get_db),
):
    return await account_service.list_accounts(db, user_id=user_id)


@router.get(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Get account details",
)
async def get_account(account_id: int, db: AsyncSession = Depends(get_db)):
    """Returns 404 if the account doesn't exist."""
    return await account_service.get_account(db, account_id)


@router.put(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Update an account",
)
async def update_account(
    account_id: int,
    request: AccountUpdateRequest,
    engine: TransferEngine = Depends(get_transfer_engine),
):
    """
    Re-assign the owner (`userId`) and/or overwrite `account_balance`.

    Omitted fields are left unchanged. A `userId` that doesn't resolve to a
    user is rejected with 422 (`invalid_owner`) and nothing is written.
    """
    return await engine.update_account(
        account_id,
        user_id=request.user_id,
        balance=request.balance,
    )


@router.delete(
    "/{account_id}",
    response_model=AccountResponse,
    summary="Delete an account",
)
async def delete_account(account_id: int, db: AsyncSession = Depends(get_db)):
    """
    Delete an account and return the removed record.

    Transactions that reference the account are kept.
    """
    return await account_service.delete_account(db, account_id)
