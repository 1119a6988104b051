"""
Account service — the account store.

This module handles:
  - Account creation (owner must exist)
  - Account retrieval (single, list, or several rows locked for update)
  - Balance and owner updates
  - Account deletion

None of these functions take locks of their own except lock_accounts().
Balance writes that must not interleave with a transfer go through the
TransferEngine, which holds the per-account lock and owns the database
transaction (see transfer_engine.py).

Deleting an account does not touch the transactions that reference it.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.exceptions import AccountNotFoundError, InvalidOwnerError
from ledger.models.account import Account
from ledger.services.user_service import user_exists

logger = logging.getLogger(__name__)


async def create_account(
    db: AsyncSession,
    user_id: int,
    balance: Decimal = Decimal("0"),
) -> Account:
    """
    Create a new account for an existing user.

    Args:
        db: Database session.
        user_id: The owning user's id.
        balance: Opening balance (defaults to 0).

    Returns:
        The newly created Account instance.

    Raises:
        InvalidOwnerError: If no user with user_id exists. No account is created.
    """
    if not await user_exists(db, user_id):
        raise InvalidOwnerError(user_id)

    account = Account(user_id=user_id, balance=balance)
    db.add(account)
    await db.flush()
    logger.info("Created account %s for user %s", account.id, user_id)
    return account


async def get_account(db: AsyncSession, account_id: int) -> Account:
    """
    Get a single account.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    result = await db.execute(select(Account).where(Account.id == account_id))
    account = result.scalar_one_or_none()

    if account is None:
        raise AccountNotFoundError(account_id)

    return account


async def list_accounts(db: AsyncSession, user_id: int | None = None) -> list[Account]:
    """List all accounts, or only those owned by user_id."""
    query = select(Account).order_by(Account.id)
    if user_id is not None:
        query = query.where(Account.user_id == user_id)

    result = await db.execute(query)
    return list(result.scalars().all())


async def lock_accounts(db: AsyncSession, account_ids: list[int]) -> dict[int, Account]:
    """
    Load several accounts with SELECT ... FOR UPDATE, lowest id first.

    Rows are locked one at a time in ascending id order so that two
    transactions locking the same pair (in either direction) always queue
    on the same first row instead of deadlocking.

    with_for_update() is a no-op on SQLite; there the TransferEngine's
    in-process locks provide the exclusion.

    Returns:
        Mapping of id -> Account for the ids that exist. Missing ids are
        simply absent; the caller decides which error to raise.
    """
    found: dict[int, Account] = {}
    for account_id in sorted(set(account_ids)):
        result = await db.execute(
            select(Account).where(Account.id == account_id).with_for_update()
        )
        account = result.scalar_one_or_none()
        if account is not None:
            found[account_id] = account
    return found


async def set_balance(db: AsyncSession, account_id: int, new_balance: Decimal) -> Account:
    """
    Overwrite an account's balance.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await get_account(db, account_id)
    account.balance = new_balance
    await db.flush()
    return account


async def update_account(
    db: AsyncSession,
    account_id: int,
    user_id: int | None = None,
    balance: Decimal | None = None,
) -> Account:
    """
    Re-assign an account's owner and/or overwrite its balance.

    The owner is validated before anything is written, so a bad user_id
    leaves the account exactly as it was.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
        InvalidOwnerError: If user_id is given and no such user exists.
    """
    account = await get_account(db, account_id)

    if user_id is not None:
        if not await user_exists(db, user_id):
            raise InvalidOwnerError(user_id)
        account.user_id = user_id

    if balance is not None:
        account = await set_balance(db, account_id, balance)

    await db.flush()
    return account


async def delete_account(db: AsyncSession, account_id: int) -> Account:
    """
    Remove an account.

    Transactions naming this account are kept as history.

    Raises:
        AccountNotFoundError: If the account doesn't exist.
    """
    account = await get_account(db, account_id)
    await db.delete(account)
    await db.flush()
    logger.info("Deleted account %s", account_id)
    return account
