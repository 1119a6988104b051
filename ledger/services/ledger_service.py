"""
Ledger service — the append-only history of executed transfers.

append() is called only by the TransferEngine, inside the same database
transaction that debits the sender and credits the receiver. The other
functions back the /transactions endpoints.

delete_transaction() removes the historical record and nothing else. The
balances the transfer moved stay where they are; callers must not treat
deletion as a reversal.
"""

import logging
from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ledger.exceptions import TransactionNotFoundError
from ledger.models.transaction import Transaction

logger = logging.getLogger(__name__)


async def append(
    db: AsyncSession,
    sender_account_id: int,
    receiver_account_id: int,
    amount: Decimal,
) -> Transaction:
    """Add a transaction record. id and created_at are assigned on flush."""
    txn = Transaction(
        sender_account_id=sender_account_id,
        receiver_account_id=receiver_account_id,
        amount=amount,
    )
    db.add(txn)
    await db.flush()
    return txn


async def get_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
    """
    Get a single transaction by id.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist.
    """
    result = await db.execute(
        select(Transaction).where(Transaction.id == transaction_id)
    )
    txn = result.scalar_one_or_none()

    if txn is None:
        raise TransactionNotFoundError(transaction_id)

    return txn


async def list_transactions(
    db: AsyncSession,
    account_id: int | None = None,
) -> list[Transaction]:
    """
    List transactions in insertion order.

    If account_id is given, only transactions where that account is the
    sender or the receiver are returned.
    """
    query = select(Transaction).order_by(Transaction.id)
    if account_id is not None:
        query = query.where(
            (Transaction.sender_account_id == account_id)
            | (Transaction.receiver_account_id == account_id)
        )

    result = await db.execute(query)
    return list(result.scalars().all())


async def delete_transaction(db: AsyncSession, transaction_id: int) -> Transaction:
    """
    Remove a transaction record without reversing its balance effect.

    Raises:
        TransactionNotFoundError: If the transaction doesn't exist.
    """
    txn = await get_transaction(db, transaction_id)
    await db.delete(txn)
    await db.flush()
    logger.info(
        "Deleted transaction %s (%s -> %s, %s); balances not reversed",
        txn.id, txn.sender_account_id, txn.receiver_account_id, txn.amount,
    )
    return txn
