"""
Transfer engine — the core financial business logic.

THIS IS THE MOST CRITICAL FILE IN THE PROJECT. It decides whether a money
movement between two accounts is legal and applies it.

Rules, checked in this order (first failure wins):
  1. sender and receiver must differ           -> SameAccountError
  2. amount must be whole cents, positive and  -> InvalidAmountError
     at most 18 digits
     (the positivity check can be switched off, see ALLOW_NON_POSITIVE_TRANSFERS)
  3. sender exists, then receiver exists       -> AccountNotFoundError
  4. sender.balance >= amount                  -> InsufficientFundsError
  5. both resulting balances fit in 18 digits  -> InvalidAmountError

Atomicity:
  The ledger record, the sender debit and the receiver credit are written
  in ONE database transaction (session.begin()). If anything fails, all
  three are rolled back. A rejected transfer writes nothing at all.

Serialization and deadlock prevention:
  A transfer holds exclusive access to both accounts from the balance read
  until after the commit. Two layers provide it, both taken in ascending
  account-id order:
    - AccountLocks: one asyncio.Lock per account id, for writers inside
      this process (this is what protects SQLite, which ignores FOR UPDATE)
    - SELECT ... FOR UPDATE row locks via account_service.lock_accounts(),
      for writers in other processes on PostgreSQL
  Always locking the lower id first means a transfer A->B and a transfer
  B->A queue on the same lock instead of each holding one and waiting for
  the other.

The engine owns its sessions: it is constructed with a session factory
rather than reaching for a global one, so tests can hand it an isolated
in-memory database.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from decimal import Decimal, InvalidOperation

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ledger.exceptions import (
    AccountNotFoundError,
    InsufficientFundsError,
    InvalidAmountError,
    SameAccountError,
    StoreUnavailableError,
)
from ledger.models.account import Account
from ledger.models.transaction import Transaction
from ledger.money import CENT, MAX_DIGITS, fits, to_cents
from ledger.services import account_service, ledger_service

logger = logging.getLogger(__name__)


class AccountLocks:
    """
    In-process exclusive locks keyed by account id.

    An entry lives only while some task holds or waits for it; the last one
    out removes it, so ids that are never used again (or never existed)
    don't accumulate.
    """

    def __init__(self):
        self._locks: dict[int, asyncio.Lock] = {}
        self._users: dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    def _checkout(self, account_id: int) -> asyncio.Lock:
        lock = self._locks.get(account_id)
        if lock is None:
            lock = self._locks[account_id] = asyncio.Lock()
        self._users[account_id] = self._users.get(account_id, 0) + 1
        return lock

    def _checkin(self, account_id: int) -> None:
        remaining = self._users[account_id] - 1
        if remaining:
            self._users[account_id] = remaining
        else:
            del self._users[account_id]
            del self._locks[account_id]

    @asynccontextmanager
    async def hold(self, *account_ids: int):
        """Acquire the locks for all given ids, lowest id first."""
        ids = sorted(set(account_ids))
        # Registered before the first await so no entry is dropped under a waiter
        locks = [self._checkout(account_id) for account_id in ids]
        acquired: list[asyncio.Lock] = []
        try:
            for lock in locks:
                await lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()
            for account_id in ids:
                self._checkin(account_id)


def normalize_amount(amount, allow_non_positive: bool = False) -> Decimal:
    """
    Coerce a transfer amount to a two-place Decimal.

    Raises:
        InvalidAmountError: If the value isn't a finite number, has more
            than two fractional digits, needs more than 18 digits, or is
            <= 0 while non-positive amounts are disallowed.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, ValueError):
        raise InvalidAmountError(amount, "not a number")

    if not value.is_finite():
        raise InvalidAmountError(amount, "not a finite number")
    # Checked before quantizing, which fails past the context precision
    if value and value.adjusted() >= MAX_DIGITS - 2:
        raise InvalidAmountError(amount, f"more than {MAX_DIGITS} digits")
    if value != value.quantize(CENT):
        raise InvalidAmountError(amount, "more than two decimal places")
    if value <= 0 and not allow_non_positive:
        raise InvalidAmountError(amount, "must be greater than zero")

    return value.quantize(CENT)


class TransferEngine:
    """
    Validates and executes transfers between accounts.

    Args:
        session_factory: Produces the AsyncSession each operation runs in.
        locks: Lock registry shared by every writer of account balances in
            this process. A fresh one is created if omitted.
        allow_non_positive_amounts: Accept zero and negative amounts
            instead of rejecting them.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        locks: AccountLocks | None = None,
        allow_non_positive_amounts: bool = False,
    ):
        self.session_factory = session_factory
        self.locks = locks if locks is not None else AccountLocks()
        self.allow_non_positive_amounts = allow_non_positive_amounts

    async def transfer(
        self,
        sender_account_id: int,
        receiver_account_id: int,
        amount,
    ) -> Transaction:
        """
        Move amount from the sender account to the receiver account.

        Not idempotent: calling it twice with the same arguments performs
        two transfers.

        Returns:
            The Transaction recorded for this transfer.

        Raises:
            SameAccountError: sender and receiver are the same account.
            InvalidAmountError: amount is rejected (see normalize_amount).
            AccountNotFoundError: sender or receiver doesn't exist.
            InsufficientFundsError: sender balance is below amount.
            StoreUnavailableError: the database failed; nothing was applied.
        """
        if sender_account_id == receiver_account_id:
            raise SameAccountError(sender_account_id)

        value = normalize_amount(amount, self.allow_non_positive_amounts)

        try:
            async with self.locks.hold(sender_account_id, receiver_account_id):
                async with self.session_factory() as session:
                    async with session.begin():
                        txn = await self._apply(
                            session, sender_account_id, receiver_account_id, value
                        )
        except (AccountNotFoundError, InsufficientFundsError) as exc:
            logger.warning(
                "Transfer %s -> %s of %s rejected: %s",
                sender_account_id, receiver_account_id, value, exc.detail,
            )
            raise
        except SQLAlchemyError as exc:
            logger.error(
                "Transfer %s -> %s of %s failed in the store",
                sender_account_id, receiver_account_id, value, exc_info=exc,
            )
            raise StoreUnavailableError() from exc

        logger.info(
            "Transfer %s: %s -> %s amount %s",
            txn.id, sender_account_id, receiver_account_id, value,
        )
        return txn

    async def _apply(
        self,
        session: AsyncSession,
        sender_account_id: int,
        receiver_account_id: int,
        amount: Decimal,
    ) -> Transaction:
        """Check-and-mutate step; runs with both accounts locked."""
        amount_cents = to_cents(amount)
        accounts = await account_service.lock_accounts(
            session, [sender_account_id, receiver_account_id]
        )

        sender = accounts.get(sender_account_id)
        if sender is None:
            raise AccountNotFoundError(sender_account_id)
        receiver = accounts.get(receiver_account_id)
        if receiver is None:
            raise AccountNotFoundError(receiver_account_id)

        if sender.balance < amount:
            raise InsufficientFundsError(
                account_id=sender_account_id,
                requested=amount,
                available=sender.balance,
            )
        if not fits(receiver.balance_cents + amount_cents) or not fits(
            sender.balance_cents - amount_cents
        ):
            raise InvalidAmountError(amount, "resulting balance out of range")

        txn = await ledger_service.append(
            session, sender_account_id, receiver_account_id, amount
        )
        sender.balance_cents -= amount_cents
        receiver.balance_cents += amount_cents
        await session.flush()
        return txn

    async def update_account(
        self,
        account_id: int,
        user_id: int | None = None,
        balance: Decimal | None = None,
    ) -> Account:
        """
        Administrative update of an account's owner and/or balance.

        Runs under the account's lock and in its own database transaction,
        so it can never land between a transfer's balance check and its
        write.

        Raises:
            AccountNotFoundError: If the account doesn't exist.
            InvalidOwnerError: If user_id is given and doesn't resolve.
            StoreUnavailableError: the database failed; nothing was applied.
        """
        try:
            async with self.locks.hold(account_id):
                async with self.session_factory() as session:
                    async with session.begin():
                        await account_service.lock_accounts(session, [account_id])
                        account = await account_service.update_account(
                            session, account_id, user_id=user_id, balance=balance
                        )
        except SQLAlchemyError as exc:
            logger.error("Update of account %s failed in the store", account_id, exc_info=exc)
            raise StoreUnavailableError() from exc

        if balance is not None:
            logger.info("Account %s balance set to %s by administrative update", account_id, balance)
        if user_id is not None:
            logger.info("Account %s re-assigned to user %s", account_id, user_id)
        return account
