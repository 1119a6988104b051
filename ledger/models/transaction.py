"""
Transaction model — one executed transfer, kept as a historical fact.

A row is written by the transfer engine in the same database transaction
as the sender debit and receiver credit, and is never updated afterwards.

Key fields:
  - sender_account_id / receiver_account_id: the two accounts involved.
    These are plain indexed columns, not foreign keys: deleting an account
    leaves its history readable.
  - amount_cents: the value moved from sender to receiver, in integer
    cents. `amount` is its Decimal view.
  - created_at: server-assigned timestamp

Deleting a row removes the record only. It does NOT put the money back;
balances are never derived from this table.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base
from ledger.money import from_cents, to_cents


class Transaction(Base):
    __tablename__ = "transactions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    sender_account_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    receiver_account_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    amount_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    @property
    def amount(self) -> Decimal:
        return from_cents(self.amount_cents)

    @amount.setter
    def amount(self, value: Decimal) -> None:
        self.amount_cents = to_cents(value)
