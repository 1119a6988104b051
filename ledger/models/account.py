"""
Account model — a balance owned by a User.

Balance management:
  The balance is stored as signed integer cents in `balance_cents`, so it is
  exact on every backend. `balance` is the Decimal view of the same value
  (two fractional digits); reading and assigning it converts to and from
  cents.
  It changes only through the transfer engine (transfers and the
  administrative update), which serializes writers per account.

  There is deliberately no non-negativity CHECK constraint. The transfer
  engine refuses to overdraw a sender, but an administrative update may set
  any value.

Owner reference:
  user_id must name an existing User when the account is created or
  re-assigned. The check happens in the service layer; the column carries no
  foreign key, so removing a user never cascades into its accounts.
"""

from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import BigInteger, Integer, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from ledger.database import Base
from ledger.money import from_cents, to_cents


class Account(Base):
    __tablename__ = "accounts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)

    # Owning user (validated on write, no FK)
    user_id: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        index=True,
    )

    # Balance in cents
    balance_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    @property
    def balance(self) -> Decimal:
        return from_cents(self.balance_cents or 0)

    @balance.setter
    def balance(self, value: Decimal) -> None:
        self.balance_cents = to_cents(value)
