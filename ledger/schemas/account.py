"""
Pydantic schemas for Account endpoints.

The JSON field names are the public contract: `userId` and
`account_balance`. Internally the attributes are user_id and balance; the
aliases translate at the edge.

Balances are Decimals with two fractional digits. They are accepted as
JSON numbers or strings and returned as strings, which keeps them exact.
"""

from decimal import Decimal

from pydantic import BaseModel, Field


class AccountCreateRequest(BaseModel):
    """Request body for POST /accounts."""
    user_id: int = Field(alias="userId", description="Owning user id")
    balance: Decimal = Field(
        default=Decimal("0"),
        alias="account_balance",
        max_digits=18,
        decimal_places=2,
        description="Opening balance",
    )


class AccountUpdateRequest(BaseModel):
    """Request body for PUT /accounts/{id} (all fields optional)."""
    user_id: int | None = Field(None, alias="userId")
    balance: Decimal | None = Field(
        None,
        alias="account_balance",
        max_digits=18,
        decimal_places=2,
    )


class AccountResponse(BaseModel):
    """Public representation of an account: {id, userId, account_balance}."""
    id: int
    user_id: int = Field(serialization_alias="userId")
    balance: Decimal = Field(serialization_alias="account_balance")

    model_config = {"from_attributes": True}
