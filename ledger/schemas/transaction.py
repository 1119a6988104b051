"""
Pydantic schemas for Transaction (transfer) endpoints.

Public field names: senderAccount, receiverAccount, amount, createdAt.

The transfer request does not validate the amount's sign or compare the
two account ids itself. Those are transfer rules, and the engine reports
them as structured errors (same_account, invalid_amount) in a fixed order.
"""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field


class TransferRequest(BaseModel):
    """Request body for POST /transactions."""
    sender_account_id: int = Field(alias="senderAccount")
    receiver_account_id: int = Field(alias="receiverAccount")
    amount: Decimal = Field(description="Amount to move, at most two decimal places")


class TransactionResponse(BaseModel):
    """Public representation of an executed transfer."""
    id: int
    sender_account_id: int = Field(serialization_alias="senderAccount")
    receiver_account_id: int = Field(serialization_alias="receiverAccount")
    amount: Decimal
    created_at: datetime = Field(serialization_alias="createdAt")

    model_config = {"from_attributes": True}
