"""
Transactions - Balance-changing ledger entries.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Transaction(SQLModel, table=True):
    __tablename__ = "transactions"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    # PURCHASE | BET_DEBIT | BONUS_CONSUME | REFUND | BOLAO_ENTRY | POWERUP_EXCHANGE
    type: str = Field(index=True)
    chips_amount: int  # signed delta
    reference_id: Optional[str] = None  # e.g. "purchase:12", "ticket:4"
    status: str = Field(default="CONFIRMED")
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
