"""
Purchases - Chip packages bought with real money.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Purchase(SQLModel, table=True):
    __tablename__ = "purchases"

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    package_type: str = Field(max_length=60)
    price_cents: int
    chips_added: int
    status: str = Field(default="PENDING")  # PENDING | CONFIRMED | FAILED
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
