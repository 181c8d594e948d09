"""
Pool Participants - Membership of users in pools.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class PoolParticipant(SQLModel, table=True):
    __tablename__ = "pool_participants"
    __table_args__ = (
        UniqueConstraint("pool_id", "user_id", name="uq_pool_user"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    pool_id: int = Field(foreign_key="pools.id", index=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    paid: bool = Field(default=False)
    joined_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
