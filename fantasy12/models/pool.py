"""
Pools - Private competitions ("bolões") with an entry fee and a prize pool.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Pool(SQLModel, table=True):
    __tablename__ = "pools"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=80)
    creator_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    creator_name: str = Field(max_length=100)
    entry_fee: int = Field(ge=0)  # chips
    participants_count: int = Field(default=0)
    prize_pool: int = Field(default=0)  # entry_fee * participants_count
    status: str = Field(default="open")  # open | closed
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
