"""
Rounds - Betting periods grouping a batch of games.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class Round(SQLModel, table=True):
    __tablename__ = "rounds"

    id: Optional[int] = Field(default=None, primary_key=True)
    title: str = Field(max_length=100)
    start_date: datetime
    end_date: datetime
    status: str = Field(default="draft", index=True)  # draft -> open -> closed -> settled
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
