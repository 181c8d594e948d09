"""
Log Entries - Append-only audit trail of user actions.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class LogEntry(SQLModel, table=True):
    __tablename__ = "logs"

    id: Optional[int] = Field(default=None, primary_key=True)
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc), index=True
    )
    user_id: Optional[int] = Field(default=None, foreign_key="users.id", index=True)
    user_name: str = Field(max_length=100)  # snapshot at write time
    action: str = Field(max_length=60)
    details: str = Field(default="", max_length=500)
    type: str = Field(default="info")  # info | success | warning | error
