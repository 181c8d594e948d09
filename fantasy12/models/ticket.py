"""
Tickets - One user's full submission for one round.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Ticket(SQLModel, table=True):
    __tablename__ = "tickets"
    __table_args__ = (
        UniqueConstraint("user_id", "round_id", name="uq_ticket_user_round"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(foreign_key="users.id", index=True)
    round_id: int = Field(foreign_key="rounds.id", index=True)
    base_stake: int  # chips charged for the games
    total_cost: int
    doubles_used: int = Field(default=0)
    super_doubles_used: int = Field(default=0)
    points: int = Field(default=0)  # filled in at settlement
    status: str = Field(default="pending")  # pending -> paid -> won | lost
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    settled_at: Optional[datetime] = None
