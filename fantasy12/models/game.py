"""
Games - Matches inside a round, displayed and processed in `order`.
"""
from datetime import datetime
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class Game(SQLModel, table=True):
    __tablename__ = "games"
    __table_args__ = (
        UniqueConstraint("round_id", "order", name="uq_game_round_order"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    round_id: int = Field(foreign_key="rounds.id", index=True)
    team_a: str = Field(max_length=60)
    team_b: str = Field(max_length=60)
    date: datetime
    status: str = Field(default="scheduled")  # scheduled -> live -> finished | cancelled
    order: int
    score_a: Optional[int] = None
    score_b: Optional[int] = None
