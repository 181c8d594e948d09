"""
Ticket Selections - A prediction for one game on a ticket.
"""
from typing import Optional

from sqlmodel import Field, SQLModel, UniqueConstraint


class TicketSelection(SQLModel, table=True):
    __tablename__ = "ticket_selections"
    __table_args__ = (
        UniqueConstraint("ticket_id", "game_id", name="uq_selection_ticket_game"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)
    ticket_id: int = Field(foreign_key="tickets.id", index=True)
    game_id: int = Field(foreign_key="games.id", index=True)
    outcomes: str = Field(max_length=20)  # "home" or "home,draw"
    is_double: bool = Field(default=False)
    is_super_double: bool = Field(default=False)
    points: int = Field(default=0)
