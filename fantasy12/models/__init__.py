"""
SQLModel models for the Fantasy12 betting pool.
"""
from fantasy12.models.user import User
from fantasy12.models.round import Round
from fantasy12.models.game import Game
from fantasy12.models.ticket import Ticket
from fantasy12.models.ticket_selection import TicketSelection
from fantasy12.models.pool import Pool
from fantasy12.models.pool_participant import PoolParticipant
from fantasy12.models.purchase import Purchase
from fantasy12.models.transaction import Transaction
from fantasy12.models.log_entry import LogEntry

__all__ = [
    "User",
    "Round",
    "Game",
    "Ticket",
    "TicketSelection",
    "Pool",
    "PoolParticipant",
    "Purchase",
    "Transaction",
    "LogEntry",
]
