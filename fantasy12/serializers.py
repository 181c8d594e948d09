"""
Translation between stored rows and wire models.

The users table keeps the power-up inventory as two flat columns while the API
exposes a nested ``inventory`` object; both directions are handled here so
the table and the wire format can change independently.
"""
from typing import Iterable, Optional

from fantasy12.models import Game, LogEntry, Pool, Round, Ticket, TicketSelection, User
from fantasy12.schemas import (
    GameResponse,
    Inventory,
    LogResponse,
    PoolResponse,
    RoundResponse,
    SelectionResponse,
    TicketResponse,
    UserResponse,
)


def user_to_response(user: User) -> UserResponse:
    """Nest the inventory columns and drop the credential."""
    return UserResponse(
        id=user.id,
        name=user.name,
        email=user.email,
        tax_id=user.tax_id,
        phone=user.phone,
        role=user.role,
        balance=user.balance,
        inventory=Inventory(doubles=user.doubles or 0, super_doubles=user.super_doubles or 0),
        created_at=user.created_at,
        updated_at=user.updated_at,
    )


def inventory_to_columns(inventory: Inventory) -> dict:
    """Flatten an inbound inventory object into User column values."""
    return {"doubles": inventory.doubles, "super_doubles": inventory.super_doubles}


def round_to_response(round_: Round, games: Iterable[Game]) -> RoundResponse:
    return RoundResponse(
        id=round_.id,
        title=round_.title,
        start_date=round_.start_date,
        end_date=round_.end_date,
        status=round_.status,
        games=[GameResponse.model_validate(g) for g in sorted(games, key=lambda g: g.order)],
    )


def pool_to_response(pool: Pool, participant_ids: list[int]) -> PoolResponse:
    return PoolResponse(
        id=pool.id,
        title=pool.title,
        creator_id=pool.creator_id,
        creator_name=pool.creator_name,
        entry_fee=pool.entry_fee,
        participants_count=pool.participants_count,
        participants=participant_ids,
        prize_pool=pool.prize_pool,
        status=pool.status,
        start_date=pool.start_date,
        end_date=pool.end_date,
        description=pool.description,
        created_at=pool.created_at,
    )


def outcomes_to_column(outcomes: list[str]) -> str:
    return ",".join(outcomes)


def outcomes_from_column(value: str) -> list[str]:
    return [o for o in value.split(",") if o]


def ticket_to_response(ticket: Ticket, selections: Iterable[TicketSelection]) -> TicketResponse:
    return TicketResponse(
        id=ticket.id,
        user_id=ticket.user_id,
        round_id=ticket.round_id,
        base_stake=ticket.base_stake,
        total_cost=ticket.total_cost,
        doubles_used=ticket.doubles_used,
        super_doubles_used=ticket.super_doubles_used,
        points=ticket.points,
        status=ticket.status,
        created_at=ticket.created_at,
        settled_at=ticket.settled_at,
        selections=[
            SelectionResponse(
                game_id=s.game_id,
                outcomes=outcomes_from_column(s.outcomes),
                is_double=s.is_double,
                is_super_double=s.is_super_double,
                points=s.points,
            )
            for s in selections
        ],
    )


def log_to_response(log: LogEntry, live_user_name: Optional[str] = None) -> LogResponse:
    """Prefer the user's current name over the snapshot taken at write time."""
    return LogResponse(
        id=log.id,
        timestamp=log.timestamp,
        user_id=log.user_id,
        user_name=live_user_name or log.user_name,
        action=log.action,
        details=log.details,
        type=log.type,
    )
