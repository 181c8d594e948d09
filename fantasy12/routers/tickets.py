"""
Tickets router - placing and reviewing bets.

A ticket covers every game of an open round. Chips are charged per game and
doubles / super-doubles are taken from the user's inventory; the debit, the
inventory change, the ledger entry and the ticket itself are one commit.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from fantasy12.audit import record_log
from fantasy12.auth import get_current_user
from fantasy12.config import STAKE_PER_GAME
from fantasy12.database import get_session
from fantasy12.exceptions import Conflict, Forbidden, NotFound, ValidationError
from fantasy12.models import Game, Round, Ticket, TicketSelection, Transaction, User
from fantasy12.rules import check_affordability, compute_ticket_cost, normalize_outcomes
from fantasy12.schemas import TicketResponse
from fantasy12.serializers import outcomes_to_column, ticket_to_response
from fantasy12.wallet import debit

router = APIRouter(tags=["tickets"])

logger = logging.getLogger(__name__)


# --- Request Models ---

class SelectionRequest(BaseModel):
    game_id: int
    outcomes: list[str] = Field(min_length=1, description="home, draw and/or away")
    is_double: bool = False
    is_super_double: bool = False


class PlaceTicketRequest(BaseModel):
    selections: list[SelectionRequest] = Field(min_length=1)


# --- Utility Functions ---

def load_selections(session: Session, ticket_id: int) -> list[TicketSelection]:
    return list(session.exec(
        select(TicketSelection)
        .where(TicketSelection.ticket_id == ticket_id)
        .order_by(TicketSelection.id)
    ).all())


def check_covers_round(selections: list[SelectionRequest], games: list[Game]) -> None:
    """One selection per game of the round, and nothing else."""
    game_ids = [s.game_id for s in selections]
    if len(game_ids) != len(set(game_ids)):
        raise ValidationError("Each game can only be picked once")
    round_game_ids = {g.id for g in games}
    foreign = set(game_ids) - round_game_ids
    if foreign:
        raise ValidationError(f"Games not in this round: {sorted(foreign)}")
    missing = round_game_ids - set(game_ids)
    if missing:
        raise ValidationError(f"Missing picks for games: {sorted(missing)}")


# --- Endpoints ---

@router.post("/rounds/{round_id}/tickets", status_code=201, response_model=TicketResponse)
def place_ticket(
    round_id: int,
    payload: PlaceTicketRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    round_ = session.get(Round, round_id)
    if not round_:
        raise NotFound("Round not found")
    if round_.status != "open":
        raise ValidationError("Round is not open for bets")

    existing = session.exec(
        select(Ticket)
        .where(Ticket.user_id == current_user.id)
        .where(Ticket.round_id == round_id)
    ).first()
    if existing:
        raise Conflict("You already placed a ticket for this round")

    games = list(session.exec(select(Game).where(Game.round_id == round_id)).all())
    if not games:
        raise ValidationError("Round has no games")
    check_covers_round(payload.selections, games)

    outcomes = {
        s.game_id: normalize_outcomes(s.outcomes, s.is_double, s.is_super_double)
        for s in payload.selections
    }
    cost = compute_ticket_cost(payload.selections, STAKE_PER_GAME)
    check_affordability(
        cost, current_user.balance, current_user.doubles, current_user.super_doubles
    )
    debit(session, current_user.id, cost)

    ticket = Ticket(
        user_id=current_user.id,
        round_id=round_id,
        base_stake=cost.chips,
        total_cost=cost.chips,
        doubles_used=cost.doubles,
        super_doubles_used=cost.super_doubles,
        status="pending",
    )
    session.add(ticket)
    session.flush()

    order = {g.id: g.order for g in games}
    for s in sorted(payload.selections, key=lambda s: order[s.game_id]):
        session.add(TicketSelection(
            ticket_id=ticket.id,
            game_id=s.game_id,
            outcomes=outcomes_to_column(outcomes[s.game_id]),
            is_double=s.is_double,
            is_super_double=s.is_super_double,
        ))

    session.add(Transaction(
        user_id=current_user.id,
        type="BET_DEBIT",
        chips_amount=-cost.chips,
        reference_id=f"ticket:{ticket.id}",
    ))
    if cost.doubles or cost.super_doubles:
        session.add(Transaction(
            user_id=current_user.id,
            type="BONUS_CONSUME",
            chips_amount=0,
            reference_id=f"ticket:{ticket.id}",
        ))
    ticket.status = "paid"
    session.add(ticket)

    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        raise Conflict("You already placed a ticket for this round")
    session.refresh(ticket)

    logger.info(
        f"Ticket {ticket.id} placed on round {round_id}: {cost.chips} chips, "
        f"{cost.doubles} doubles, {cost.super_doubles} super-doubles",
        extra={"user_id": current_user.id},
    )
    response = ticket_to_response(ticket, load_selections(session, ticket.id))
    record_log(
        session, current_user, "Place Bet",
        f"Placed a ticket on round {round_.title} ({cost.chips} chips)", "success",
    )
    return response


@router.get("/tickets", response_model=list[TicketResponse])
def list_my_tickets(
    round_id: Optional[int] = Query(default=None),
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    statement = select(Ticket).where(Ticket.user_id == current_user.id)
    if round_id is not None:
        statement = statement.where(Ticket.round_id == round_id)
    tickets = session.exec(statement.order_by(Ticket.created_at.desc())).all()
    return [ticket_to_response(t, load_selections(session, t.id)) for t in tickets]


@router.get("/tickets/{ticket_id}", response_model=TicketResponse)
def get_ticket(
    ticket_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    ticket = session.get(Ticket, ticket_id)
    if not ticket:
        raise NotFound("Ticket not found")
    if ticket.user_id != current_user.id:
        raise Forbidden("You can only view your own tickets")
    return ticket_to_response(ticket, load_selections(session, ticket.id))
