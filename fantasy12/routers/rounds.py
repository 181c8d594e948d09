"""
Rounds router - betting rounds and their games.

Games sent back in an update are matched by id; ids starting with "g-new-"
are placeholders for games created by the admin screen and are inserted.
Moving a round to "settled" scores every ticket of the round in the same
transaction, after which the round can no longer change.
"""
import logging
from datetime import datetime, timezone
from typing import Literal, Optional, Union

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator
from sqlmodel import Session, select

from fantasy12.config import POINTS_PER_HIT
from fantasy12.database import get_session
from fantasy12.exceptions import Conflict, NotFound, ValidationError
from fantasy12.models import Game, Round, Ticket, TicketSelection
from fantasy12.rules import (
    check_game_transition,
    check_round_transition,
    game_outcome,
    selection_multiplier,
    settle_ticket,
)
from fantasy12.schemas import RoundResponse
from fantasy12.serializers import outcomes_from_column, round_to_response
from fantasy12.utils.dates import as_utc

router = APIRouter(prefix="/rounds", tags=["rounds"])

logger = logging.getLogger(__name__)

NEW_GAME_PREFIX = "g-new-"

GameStatus = Literal["scheduled", "live", "finished", "cancelled"]
RoundStatus = Literal["draft", "open", "closed", "settled"]


# --- Request Models ---

class GameCreate(BaseModel):
    team_a: str = Field(min_length=1, max_length=60)
    team_b: str = Field(min_length=1, max_length=60)
    date: datetime
    status: GameStatus = "scheduled"
    order: int = Field(ge=1)
    score_a: Optional[int] = Field(default=None, ge=0)
    score_b: Optional[int] = Field(default=None, ge=0)


class CreateRoundRequest(BaseModel):
    title: str = Field(min_length=1, max_length=100)
    start_date: datetime
    end_date: datetime
    status: Literal["draft", "open", "closed"] = "draft"
    games: list[GameCreate] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_dates(self):
        if as_utc(self.end_date) < as_utc(self.start_date):
            raise ValueError("end_date must not be before start_date")
        return self


class GameUpdate(BaseModel):
    id: Union[int, str]
    team_a: Optional[str] = Field(default=None, min_length=1, max_length=60)
    team_b: Optional[str] = Field(default=None, min_length=1, max_length=60)
    date: Optional[datetime] = None
    status: Optional[GameStatus] = None
    order: Optional[int] = Field(default=None, ge=1)
    score_a: Optional[int] = Field(default=None, ge=0)
    score_b: Optional[int] = Field(default=None, ge=0)


class UpdateRoundRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=100)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[RoundStatus] = None
    games: Optional[list[GameUpdate]] = None


# --- Utility Functions ---

def load_games(session: Session, round_id: int) -> list[Game]:
    return list(session.exec(
        select(Game).where(Game.round_id == round_id).order_by(Game.order)
    ).all())


def get_round_or_404(session: Session, round_id: int) -> Round:
    round_ = session.get(Round, round_id)
    if not round_:
        raise NotFound("Round not found")
    return round_


def check_unique_orders(games) -> None:
    orders = [g.order for g in games]
    if len(orders) != len(set(orders)):
        raise ValidationError("Game order values must be unique within a round")


def park_moved_games(session: Session, moved: list[Game]) -> None:
    """
    Flush reordered games through negative placeholder orders first.

    Rows are updated one at a time, so swapping two orders would otherwise hit
    the (round_id, order) unique constraint halfway through.
    """
    if not moved:
        return
    final_orders = {g.id: g.order for g in moved}
    for game in moved:
        game.order = -game.id
        session.add(game)
    session.flush()
    for game in moved:
        game.order = final_orders[game.id]


def is_new_game(game_id: Union[int, str]) -> bool:
    return isinstance(game_id, str) and game_id.startswith(NEW_GAME_PREFIX)


def apply_game_update(game: Game, update: GameUpdate) -> None:
    if update.status is not None:
        check_game_transition(game.status, update.status)
        game.status = update.status
    for field in ("team_a", "team_b", "date", "order", "score_a", "score_b"):
        value = getattr(update, field)
        if value is not None:
            setattr(game, field, value)


def new_game_from_update(round_id: int, update: GameUpdate) -> Game:
    missing = [f for f in ("team_a", "team_b", "date", "order") if getattr(update, f) is None]
    if missing:
        raise ValidationError(f"New game {update.id} is missing: {', '.join(missing)}")
    return Game(
        round_id=round_id,
        team_a=update.team_a,
        team_b=update.team_b,
        date=update.date,
        status=update.status or "scheduled",
        order=update.order,
        score_a=update.score_a,
        score_b=update.score_b,
    )


def settle_round(session: Session, round_: Round, games: list[Game]) -> int:
    """Score every ticket of the round. Returns the number of tickets settled."""
    results = {}
    for game in games:
        if game.status == "cancelled":
            results[game.id] = None
        elif game.status == "finished" and game.score_a is not None and game.score_b is not None:
            results[game.id] = game_outcome(game.score_a, game.score_b)
        else:
            raise ValidationError(
                "All games must be finished with a score or cancelled before settling"
            )

    now = datetime.now(timezone.utc)
    tickets = session.exec(
        select(Ticket)
        .where(Ticket.round_id == round_.id)
        .where(Ticket.status.in_(["pending", "paid"]))
    ).all()
    for ticket in tickets:
        selections = session.exec(
            select(TicketSelection).where(TicketSelection.ticket_id == ticket.id)
        ).all()
        result = settle_ticket(
            (
                (
                    outcomes_from_column(s.outcomes),
                    selection_multiplier(s.is_double, s.is_super_double),
                    results.get(s.game_id),
                )
                for s in selections
            ),
            points_per_hit=POINTS_PER_HIT,
        )
        for selection, points in zip(selections, result.selection_points):
            selection.points = points
            session.add(selection)
        ticket.points = result.points
        ticket.status = "won" if result.won else "lost"
        ticket.settled_at = now
        session.add(ticket)
    return len(tickets)


# --- Endpoints ---

@router.get("", response_model=list[RoundResponse])
def list_rounds(session: Session = Depends(get_session)):
    """List rounds by start date, each with its games in display order."""
    rounds = session.exec(select(Round).order_by(Round.start_date)).all()
    return [round_to_response(r, load_games(session, r.id)) for r in rounds]


@router.get("/{round_id}", response_model=RoundResponse)
def get_round(round_id: int, session: Session = Depends(get_session)):
    round_ = get_round_or_404(session, round_id)
    return round_to_response(round_, load_games(session, round_id))


@router.post("", response_model=RoundResponse)
def create_round(payload: CreateRoundRequest, session: Session = Depends(get_session)):
    check_unique_orders(payload.games)

    round_ = Round(
        title=payload.title.strip(),
        start_date=payload.start_date,
        end_date=payload.end_date,
        status=payload.status,
    )
    session.add(round_)
    session.flush()

    for game in payload.games:
        session.add(Game(round_id=round_.id, **game.model_dump()))
    session.commit()
    session.refresh(round_)

    logger.info(f"Round created: {round_.title} (ID: {round_.id}, {len(payload.games)} games)")
    return round_to_response(round_, load_games(session, round_.id))


@router.put("/{round_id}", response_model=RoundResponse)
def update_round(
    round_id: int,
    payload: UpdateRoundRequest,
    session: Session = Depends(get_session),
):
    """
    Update a round and upsert its games.

    Existing games are updated in place; games whose id starts with "g-new-"
    are inserted. Setting the status to "settled" settles the round.
    """
    round_ = get_round_or_404(session, round_id)
    if round_.status == "settled":
        raise Conflict("Round is settled and can no longer change")

    if payload.title is not None:
        round_.title = payload.title.strip()
    if payload.start_date is not None:
        round_.start_date = payload.start_date
    if payload.end_date is not None:
        round_.end_date = payload.end_date
    if as_utc(round_.end_date) < as_utc(round_.start_date):
        raise ValidationError("end_date must not be before start_date")

    games = load_games(session, round_id)
    if payload.games:
        by_id = {g.id: g for g in games}
        original_orders = {g.id: g.order for g in games}
        for update in payload.games:
            if is_new_game(update.id):
                game = new_game_from_update(round_id, update)
                games.append(game)
                continue
            try:
                game_id = int(update.id)
            except ValueError:
                raise ValidationError(f"Invalid game id '{update.id}'")
            game = by_id.get(game_id)
            if game is None:
                raise NotFound(f"Game {game_id} not found in this round")
            apply_game_update(game, update)

        check_unique_orders(games)
        moved = [g for g in games if g.id in original_orders and g.order != original_orders[g.id]]
        park_moved_games(session, moved)
        for game in games:
            session.add(game)

    if payload.status is not None and payload.status != round_.status:
        check_round_transition(round_.status, payload.status)
        if payload.status == "settled":
            session.flush()
            settled = settle_round(session, round_, games)
            logger.info(f"Round {round_id} settled: {settled} tickets scored")
        round_.status = payload.status

    round_.updated_at = datetime.now(timezone.utc)
    session.add(round_)
    session.commit()
    session.refresh(round_)

    return round_to_response(round_, load_games(session, round_id))
