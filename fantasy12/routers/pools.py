"""
Pools router - private competitions ("bolões") users can join.

The creator joins automatically. Joining is reserved to PRO users, and the
participant count and prize pool are recomputed from the locked pool row on
every join.
"""
import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field, model_validator
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, func, select

from fantasy12.audit import record_log
from fantasy12.database import get_session
from fantasy12.exceptions import Forbidden, NotFound, ValidationError
from fantasy12.models import Pool, PoolParticipant, Round, Ticket, User
from fantasy12.routers.rankings import standings_for
from fantasy12.rules import compute_pool_prize, compute_ranking
from fantasy12.schemas import PoolResponse, RankingEntryResponse
from fantasy12.serializers import pool_to_response
from fantasy12.utils.dates import as_utc

router = APIRouter(prefix="/pools", tags=["pools"])

logger = logging.getLogger(__name__)


# --- Request Models ---

class CreatePoolRequest(BaseModel):
    title: str = Field(min_length=1, max_length=80)
    entry_fee: int = Field(ge=0, description="Entry fee in chips")
    creator_id: int
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date and self.end_date and as_utc(self.end_date) < as_utc(self.start_date):
            raise ValueError("end_date must not be before start_date")
        return self


class JoinPoolRequest(BaseModel):
    user_id: int


# --- Utility Functions ---

def participant_ids(session: Session, pool_id: int) -> list[int]:
    return list(session.exec(
        select(PoolParticipant.user_id)
        .where(PoolParticipant.pool_id == pool_id)
        .order_by(PoolParticipant.joined_at, PoolParticipant.id)
    ).all())


def get_pool_or_404(session: Session, pool_id: int) -> Pool:
    pool = session.get(Pool, pool_id)
    if not pool:
        raise NotFound("Pool not found")
    return pool


# --- Endpoints ---

@router.get("", response_model=list[PoolResponse])
def list_pools(session: Session = Depends(get_session)):
    pools = session.exec(select(Pool).order_by(Pool.created_at, Pool.id)).all()
    return [pool_to_response(p, participant_ids(session, p.id)) for p in pools]


@router.post("", response_model=PoolResponse)
def create_pool(payload: CreatePoolRequest, session: Session = Depends(get_session)):
    """
    Create a pool. The creator is its first participant and is marked as paid.
    """
    creator = session.get(User, payload.creator_id)
    if not creator or not creator.is_active:
        raise NotFound("Creator not found")

    pool = Pool(
        title=payload.title.strip(),
        creator_id=creator.id,
        creator_name=creator.name,
        entry_fee=payload.entry_fee,
        participants_count=1,
        prize_pool=compute_pool_prize(payload.entry_fee, 1),
        status="open",
        start_date=payload.start_date,
        end_date=payload.end_date,
        description=payload.description,
    )
    session.add(pool)
    session.flush()
    session.add(PoolParticipant(pool_id=pool.id, user_id=creator.id, paid=True))
    session.commit()
    session.refresh(pool)

    logger.info(f"Pool created: {pool.title} (ID: {pool.id}) by user {creator.id}")
    response = pool_to_response(pool, [creator.id])
    record_log(session, creator, "Create Pool", f'Created pool "{pool.title}"', "success")
    return response


@router.post("/{pool_id}/join", response_model=PoolResponse)
def join_pool(
    pool_id: int,
    payload: JoinPoolRequest,
    session: Session = Depends(get_session),
):
    """
    Join a pool.

    The (pool, user) unique constraint rejects double joins, including
    concurrent ones; the counters are only touched after the insert succeeds.
    """
    pool = get_pool_or_404(session, pool_id)
    user = session.get(User, payload.user_id)
    if not user or not user.is_active:
        raise NotFound("User not found")
    if user.role != "pro":
        raise Forbidden("Only PRO users can join pools")
    if pool.status != "open":
        raise ValidationError("Pool is closed")

    try:
        session.add(PoolParticipant(pool_id=pool_id, user_id=user.id, paid=True))
        session.flush()
    except IntegrityError:
        session.rollback()
        logger.warning(f"User {user.id} tried to join pool {pool_id} twice")
        raise ValidationError("User already joined this pool")

    locked = session.exec(
        select(Pool)
        .where(Pool.id == pool_id)
        .with_for_update()
        .execution_options(populate_existing=True)
    ).one()
    locked.participants_count = session.exec(
        select(func.count()).select_from(PoolParticipant).where(PoolParticipant.pool_id == pool_id)
    ).one()
    locked.prize_pool = compute_pool_prize(locked.entry_fee, locked.participants_count)
    session.add(locked)
    session.commit()
    session.refresh(locked)

    logger.info(f"User {user.id} joined pool {pool_id} ({locked.participants_count} participants)")
    response = pool_to_response(locked, participant_ids(session, pool_id))
    record_log(session, user, "Join Pool", f'Joined pool "{locked.title}"', "success")
    return response


@router.get("/{pool_id}/ranking", response_model=list[RankingEntryResponse])
def pool_ranking(pool_id: int, session: Session = Depends(get_session)):
    """
    Rank the participants of a pool by their settled points.

    When the pool has a date window only rounds starting inside it count.
    """
    pool = get_pool_or_404(session, pool_id)
    member_ids = participant_ids(session, pool_id)

    round_filter = None
    if pool.start_date or pool.end_date:
        rounds = select(Round.id)
        if pool.start_date:
            rounds = rounds.where(Round.start_date >= pool.start_date)
        if pool.end_date:
            rounds = rounds.where(Round.start_date <= pool.end_date)
        round_filter = Ticket.round_id.in_(rounds)

    standings = standings_for(session, member_ids, round_filter)
    return [RankingEntryResponse.model_validate(e) for e in compute_ranking(standings)]
