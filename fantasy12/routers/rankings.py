"""
Rankings router - leaderboards computed from settled tickets.

Rankings are never stored; every request recomputes positions from the
current points.
"""
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session, func, select

from fantasy12.database import get_session
from fantasy12.models import Ticket, User
from fantasy12.rules import Standing, compute_ranking
from fantasy12.schemas import RankingEntryResponse

router = APIRouter(prefix="/rankings", tags=["rankings"])

SETTLED_STATUSES = ("won", "lost")


def standings_for(
    session: Session,
    user_ids: Optional[list[int]] = None,
    ticket_filter=None,
    pro_only: bool = False,
) -> list[Standing]:
    """
    Sum settled ticket points per user.

    With ``user_ids`` the standings follow that order, otherwise active users
    in id order. ``ticket_filter`` narrows the tickets that count.
    """
    points_stmt = (
        select(Ticket.user_id, func.sum(Ticket.points))
        .where(Ticket.status.in_(SETTLED_STATUSES))
        .group_by(Ticket.user_id)
    )
    if ticket_filter is not None:
        points_stmt = points_stmt.where(ticket_filter)
    points = {user_id: total or 0 for user_id, total in session.exec(points_stmt).all()}

    users_stmt = select(User).where(User.is_active == True)  # noqa: E712
    if pro_only:
        users_stmt = users_stmt.where(User.role == "pro")
    if user_ids is not None:
        users_stmt = users_stmt.where(User.id.in_(user_ids))
    users = {u.id: u for u in session.exec(users_stmt.order_by(User.id)).all()}

    ordered_ids = [uid for uid in user_ids if uid in users] if user_ids is not None else list(users)
    return [
        Standing(
            user_id=uid,
            user_name=users[uid].name,
            points=points.get(uid, 0),
            is_pro=users[uid].role == "pro",
        )
        for uid in ordered_ids
    ]


@router.get("", response_model=list[RankingEntryResponse])
def get_rankings(
    scope: Literal["general", "pro"] = "general",
    round_id: Optional[int] = Query(default=None, description="Only count this round"),
    limit: int = Query(default=100, ge=1, le=500),
    session: Session = Depends(get_session),
):
    """
    General or PRO leaderboard.

    Every active user appears, with zero points until a ticket is settled.
    """
    ticket_filter = Ticket.round_id == round_id if round_id is not None else None
    standings = standings_for(session, ticket_filter=ticket_filter, pro_only=scope == "pro")
    ranking = compute_ranking(standings)[:limit]
    return [RankingEntryResponse.model_validate(e) for e in ranking]
