"""
Logs router - the audit trail shown on the admin screen.
"""
import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from fantasy12.database import get_session
from fantasy12.exceptions import Internal, ValidationError
from fantasy12.models import LogEntry, User
from fantasy12.schemas import LogResponse
from fantasy12.serializers import log_to_response

router = APIRouter(prefix="/logs", tags=["logs"])

logger = logging.getLogger(__name__)


class CreateLogRequest(BaseModel):
    user_id: Optional[int] = None
    user_name: str = Field(min_length=1, max_length=100)
    action: str = Field(min_length=1, max_length=60)
    details: str = Field(default="", max_length=500)
    type: Literal["info", "success", "warning", "error"] = "info"
    timestamp: Optional[datetime] = None


@router.get("", response_model=list[LogResponse])
def list_logs(
    limit: int = Query(default=100, ge=1, le=100),
    session: Session = Depends(get_session),
):
    """Latest entries first, showing each user's current name."""
    rows = session.exec(
        select(LogEntry, User.name)
        .join(User, LogEntry.user_id == User.id, isouter=True)
        .order_by(LogEntry.timestamp.desc(), LogEntry.id.desc())
        .limit(limit)
    ).all()
    return [log_to_response(log, name) for log, name in rows]


@router.post("", status_code=201, response_model=LogResponse)
def create_log(payload: CreateLogRequest, session: Session = Depends(get_session)):
    if payload.user_id is not None and not session.get(User, payload.user_id):
        raise ValidationError(f"Unknown user {payload.user_id}")

    log = LogEntry(
        user_id=payload.user_id,
        user_name=payload.user_name,
        action=payload.action,
        details=payload.details,
        type=payload.type,
        timestamp=payload.timestamp or datetime.now(timezone.utc),
    )
    try:
        session.add(log)
        session.commit()
    except SQLAlchemyError:
        session.rollback()
        logger.error(f"Could not store log entry '{payload.action}'", exc_info=True)
        raise Internal("Could not store log entry")
    session.refresh(log)
    return log_to_response(log)
