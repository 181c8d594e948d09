"""
Audit trail helpers.

State-changing operations record one LogEntry each. Entries are written after
the primary change is committed, and a failure to write them is logged and
dropped so it never fails the request that triggered it.
"""
import logging
from typing import Optional

from sqlmodel import Session

from fantasy12.models import LogEntry, User

logger = logging.getLogger(__name__)


def build_log(user: Optional[User], action: str, details: str, type: str = "info") -> LogEntry:
    return LogEntry(
        user_id=user.id if user else None,
        user_name=user.name if user else "System",
        action=action,
        details=details,
        type=type,
    )


def record_log(
    session: Session,
    user: Optional[User],
    action: str,
    details: str,
    type: str = "info",
) -> None:
    """Write an audit entry in its own commit; never raises."""
    try:
        session.add(build_log(user, action, details, type))
        session.commit()
    except Exception:
        session.rollback()
        logger.warning(f"Could not write audit entry '{action}'", exc_info=True)
