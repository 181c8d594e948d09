"""
Wallet updates - chip balance and power-up inventory changes.

Changes are issued as single UPDATE statements relative to the stored values,
so concurrent requests for the same user never overwrite each other. Debits
only apply when the stored row still covers them.
"""
from sqlalchemy import update
from sqlmodel import Session, select

from fantasy12.exceptions import InsufficientFunds
from fantasy12.models import User
from fantasy12.rules import TicketCost, check_affordability


def credit(session: Session, user_id: int, chips: int = 0, doubles: int = 0, super_doubles: int = 0) -> None:
    session.exec(
        update(User)
        .where(User.id == user_id)
        .values(
            balance=User.balance + chips,
            doubles=User.doubles + doubles,
            super_doubles=User.super_doubles + super_doubles,
        )
    )


def debit(session: Session, user_id: int, cost: TicketCost) -> None:
    """Take chips and power-ups from the user, or raise if the row cannot cover them."""
    result = session.exec(
        update(User)
        .where(User.id == user_id)
        .where(User.balance >= cost.chips)
        .where(User.doubles >= cost.doubles)
        .where(User.super_doubles >= cost.super_doubles)
        .values(
            balance=User.balance - cost.chips,
            doubles=User.doubles - cost.doubles,
            super_doubles=User.super_doubles - cost.super_doubles,
        )
    )
    if result.rowcount == 1:
        return

    fresh = session.exec(
        select(User).where(User.id == user_id).execution_options(populate_existing=True)
    ).one()
    check_affordability(cost, fresh.balance, fresh.doubles, fresh.super_doubles)
    raise InsufficientFunds(cost.chips, fresh.balance)
