"""
Store router - exchanging chips for power-ups.
"""
import logging

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlmodel import Session

from fantasy12.audit import record_log
from fantasy12.auth import get_current_user
from fantasy12.database import get_session
from fantasy12.exceptions import InsufficientFunds, ValidationError
from fantasy12.models import Transaction, User
from fantasy12.rules import POWERUP_PACKAGES, TicketCost
from fantasy12.schemas import UserResponse
from fantasy12.serializers import user_to_response
from fantasy12.wallet import credit, debit

router = APIRouter(prefix="/store", tags=["store"])

logger = logging.getLogger(__name__)


class RedeemRequest(BaseModel):
    package: str  # key of POWERUP_PACKAGES


@router.get("/packages")
def list_packages():
    return [
        {"package": key, "item": item, "quantity": quantity, "price": price}
        for key, (item, quantity, price) in POWERUP_PACKAGES.items()
    ]


@router.post("/redeem", response_model=UserResponse)
def redeem(
    payload: RedeemRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Debit chips and add the package's power-ups to the caller's inventory."""
    if payload.package not in POWERUP_PACKAGES:
        raise ValidationError(f"Unknown package '{payload.package}'")
    item, quantity, price = POWERUP_PACKAGES[payload.package]

    if current_user.balance < price:
        raise InsufficientFunds(price, current_user.balance)

    debit(session, current_user.id, TicketCost(chips=price, doubles=0, super_doubles=0))
    credit(session, current_user.id, **{item: quantity})
    session.add(Transaction(
        user_id=current_user.id,
        type="POWERUP_EXCHANGE",
        chips_amount=-price,
        reference_id=f"package:{payload.package}",
    ))
    session.commit()
    session.refresh(current_user)

    logger.info(f"Exchanged {price} chips for {payload.package}", extra={"user_id": current_user.id})
    response = user_to_response(current_user)
    record_log(
        session, current_user, "Power-up Exchange",
        f"Exchanged {price} chips for {quantity} {item.replace('_', '-')}", "info",
    )
    return response
