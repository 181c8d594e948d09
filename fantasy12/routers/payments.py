"""
Payments router - chip purchases.

A purchase creates the Purchase row, its ledger Transaction, the balance
increment and the audit entry in one commit. If any step fails nothing is
kept and the caller gets a generic error.
"""
import logging

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, Field
from sqlmodel import Session

from fantasy12.audit import build_log
from fantasy12.database import get_session
from fantasy12.exceptions import Internal, NotFound
from fantasy12.models import Purchase, Transaction, User
from fantasy12.schemas import UserResponse
from fantasy12.serializers import user_to_response
from fantasy12.wallet import credit

router = APIRouter(prefix="/payments", tags=["payments"])

logger = logging.getLogger(__name__)


class ProcessPaymentRequest(BaseModel):
    user_id: int
    package_type: str = Field(min_length=1, max_length=60, description="e.g. '100 Fichas'")
    price_cents: int = Field(ge=0)
    chips_added: int = Field(gt=0)


def record_ledger_entry(session: Session, purchase: Purchase) -> Transaction:
    entry = Transaction(
        user_id=purchase.user_id,
        type="PURCHASE",
        chips_amount=purchase.chips_added,
        reference_id=f"purchase:{purchase.id}",
        status="CONFIRMED",
    )
    session.add(entry)
    return entry


def process_payment(session: Session, payload: ProcessPaymentRequest) -> User:
    user = session.get(User, payload.user_id)
    if not user or not user.is_active:
        raise NotFound("User not found")

    try:
        purchase = Purchase(
            user_id=user.id,
            package_type=payload.package_type,
            price_cents=payload.price_cents,
            chips_added=payload.chips_added,
            status="CONFIRMED",
        )
        session.add(purchase)
        session.flush()

        credit(session, user.id, chips=payload.chips_added)

        record_ledger_entry(session, purchase)
        session.add(build_log(
            user, "Purchase",
            f"Bought {payload.package_type} (+{payload.chips_added} chips)", "success",
        ))
        session.commit()
    except Exception:
        session.rollback()
        logger.error(f"Payment processing failed for user {payload.user_id}", exc_info=True)
        raise Internal("Payment processing failed")

    session.refresh(user)
    return user


@router.post("/process", response_model=UserResponse)
def process(payload: ProcessPaymentRequest, session: Session = Depends(get_session)):
    user = process_payment(session, payload)
    logger.info(
        f"Purchase confirmed: {payload.package_type} (+{payload.chips_added} chips)",
        extra={"user_id": user.id},
    )
    return user_to_response(user)


@router.post("/stripe")
async def stripe_webhook(request: Request):
    """Placeholder webhook; events are only logged."""
    body = await request.body()
    logger.info(f"Stripe webhook received ({len(body)} bytes)")
    return {"received": True}
