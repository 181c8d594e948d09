"""
Users router - profile listing and maintenance.

Users edit their own profile; admins may also change role, balance and
inventory. Accounts are never hard-deleted: DELETE deactivates them.
"""
import logging
from datetime import datetime, timezone
from typing import Literal, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import Session, select

from fantasy12.audit import record_log
from fantasy12.auth import get_current_user, get_optional_user
from fantasy12.database import get_session
from fantasy12.exceptions import Conflict, Forbidden, NotFound, ValidationError
from fantasy12.models import User
from fantasy12.rate_limit import rate_limit
from fantasy12.rules import format_tax_id, validate_tax_id
from fantasy12.schemas import Inventory, MessageResponse, UserResponse
from fantasy12.serializers import inventory_to_columns, user_to_response

router = APIRouter(prefix="/users", tags=["users"])

logger = logging.getLogger(__name__)

PRIVILEGED_FIELDS = ("role", "balance", "inventory")


# --- Request Models ---

class CreateUserRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    phone: Optional[str] = Field(default=None, max_length=30)


class UpdateUserRequest(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(default=None, max_length=30)
    tax_id: Optional[str] = None
    # Admin only
    role: Optional[Literal["user", "pro", "admin"]] = None
    balance: Optional[int] = Field(default=None, ge=0)
    inventory: Optional[Inventory] = None


# --- Utility Functions ---

def get_active_user(session: Session, user_id: int) -> User:
    user = session.get(User, user_id)
    if not user or not user.is_active:
        raise NotFound("User not found")
    return user


# --- Endpoints ---

@router.get("", response_model=list[UserResponse])
def list_users(
    current_user: Optional[User] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    users = session.exec(
        select(User).where(User.is_active == True).order_by(User.name)  # noqa: E712
    ).all()
    logger.info(
        f"Listed {len(users)} users",
        extra={"user_id": current_user.id if current_user else None},
    )
    return [user_to_response(u) for u in users]


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, session: Session = Depends(get_session)):
    return user_to_response(get_active_user(session, user_id))


@router.post(
    "",
    status_code=201,
    response_model=UserResponse,
    dependencies=[Depends(rate_limit("creation"))],
)
def create_user(payload: CreateUserRequest, session: Session = Depends(get_session)):
    """
    Create a user without credentials (admin-style creation).

    The account cannot log in until a password is set through registration.
    """
    email = payload.email.lower()
    existing = session.exec(select(User).where(User.email == email)).first()
    if existing:
        logger.warning(f"Attempt to create user with duplicate email: {email}")
        raise Conflict("Email already registered")

    user = User(name=payload.name.strip(), email=email, phone=payload.phone)
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"User created: {user.email} (ID: {user.id})")
    return user_to_response(user)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    payload: UpdateUserRequest,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """
    Update a profile.

    Only the owner may update it, except admins, who may update anyone and are
    the only ones allowed to change role, balance and inventory.
    """
    is_admin = current_user.role == "admin"
    if current_user.id != user_id and not is_admin:
        logger.warning(f"User {current_user.id} tried to update profile of user {user_id}")
        raise Forbidden("You can only update your own profile")

    changes = payload.model_dump(exclude_unset=True)
    if not is_admin and any(changes.get(field) is not None for field in PRIVILEGED_FIELDS):
        raise Forbidden("Only admins can change role, balance or inventory")

    user = get_active_user(session, user_id)

    if payload.email is not None:
        email = payload.email.lower()
        taken = session.exec(
            select(User).where(User.email == email).where(User.id != user_id)
        ).first()
        if taken:
            logger.warning(f"Attempt to use an email already registered: {email}")
            raise Conflict("Email already registered")
        user.email = email

    if payload.tax_id is not None:
        if not validate_tax_id(payload.tax_id):
            raise ValidationError("Invalid tax id")
        tax_id = format_tax_id(payload.tax_id)
        taken = session.exec(
            select(User).where(User.tax_id == tax_id).where(User.id != user_id)
        ).first()
        if taken:
            raise Conflict("Tax id already registered")
        user.tax_id = tax_id

    if payload.name is not None:
        user.name = payload.name.strip()
    if "phone" in changes:
        user.phone = payload.phone
    if payload.role is not None:
        user.role = payload.role
    if payload.balance is not None:
        user.balance = payload.balance
    if payload.inventory is not None:
        for column, value in inventory_to_columns(payload.inventory).items():
            setattr(user, column, value)

    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"User updated: {user.email} (ID: {user.id})")
    response = user_to_response(user)
    record_log(
        session, current_user, "Profile Update",
        f"Updated {', '.join(sorted(changes)) or 'nothing'} on user {user_id}", "info",
    )
    return response


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    """Deactivate the caller's own account."""
    if current_user.id != user_id:
        logger.warning(f"User {current_user.id} tried to delete account of user {user_id}")
        raise Forbidden("You can only delete your own account")

    user = get_active_user(session, user_id)
    user.is_active = False
    user.updated_at = datetime.now(timezone.utc)
    session.add(user)
    session.commit()

    logger.info(f"User deactivated: {user.email} (ID: {user_id})")
    return MessageResponse(message="Account deleted")
