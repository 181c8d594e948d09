"""
Auth router - registration, login and session endpoints.

Sessions are bearer tokens; logging out is done by the client discarding its
token, the endpoint only records the event.
"""
import logging
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Request
from pydantic import BaseModel, EmailStr, Field
from sqlmodel import Session, or_, select

from fantasy12.audit import record_log
from fantasy12.auth import (
    TokenClaims,
    check_password,
    get_token_claims,
    hash_password,
    issue_token,
)
from fantasy12.database import get_session
from fantasy12.exceptions import Conflict, NotFound, Unauthorized, ValidationError
from fantasy12.models import User
from fantasy12.rate_limit import rate_limit
from fantasy12.rules import format_tax_id, validate_tax_id
from fantasy12.schemas import AuthResponse, MessageResponse, UserResponse
from fantasy12.serializers import user_to_response

router = APIRouter(prefix="/auth", tags=["auth"])

logger = logging.getLogger(__name__)


# --- Request Models ---

class RegisterRequest(BaseModel):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(min_length=6, max_length=128)
    tax_id: Optional[str] = Field(default=None, description="CPF, with or without punctuation")
    phone: Optional[str] = Field(default=None, max_length=30)
    role: Literal["user", "pro"] = "user"


class LoginRequest(BaseModel):
    email: str = Field(min_length=1)
    password: str = Field(min_length=1)


def client_ip(request: Request) -> Optional[str]:
    return request.client.host if request.client else None


# --- Endpoints ---

@router.post(
    "/register",
    status_code=201,
    response_model=AuthResponse,
    dependencies=[Depends(rate_limit("auth"))],
)
def register(
    payload: RegisterRequest,
    request: Request,
    session: Session = Depends(get_session),
):
    """
    Register a new account and open a session for it.

    The tax id is optional but, when given, must be valid and not already in use.
    """
    tax_id = None
    if payload.tax_id:
        if not validate_tax_id(payload.tax_id):
            raise ValidationError("Invalid tax id")
        tax_id = format_tax_id(payload.tax_id)

    email = payload.email.lower()
    conditions = [User.email == email]
    if tax_id:
        conditions.append(User.tax_id == tax_id)
    existing = session.exec(select(User).where(or_(*conditions))).first()
    if existing:
        logger.warning(f"register failed: {email} (duplicate) from {client_ip(request)}")
        if existing.email == email:
            raise Conflict("Email already registered")
        raise Conflict("Tax id already registered")

    user = User(
        name=payload.name.strip(),
        email=email,
        tax_id=tax_id,
        phone=payload.phone,
        password_hash=hash_password(payload.password),
        role=payload.role,
    )
    session.add(user)
    session.commit()
    session.refresh(user)

    logger.info(f"register succeeded: {email} (ID: {user.id}) from {client_ip(request)}")
    response = AuthResponse(user=user_to_response(user), token=issue_token(user.id, user.email))
    record_log(session, user, "Register", f"New account {user.email}", "success")
    return response


@router.post(
    "/login",
    response_model=AuthResponse,
    dependencies=[Depends(rate_limit("auth"))],
)
def login(
    payload: LoginRequest,
    request: Request,
    session: Session = Depends(get_session),
):
    """Exchange email and password for a session token."""
    email = payload.email.strip().lower()
    user = session.exec(select(User).where(User.email == email)).first()

    if not user or not user.is_active:
        logger.warning(f"login failed: {email} (unknown) from {client_ip(request)}")
        raise Unauthorized("Invalid email or password")

    if not user.password_hash:
        logger.warning(f"login failed: {email} (no password on file) from {client_ip(request)}")
        raise Unauthorized("No password registered for this account. Please register.")

    if not check_password(payload.password, user.password_hash):
        logger.warning(f"login failed: {email} (wrong password) from {client_ip(request)}")
        raise Unauthorized("Invalid email or password")

    logger.info(f"login succeeded: {email} from {client_ip(request)}")
    response = AuthResponse(user=user_to_response(user), token=issue_token(user.id, user.email))
    record_log(session, user, "Login", "Signed in", "info")
    return response


@router.get("/me", response_model=UserResponse)
def me(
    claims: TokenClaims = Depends(get_token_claims),
    session: Session = Depends(get_session),
):
    """Return the user behind the bearer token."""
    user = session.get(User, claims.user_id)
    if not user or not user.is_active:
        logger.warning(f"Authenticated user no longer exists: ID {claims.user_id}")
        raise NotFound("User not found")
    return user_to_response(user)


@router.post("/logout", response_model=MessageResponse)
def logout(
    request: Request,
    claims: TokenClaims = Depends(get_token_claims),
):
    logger.info(f"logout succeeded: {claims.email} from {client_ip(request)}")
    return MessageResponse(message="Logged out")
