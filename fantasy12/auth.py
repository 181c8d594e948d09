"""
Authentication - password hashing, bearer tokens and FastAPI dependencies.

Tokens are stateless JWTs valid for JWT_EXPIRES_DAYS; there is no revocation
list, logging out only means the client discards its token.
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
import jwt
from fastapi import Depends, Header
from sqlmodel import Session

from fantasy12.config import BCRYPT_ROUNDS, JWT_ALGORITHM, JWT_EXPIRES_DAYS, JWT_SECRET
from fantasy12.database import get_session
from fantasy12.exceptions import Unauthorized
from fantasy12.models.user import User

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    email: str


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode()


def check_password(password: str, credential: str) -> bool:
    """Compare a plain password with a stored bcrypt hash."""
    try:
        return bcrypt.checkpw(password.encode(), credential.encode())
    except ValueError:
        # Stored value is not a bcrypt hash
        return False


def issue_token(user_id: int, email: str) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": user_id,
        "email": email,
        "iat": now,
        "exp": now + timedelta(days=JWT_EXPIRES_DAYS),
    }
    return jwt.encode(payload, JWT_SECRET, algorithm=JWT_ALGORITHM)


def verify_token(token: str) -> TokenClaims:
    try:
        payload = jwt.decode(token, JWT_SECRET, algorithms=[JWT_ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise Unauthorized("Token expired")
    except jwt.InvalidTokenError:
        raise Unauthorized("Invalid token")

    if "user_id" not in payload or "email" not in payload:
        raise Unauthorized("Invalid token")
    return TokenClaims(user_id=payload["user_id"], email=payload["email"])


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization[len("Bearer "):].strip() or None


# --- Dependencies ---

def get_token_claims(authorization: Optional[str] = Header(None)) -> TokenClaims:
    """Require a valid bearer token; the user is not loaded."""
    token = _bearer_token(authorization)
    if token is None:
        raise Unauthorized("Token not provided")
    return verify_token(token)


def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    session: Session = Depends(get_session),
) -> User:
    """Require a valid bearer token belonging to an active user."""
    user = session.get(User, claims.user_id)
    if not user or not user.is_active:
        raise Unauthorized("User not found")
    return user


def get_optional_user(
    authorization: Optional[str] = Header(None),
    session: Session = Depends(get_session),
) -> Optional[User]:
    """Resolve the caller when a valid token is sent, otherwise None."""
    token = _bearer_token(authorization)
    if token is None:
        return None
    try:
        claims = verify_token(token)
    except Unauthorized as e:
        logger.warning(f"Ignoring bad token on optional auth: {e.message}")
        return None
    user = session.get(User, claims.user_id)
    if not user or not user.is_active:
        return None
    return user
