"""
Users - Registered players, their chip balance and power-up inventory.
"""
from datetime import datetime, timezone
from typing import Optional

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    __tablename__ = "users"

    id: Optional[int] = Field(default=None, primary_key=True)
    name: str = Field(max_length=100)
    email: str = Field(index=True, unique=True)
    tax_id: Optional[str] = Field(default=None, index=True, unique=True)  # "123.456.789-00"
    phone: Optional[str] = None
    password_hash: Optional[str] = None  # bcrypt, never leaves the API layer
    role: str = Field(default="user")  # user | pro | admin
    balance: int = Field(default=0, ge=0)  # chips

    # Power-up inventory, sent to clients as a nested "inventory" object
    doubles: int = Field(default=0, ge=0)
    super_doubles: int = Field(default=0, ge=0)

    is_active: bool = Field(default=True)  # soft delete
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
