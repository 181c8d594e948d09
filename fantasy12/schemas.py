"""
Response models shared by several routers.

Request models live next to the endpoint that accepts them.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Inventory(BaseModel):
    doubles: int = Field(default=0, ge=0)
    super_doubles: int = Field(default=0, ge=0)


class UserResponse(BaseModel):
    id: int
    name: str
    email: str
    tax_id: Optional[str] = None
    phone: Optional[str] = None
    role: str
    balance: int
    inventory: Inventory
    created_at: datetime
    updated_at: datetime


class AuthResponse(BaseModel):
    user: UserResponse
    token: str


class MessageResponse(BaseModel):
    message: str


class GameResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    round_id: int
    team_a: str
    team_b: str
    date: datetime
    status: str
    order: int
    score_a: Optional[int] = None
    score_b: Optional[int] = None


class RoundResponse(BaseModel):
    id: int
    title: str
    start_date: datetime
    end_date: datetime
    status: str
    games: list[GameResponse]


class PoolResponse(BaseModel):
    id: int
    title: str
    creator_id: Optional[int] = None
    creator_name: str
    entry_fee: int
    participants_count: int
    participants: list[int]  # user ids, in join order
    prize_pool: int
    status: str
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    description: Optional[str] = None
    created_at: datetime


class SelectionResponse(BaseModel):
    game_id: int
    outcomes: list[str]
    is_double: bool
    is_super_double: bool
    points: int


class TicketResponse(BaseModel):
    id: int
    user_id: int
    round_id: int
    base_stake: int
    total_cost: int
    doubles_used: int
    super_doubles_used: int
    points: int
    status: str
    created_at: datetime
    settled_at: Optional[datetime] = None
    selections: list[SelectionResponse]


class RankingEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    user_id: int
    user_name: str
    points: int
    position: int
    is_pro: bool


class LogResponse(BaseModel):
    id: int
    timestamp: datetime
    user_id: Optional[int] = None
    user_name: str
    action: str
    details: str
    type: str
