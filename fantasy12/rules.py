"""
Domain rules - pure functions with no I/O.

Tax id (CPF) handling, ticket pricing, settlement scoring, leaderboard
ranking and pool prize accumulation. Everything here works on plain values so
it can be used from the routers and tested without a database.
"""
import re
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from fantasy12.config import POINTS_PER_HIT
from fantasy12.exceptions import (
    InsufficientFunds,
    InsufficientInventory,
    ValidationError,
)

HOME = "home"
DRAW = "draw"
AWAY = "away"
OUTCOMES = (HOME, DRAW, AWAY)

ROUND_STATUSES = ("draft", "open", "closed", "settled")

GAME_TRANSITIONS = {
    "scheduled": {"scheduled", "live", "finished", "cancelled"},
    "live": {"live", "finished", "cancelled"},
    "finished": {"finished"},
    "cancelled": {"cancelled"},
}

# package -> (inventory column, quantity, chip price)
POWERUP_PACKAGES = {
    "doubles_1": ("doubles", 1, 4),
    "doubles_3": ("doubles", 3, 10),
    "doubles_10": ("doubles", 10, 20),
    "super_doubles_1": ("super_doubles", 1, 5),
    "super_doubles_4": ("super_doubles", 4, 20),
}

_NON_DIGIT = re.compile(r"\D")
_REPEATED_DIGIT = re.compile(r"^(\d)\1+$")


# --- Tax id (CPF) ---

def validate_tax_id(value: str) -> bool:
    """True for 11 digits that are not all the same digit.

    Punctuation is ignored. The official check digits are not verified.
    """
    digits = _NON_DIGIT.sub("", value or "")
    return len(digits) == 11 and not _REPEATED_DIGIT.match(digits)


def format_tax_id(value: str) -> str:
    """Format digits as ``000.000.000-00``, formatting partial input partially."""
    digits = _NON_DIGIT.sub("", value or "")[:11]
    if len(digits) <= 3:
        return digits
    if len(digits) <= 6:
        return f"{digits[:3]}.{digits[3:]}"
    if len(digits) <= 9:
        return f"{digits[:3]}.{digits[3:6]}.{digits[6:]}"
    return f"{digits[:3]}.{digits[3:6]}.{digits[6:9]}-{digits[9:]}"


# --- Tickets ---

@dataclass(frozen=True)
class TicketCost:
    chips: int
    doubles: int
    super_doubles: int


def normalize_outcomes(outcomes: Iterable[str], is_double: bool, is_super_double: bool) -> list[str]:
    """Validate one selection and return its outcomes in canonical order."""
    picked = set(outcomes)
    unknown = picked - set(OUTCOMES)
    if unknown:
        raise ValidationError(f"Unknown outcome(s): {', '.join(sorted(unknown))}")
    if not picked:
        raise ValidationError("A selection needs at least one outcome")
    if len(picked) > 2:
        raise ValidationError("A selection cannot cover all three outcomes")
    if is_double and is_super_double:
        raise ValidationError("A selection cannot be both double and super-double")
    if len(picked) == 2 and not (is_double or is_super_double):
        raise ValidationError("Two outcomes require a double or super-double")
    return [o for o in OUTCOMES if o in picked]


def selection_multiplier(is_double: bool, is_super_double: bool) -> int:
    if is_super_double:
        return 4
    if is_double:
        return 2
    return 1


def compute_ticket_cost(selections: Sequence, stake_per_game: int) -> TicketCost:
    """Chips are charged per game; power-ups are paid from inventory."""
    return TicketCost(
        chips=len(selections) * stake_per_game,
        doubles=sum(1 for s in selections if s.is_double),
        super_doubles=sum(1 for s in selections if s.is_super_double),
    )


def check_affordability(cost: TicketCost, balance: int, doubles: int, super_doubles: int) -> None:
    if cost.chips > balance:
        raise InsufficientFunds(cost.chips, balance)
    if cost.doubles > doubles:
        raise InsufficientInventory("doubles", cost.doubles, doubles)
    if cost.super_doubles > super_doubles:
        raise InsufficientInventory("super-doubles", cost.super_doubles, super_doubles)


# --- Rounds and settlement ---

def check_round_transition(current: str, new: str) -> None:
    if new not in ROUND_STATUSES:
        raise ValidationError(f"Unknown round status '{new}'")
    if ROUND_STATUSES.index(new) < ROUND_STATUSES.index(current):
        raise ValidationError(f"Round cannot go back from '{current}' to '{new}'")


def check_game_transition(current: str, new: str) -> None:
    if new not in GAME_TRANSITIONS:
        raise ValidationError(f"Unknown game status '{new}'")
    if new not in GAME_TRANSITIONS[current]:
        raise ValidationError(f"Game cannot go from '{current}' to '{new}'")


def game_outcome(score_a: int, score_b: int) -> str:
    if score_a > score_b:
        return HOME
    if score_a < score_b:
        return AWAY
    return DRAW


def score_selection(outcomes: Sequence[str], multiplier: int, result: Optional[str],
                    points_per_hit: int = POINTS_PER_HIT) -> int:
    """Points for one selection; ``result`` is None for a cancelled game."""
    if result is None or result not in outcomes:
        return 0
    return points_per_hit * multiplier


@dataclass(frozen=True)
class TicketResult:
    points: int
    selection_points: list
    won: bool


def settle_ticket(picks: Iterable[tuple], points_per_hit: int = POINTS_PER_HIT) -> TicketResult:
    """Score ``(outcomes, multiplier, result)`` picks.

    A ticket is won when every game that was not cancelled was covered.
    """
    selection_points = []
    won = True
    for outcomes, multiplier, result in picks:
        points = score_selection(outcomes, multiplier, result, points_per_hit)
        selection_points.append(points)
        if result is not None and result not in outcomes:
            won = False
    return TicketResult(sum(selection_points), selection_points, won)


# --- Ranking ---

@dataclass(frozen=True)
class Standing:
    user_id: int
    user_name: str
    points: int
    is_pro: bool


@dataclass(frozen=True)
class RankingEntry:
    user_id: int
    user_name: str
    points: int
    position: int
    is_pro: bool


def compute_ranking(standings: Iterable[Standing]) -> list[RankingEntry]:
    """Order by points descending; ties keep input order and get distinct positions."""
    ordered = sorted(standings, key=lambda s: s.points, reverse=True)
    return [
        RankingEntry(
            user_id=s.user_id,
            user_name=s.user_name,
            points=s.points,
            position=position,
            is_pro=s.is_pro,
        )
        for position, s in enumerate(ordered, 1)
    ]


# --- Pools ---

def compute_pool_prize(entry_fee: int, participant_count: int) -> int:
    return entry_fee * participant_count
