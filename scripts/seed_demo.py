"""
Seed demo accounts and one open round with games.

Safe to run repeatedly: existing accounts and rounds are left untouched.
"""
from datetime import datetime, timedelta, timezone
from pathlib import Path

from sqlmodel import Session, select

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in __import__("sys").path:
    __import__("sys").path.insert(0, str(PROJECT_ROOT))

from fantasy12.auth import hash_password
from fantasy12.database import create_db_and_tables, engine
from fantasy12.models import Game, Round, User

DEMO_PASSWORD = "fantasy12"

DEMO_USERS = [
    {"name": "Demo User", "email": "demo@fantasy12.com", "role": "user", "balance": 50, "doubles": 2},
    {"name": "Demo Pro", "email": "pro@fantasy12.com", "role": "pro", "balance": 200,
     "doubles": 5, "super_doubles": 2},
    {"name": "Admin", "email": "admin@fantasy12.com", "role": "admin", "balance": 0},
]

DEMO_ROUND_TITLE = "Rodada Demo"

DEMO_GAMES = [
    ("Flamengo", "Palmeiras"),
    ("Corinthians", "São Paulo"),
    ("Grêmio", "Internacional"),
    ("Atlético-MG", "Cruzeiro"),
    ("Santos", "Vasco"),
    ("Botafogo", "Fluminense"),
    ("Bahia", "Vitória"),
    ("Fortaleza", "Ceará"),
    ("Athletico-PR", "Coritiba"),
    ("Sport", "Náutico"),
    ("Goiás", "Vila Nova"),
    ("Bragantino", "Juventude"),
]


def seed_users(session: Session) -> int:
    """Insert missing demo accounts. Returns how many were created."""
    created = 0
    for data in DEMO_USERS:
        existing = session.exec(select(User).where(User.email == data["email"])).first()
        if existing:
            continue
        session.add(User(password_hash=hash_password(DEMO_PASSWORD), **data))
        created += 1
    session.commit()
    return created


def seed_round(session: Session) -> bool:
    """Insert the open demo round unless it already exists."""
    existing = session.exec(select(Round).where(Round.title == DEMO_ROUND_TITLE)).first()
    if existing:
        return False

    start = datetime.now(timezone.utc).replace(hour=16, minute=0, second=0, microsecond=0)
    round_ = Round(
        title=DEMO_ROUND_TITLE,
        start_date=start,
        end_date=start + timedelta(days=2),
        status="open",
    )
    session.add(round_)
    session.flush()

    for order, (team_a, team_b) in enumerate(DEMO_GAMES, 1):
        session.add(Game(
            round_id=round_.id,
            team_a=team_a,
            team_b=team_b,
            date=start + timedelta(hours=2 * (order - 1)),
            order=order,
        ))
    session.commit()
    return True


def main():
    print("Creating database tables...")
    create_db_and_tables()

    with Session(engine) as session:
        users = seed_users(session)
        print(f"{users} demo accounts created (password: {DEMO_PASSWORD})")
        if seed_round(session):
            print(f"Round '{DEMO_ROUND_TITLE}' created with {len(DEMO_GAMES)} games")
        else:
            print(f"Round '{DEMO_ROUND_TITLE}' already exists")
    print("Done!")


if __name__ == "__main__":
    main()
