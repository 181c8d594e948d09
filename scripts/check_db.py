"""
Quick script to verify the configured database is reachable.
"""
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import text

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in __import__("sys").path:
    __import__("sys").path.insert(0, str(PROJECT_ROOT))

from fantasy12.config import DATABASE_URL, PGHOST, PGPASSWORD
from fantasy12.database import engine


def check_connection() -> bool:
    """Run a version query through SQLModel's engine."""
    target = DATABASE_URL.split("@")[-1]

    if PGHOST and PGPASSWORD == "{your-password}":
        print("Error: Please replace {your-password} in .env with your actual password.")
        return False

    print(f"Connecting to {target}...")

    try:
        with engine.connect() as conn:
            if engine.dialect.name == "postgresql":
                version = conn.execute(text("SELECT version();")).fetchone()[0]
            else:
                version = conn.execute(text("SELECT sqlite_version();")).fetchone()[0]
    except SQLAlchemyError as e:
        print(f"Connection failed: {e}")
        return False

    print("Connection successful!")
    print(f"{engine.dialect.name} version: {version}")
    return True


if __name__ == "__main__":
    print("=" * 60)
    print("Database Connection Test")
    print("=" * 60)

    ok = check_connection()

    print("=" * 60)
    print("Connection test passed!" if ok else "Connection test failed. Check your settings.")
    print("=" * 60)
    raise SystemExit(0 if ok else 1)
