"""
Application configuration - loads settings from environment variables.
"""
import os
from dotenv import load_dotenv

load_dotenv()

PGHOST = os.getenv("PGHOST")
PGUSER = os.getenv("PGUSER")
PGPORT = os.getenv("PGPORT", "5432")
PGDATABASE = os.getenv("PGDATABASE")
PGPASSWORD = os.getenv("PGPASSWORD")

if all([PGHOST, PGUSER, PGDATABASE, PGPASSWORD]):
    DATABASE_URL = (
        f"postgresql://{PGUSER}:{PGPASSWORD}@{PGHOST}:{PGPORT}/{PGDATABASE}?sslmode=require"
    )
else:
    DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./fantasy12.db")

APP_ENV = os.getenv("APP_ENV", "development")
IS_PRODUCTION = APP_ENV == "production"

# Auth
JWT_SECRET = os.getenv("JWT_SECRET", "fantasy12-dev-secret-change-me")
JWT_ALGORITHM = "HS256"
JWT_EXPIRES_DAYS = int(os.getenv("JWT_EXPIRES_DAYS", "7"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "10"))

# CORS allow-list
DEFAULT_ORIGINS = (
    "http://localhost:5173,"
    "http://localhost:3000,"
    "https://www.fantasy12.com,"
    "https://fantasy12.com"
)
ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", DEFAULT_ORIGINS).split(",")
    if origin.strip()
]

# Game rules
STAKE_PER_GAME = int(os.getenv("STAKE_PER_GAME", "1"))  # chips per game on a ticket
POINTS_PER_HIT = int(os.getenv("POINTS_PER_HIT", "10"))

# Logging
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FILE = os.getenv("LOG_FILE")
