"""
Database engine and session management.

One engine per process; every request gets its own Session through the
``get_session`` dependency, and routers commit or roll back explicitly.
"""
import logging

from sqlmodel import Session, SQLModel, create_engine

from fantasy12.config import DATABASE_URL

logger = logging.getLogger(__name__)

is_sqlite = DATABASE_URL.startswith("sqlite")

# Use check_same_thread only for SQLite
connect_args = {"check_same_thread": False} if is_sqlite else {}

engine_options = {"pool_pre_ping": True}
if not is_sqlite:
    engine_options["pool_recycle"] = 300

engine = create_engine(DATABASE_URL, echo=False, connect_args=connect_args, **engine_options)


def create_db_and_tables():
    """Create every table registered in the SQLModel metadata."""
    import fantasy12.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info(f"{len(SQLModel.metadata.tables)} tables ready")


def get_session():
    """Yield a database session; uncommitted work is discarded on exit."""
    with Session(engine) as session:
        yield session
