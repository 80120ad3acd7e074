"""
Database connection and session management.

Provides the SQLAlchemy engine and session factory backing the sql
document store (CONFERENCE_STORE_BACKEND=sql).
"""

import os
from pathlib import Path
from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker


# Load environment variables from .env at the repository root
env_path = Path(__file__).parent.parent.parent.parent / '.env'
if env_path.exists():
    load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.environ.get(
    "CONFERENCE_DB_URL",
    "sqlite:///./conferences.db"
)


def build_engine(database_url: str = DATABASE_URL):
    """
    Create an engine with pool settings suited to the target database.

    SQLite does not support pool_size, max_overflow or pool_recycle, so it
    gets a StaticPool shared across threads instead.
    """
    if database_url.startswith("sqlite"):
        from sqlalchemy.pool import StaticPool
        return create_engine(
            database_url,
            connect_args={'check_same_thread': False},
            poolclass=StaticPool,
            echo=False,
            future=True
        )
    return create_engine(
        database_url,
        pool_size=10,
        max_overflow=5,
        pool_pre_ping=True,
        pool_recycle=3600,
        echo=False,
        future=True
    )


engine = build_engine()

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    future=True
)


def init_db():
    """
    Initialize database tables.

    This should only be called during initial setup or testing.
    For production, use Alembic migrations instead.
    """
    from conference_backend.src.models import Base
    Base.metadata.create_all(bind=engine)


def dispose_engine():
    """Dispose of the engine and close all connections."""
    engine.dispose()
