#!/usr/bin/env python
"""
vinscan/database.py

Sets up the SQLAlchemy database connection, session management, and helper functions
for creating tables. Every service function receives the Session explicitly (via
get_db() in the routers), so no component reaches for a process-wide client.

Key Features:
- Loads environment variables from .env at project root
- Handles default SQLite or custom DB URLs
- Provides get_db() for FastAPI dependency injection
- Stores timestamps as ISO8601 UTC strings (UTCDateTime), which keeps record
  dates sortable and range-filterable
- Stores money as integer cents (Money) so balances never pick up float error
- commit_or_rollback() turns storage failures into InternalError after rolling back
"""

import os
import logging
import datetime
from decimal import Decimal, ROUND_HALF_UP

from dotenv import load_dotenv
from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.types import TypeDecorator, String, BigInteger

from vinscan.errors import InternalError

# ------------------------------------------------------------------
# 0) Environment & Logging Setup
# ------------------------------------------------------------------
BASE_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BASE_DIR)

dotenv_path = os.path.join(PROJECT_ROOT, ".env")
load_dotenv(dotenv_path=dotenv_path)

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
logger = logging.getLogger(__name__)
logger.debug(f"Loaded .env from: {dotenv_path}")

# Database file setup
DATABASE_FILE_ENV = os.getenv("DATABASE_FILE", "vinscan/vinscan.db")
DATABASE_FILE = (
    DATABASE_FILE_ENV if os.path.isabs(DATABASE_FILE_ENV)
    else os.path.join(PROJECT_ROOT, DATABASE_FILE_ENV)
)
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{DATABASE_FILE}")
logger.debug(f"DATABASE_URL: {DATABASE_URL}")

# ------------------------------------------------------------------
# 1) SQLAlchemy Engine and Session Setup
# ------------------------------------------------------------------
connect_args = {}
if DATABASE_URL.startswith("sqlite"):
    connect_args["check_same_thread"] = False  # SQLite concurrency

engine = create_engine(DATABASE_URL, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


# ------------------------------------------------------------------
# 2) Custom UTC DateTime
# ------------------------------------------------------------------
class UTCDateTime(TypeDecorator):
    """
    Stores Python datetime objects as ISO8601 strings with 'Z',
    ensuring they are read back as offset-aware UTC datetimes.

    Every value is normalized to UTC with the same layout, so string
    comparison in SQL matches chronological order.
    """
    impl = String
    cache_ok = True

    def process_bind_param(self, value, dialect):
        """Convert Python datetime -> string before saving to DB."""
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=datetime.timezone.utc)
        else:
            value = value.astimezone(datetime.timezone.utc)
        return value.isoformat(timespec="microseconds").replace("+00:00", "Z")

    def process_result_value(self, value, dialect):
        """Convert string -> Python datetime (UTC) after fetching from DB."""
        if value is None:
            return None
        value = value.replace("Z", "+00:00")
        return datetime.datetime.fromisoformat(value)


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


# ------------------------------------------------------------------
# 2b) Exact money amounts
# ------------------------------------------------------------------
CENT = Decimal("0.01")


class Money(TypeDecorator):
    """
    Stores Decimal amounts as whole cents in a BIGINT and reads them back as
    Decimal with 2 places.

    SQLite keeps NUMERIC values as 8-byte floats, which silently changes
    amounts past ~15 significant digits. Integer cents are exact for every
    amount the schemas accept (18 digits, 2 of them decimals).
    """
    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        cents = (Decimal(value) / CENT).to_integral_value(rounding=ROUND_HALF_UP)
        return int(cents)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return (Decimal(value) * CENT).quantize(CENT)


# ------------------------------------------------------------------
# 3) FastAPI Dependency Injection
# ------------------------------------------------------------------
def get_db():
    """
    Provides a DB session for FastAPI routes. Yields a SessionLocal instance
    and closes it after use to prevent leaks.
    """
    db = SessionLocal()
    logger.debug("Created new database session for get_db")
    try:
        yield db
    finally:
        db.close()
        logger.debug("Closed database session in get_db")


def commit_or_rollback(db: Session, action: str) -> None:
    """
    Commit the pending unit of work. On a storage failure nothing of the
    unit stays visible: the session is rolled back and InternalError is raised
    with the backend message.
    """
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Storage failure during {action}: {e}")
        raise InternalError(str(e))


# ------------------------------------------------------------------
# 4) Table Initialization
# ------------------------------------------------------------------
def create_tables(bind=None):
    """
    Initializes all database tables. Idempotent: existing tables and rows
    are left untouched.
    """
    bind = bind or engine
    if DATABASE_URL.startswith("sqlite") and bind is engine:
        db_dir = os.path.dirname(DATABASE_FILE)
        if db_dir and not os.path.exists(db_dir):
            os.makedirs(db_dir)
            logger.debug(f"Created directory: {db_dir}")

    # Import models to register with Base.metadata
    from vinscan.models import user, asset, record  # noqa: F401

    Base.metadata.create_all(bind=bind)
    logger.info("Database tables created or verified.")


if __name__ == "__main__":
    create_tables()
