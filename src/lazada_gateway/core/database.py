"""Database module."""

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from lazada_gateway.core.settings import LazadaSettings

logger = logging.getLogger("database")

DATABASE_URL = LazadaSettings().database_url
if not DATABASE_URL:
    raise RuntimeError("DATABASE_URL is not set in your .env file!")


def make_engine(url: str) -> Engine:
    """Create an engine usable from the worker threads that serve requests."""
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args)


engine: Engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def check_connection(bind: Engine = engine) -> bool:
    """Run a trivial query to confirm the credential database is reachable."""
    try:
        with bind.connect() as conn:
            result = conn.execute(text("SELECT 1"))
            logger.info("Database connection successful: %s", result.scalar())
            return True
    except Exception as e:
        logger.error("Database connection failed: %s", e)
        return False
