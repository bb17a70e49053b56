"""
Database engine and session management for the Task Tracker API
"""
import logging
from functools import lru_cache
from typing import Generator

from fastapi import Depends
from sqlalchemy.engine import Engine
from sqlmodel import Session, SQLModel, create_engine

from ..config import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Create an engine for the given URL. SQLite connections may be shared across threads."""
    connect_args = {}
    if database_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(database_url, echo=echo, connect_args=connect_args, pool_pre_ping=True)


@lru_cache
def get_engine() -> Engine:
    """Process-wide engine; the connection pool lives for the lifetime of the process."""
    settings = get_settings()
    engine = build_engine(settings.database_url, echo=settings.database_echo)
    logger.info("Database engine ready url=%s", engine.url.render_as_string(hide_password=True))
    return engine


def create_db_and_tables(engine: Engine) -> None:
    """Create all tables that do not exist yet."""
    # Import models so their tables are registered on the metadata
    from .. import models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session(engine: Engine = Depends(get_engine)) -> Generator[Session, None, None]:
    """Yield a session bound to the engine, closed when the request finishes."""
    with Session(engine) as session:
        yield session


__all__ = [
    "build_engine",
    "get_engine",
    "create_db_and_tables",
    "get_session",
]
