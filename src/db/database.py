"""Generate database session"""

from functools import lru_cache
from typing import Generator

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from src.core.config import settings
from src.db.schema import Base


@lru_cache
def get_engine() -> Engine:
    settings.ensure_directories()
    connect_args = (
        {"check_same_thread": False}
        if settings.DATABASE_URL.startswith("sqlite")
        else {}
    )
    return create_engine(
        settings.DATABASE_URL, echo=settings.DATABASE_ECHO, connect_args=connect_args
    )


@lru_cache
def get_session_factory() -> sessionmaker[Session]:
    return sessionmaker(autoflush=False, bind=get_engine())


def init_db() -> None:
    """Ensure all tables are created"""
    Base.metadata.create_all(bind=get_engine())


def get_db() -> Generator[Session, None, None]:
    db = get_session_factory()()
    try:
        yield db
    finally:
        db.close()
