from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import DB_URL, IS_SQLITE

connect_args = {"check_same_thread": False} if IS_SQLITE else {}
engine = create_engine(DB_URL, future=True, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
Base = declarative_base()


def get_session_factory() -> sessionmaker:
    # store and session provider open their own short-lived sessions from this
    return SessionLocal


def now_utc() -> datetime:
    return datetime.now(timezone.utc)


def init_db(bind=None):
    # models must be imported so their tables are registered on Base
    from . import models  # noqa: F401
    Base.metadata.create_all(bind or engine)
