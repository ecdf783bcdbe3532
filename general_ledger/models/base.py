"""
Engine, session factory and declarative base for the ledger tables.

Services receive a Session and only flush. The caller (a router,
a test, a script) decides when a unit of work commits.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from general_ledger.config import get_settings

settings = get_settings()


def _connect_args(url: str) -> dict:
    # The SQLite driver refuses cross-thread use unless told otherwise,
    # and FastAPI runs sync endpoints in a threadpool.
    if url.startswith("sqlite"):
        return {"check_same_thread": False}
    return {}


engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args(settings.DATABASE_URL),
)

# A posting touches the entry, its lines and several cached balances;
# nothing reaches the database until a service flushes.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


class Base(DeclarativeBase):
    pass


def get_db():
    """FastAPI dependency yielding one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
