from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from sealpad.config import DATABASE_URL, DB_ECHO
from sealpad.models.base import Base
from sealpad.models.note import Note  # noqa: F401  registers the table on Base

# =========================
# ENGINE CONFIGURATION
# =========================

def make_engine(url: str = DATABASE_URL, echo: bool = DB_ECHO) -> Engine:
    """
    Build an engine for the given URL.
    SQLite connections are shared across FastAPI's threadpool, and an
    in-memory database must stay on a single connection or it vanishes.
    """
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in url or url in ("sqlite://", "sqlite:///"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **kwargs)

    return create_engine(
        url,
        pool_pre_ping=True,  # Check connections before using them
        pool_size=5,         # Maintain 5 connections in the pool
        max_overflow=10,     # Allow 10 extra connections if needed
        pool_recycle=3600,   # Recycle connections every hour
        echo=echo,
    )


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


# =========================
# DATABASE FUNCTIONS
# =========================

@contextmanager
def db_session(factory: sessionmaker):
    """
    Transaction scope for one store operation.
    Usage:
        with db_session(factory) as session:
            note = session.get(Note, note_id)
    """
    session: Session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def init_db(engine: Engine):
    """
    Create all tables based on registered models.
    """
    Base.metadata.create_all(bind=engine)
