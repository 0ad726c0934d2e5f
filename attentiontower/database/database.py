"""Engine, session factory and declarative base for tower storage.

`DATABASE_URL` selects the backend. Local development runs on a SQLite file;
any other SQLAlchemy URL (PostgreSQL in deployment) gets a small pool sized
from the `DB_*` environment variables.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./attentiontower.db")

SQLITE_PRAGMAS = (
    "PRAGMA foreign_keys=ON",
    "PRAGMA journal_mode=WAL",
)


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def _pool_settings() -> dict:
    return {
        "pool_size": int(os.getenv("DB_POOL_SIZE", "5")),
        "max_overflow": int(os.getenv("DB_MAX_OVERFLOW", "5")),
        "pool_timeout": int(os.getenv("DB_POOL_TIMEOUT_SEC", "30")),
    }


def get_engine_kwargs(database_url: str) -> dict:
    """Keyword arguments for `create_engine`, computed without connecting."""
    kwargs = {
        "echo": os.getenv("DEBUG", "False").lower() == "true",
        "pool_pre_ping": True,
    }
    if _is_sqlite_url(database_url):
        # FastAPI may hand the session to a different worker thread
        kwargs["connect_args"] = {"check_same_thread": False}
    else:
        kwargs.update(_pool_settings())
    return kwargs


def _apply_sqlite_pragmas(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    try:
        for pragma in SQLITE_PRAGMAS:
            cursor.execute(pragma)
    finally:
        cursor.close()


def build_engine(database_url: str) -> Engine:
    """Create an engine; SQLite connections get foreign keys and WAL enabled."""
    built = create_engine(database_url, **get_engine_kwargs(database_url))
    if _is_sqlite_url(database_url):
        event.listen(built, "connect", _apply_sqlite_pragmas)
    return built


engine = build_engine(DATABASE_URL)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Yield a session per request (FastAPI dependency)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the tower tables if they do not exist."""
    # Registers TowerItemDB and UserDB on Base.metadata
    from attentiontower.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
