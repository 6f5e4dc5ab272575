from __future__ import annotations

from pathlib import Path

from sqlalchemy import create_engine, event
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from .env_settings import get_env

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_SQLITE_PATH = "data/conectseas.db"


class Base(DeclarativeBase):
    pass


def sqlite_file() -> Path:
    """Database file from SQLITE_PATH; relative paths are taken from the project root."""
    p = Path((get_env().sqlite_path or "").strip() or DEFAULT_SQLITE_PATH)
    if not p.is_absolute():
        p = PROJECT_ROOT / p
    return p.resolve()


def _make_engine():
    path = sqlite_file()
    path.parent.mkdir(parents=True, exist_ok=True)
    # Sync endpoints run in FastAPI's threadpool, so connections cross threads.
    return create_engine(
        f"sqlite:///{path.as_posix()}",
        future=True,
        connect_args={"check_same_thread": False},
    )


engine = _make_engine()


@event.listens_for(engine, "connect")
def _on_connect(dbapi_conn, connection_record):
    cur = dbapi_conn.cursor()
    cur.execute("PRAGMA foreign_keys=ON")
    # Wait for a concurrent writer instead of failing with "database is locked".
    cur.execute("PRAGMA busy_timeout=5000")
    cur.close()


SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False, future=True)
