"""DB schema bootstrap (SQLite).

No Alembic: missing tables are created on start-up.
"""

from __future__ import annotations

from .db import engine
from .models import Base


def ensure_schema() -> None:
    Base.metadata.create_all(bind=engine)
