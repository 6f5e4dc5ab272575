from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from sqlalchemy import select
from sqlalchemy.orm import Session

from .db import SessionLocal
from .models import ROLE_ADMIN, SystemSetting, User


@contextmanager
def db_session() -> Session:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def get_user_by_username(db: Session, username: str) -> User | None:
    return db.scalar(select(User).where(User.username == username))


def list_users(db: Session) -> list[User]:
    return list(db.scalars(select(User).order_by(User.name.asc())))


def create_user(db: Session, **fields) -> User:
    u = User(**fields)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


def ensure_bootstrap_admin(db: Session, username: str, password_hash: str) -> None:
    exists = db.scalar(select(User.id).limit(1))
    if exists:
        return
    u = User(username=username, password_hash=password_hash, name="Administrator", role=ROLE_ADMIN)
    db.add(u)
    db.commit()


def get_setting_row(db: Session, key: str) -> SystemSetting | None:
    return db.get(SystemSetting, key)


def list_setting_rows(db: Session) -> list[SystemSetting]:
    return list(db.scalars(select(SystemSetting).order_by(SystemSetting.key)))


def upsert_setting_row(db: Session, key: str, value: str) -> SystemSetting:
    row = db.get(SystemSetting, key)
    if row is None:
        row = SystemSetting(key=key, value=value)
        db.add(row)
    else:
        row.value = value
    row.updated_at = datetime.utcnow()
    db.commit()
    db.refresh(row)
    return row
