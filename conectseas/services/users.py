from __future__ import annotations

import logging

from sqlalchemy.orm import Session

from ..directory import DirectoryUserRecord
from ..models import ROLE_USER, User
from ..repo import create_user, get_user_by_username
from ..security import unusable_password_hash

log = logging.getLogger(__name__)


def get_or_create_directory_user(db: Session, record: DirectoryUserRecord) -> User:
    """Local user for a directory account; created on first login only."""
    u = get_user_by_username(db, record.account_name)
    if u is not None:
        return u
    u = create_user(
        db,
        username=record.account_name,
        password_hash=unusable_password_hash(),
        name=record.display_name,
        email=record.email,
        role=ROLE_USER,
        department=record.department,
        position=record.title,
        auth_source="ldap",
    )
    log.info("Created new user from LDAP: %s", u.username)
    return u


def user_to_dict(u: User) -> dict:
    return {
        "id": str(u.id),
        "username": u.username,
        "name": u.name,
        "email": u.email,
        "role": u.role,
        "department": u.department,
        "position": u.position,
        "auth_source": u.auth_source,
    }
