from __future__ import annotations

from sqlalchemy.orm import Session

from ...repo import get_user_by_username
from ...security import verify_password
from ..users import user_to_dict
from .backend import LoginResult


def authenticate(db: Session, username: str, password: str) -> LoginResult:
    u = get_user_by_username(db, username)
    if not u:
        return LoginResult(success=False, auth="local", details="unknown-user")
    if not verify_password(password, u.password_hash):
        return LoginResult(success=False, auth="local", details="invalid-password")
    return LoginResult(success=True, auth="local", user_data=user_to_dict(u))
