from __future__ import annotations

from sqlalchemy.orm import Session

from .. import directory as directory_service
from ..settings import LdapSettings
from ..users import get_or_create_directory_user, user_to_dict
from .backend import LoginResult


def authenticate(db: Session, username: str, password: str, settings: LdapSettings) -> LoginResult:
    cfg = directory_service.directory_cfg_from_settings(settings)
    res = directory_service.directory_client(cfg).authenticate(username, password)
    if not res.success or res.user is None:
        reason = res.reason.value if res.reason else "unknown"
        return LoginResult(success=False, auth="ldap", details=f"{reason}: {res.message}"[:512])

    u = get_or_create_directory_user(db, res.user)
    return LoginResult(success=True, auth="ldap", user_data=user_to_dict(u))
