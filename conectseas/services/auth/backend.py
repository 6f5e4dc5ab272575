from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.orm import Session

log = logging.getLogger(__name__)


@dataclass
class LoginResult:
    """Outcome of a login attempt, after the directory and the local fallback."""

    success: bool
    auth: str = "local"  # ldap|local
    user_data: dict | None = None
    details: str = ""


def authenticate(db: Session, username: str, password: str) -> LoginResult:
    """Directory first (when enabled), then the local password hash.

    The directory is never the only gate: any directory failure falls through
    to the local check, so an unreachable server does not lock everybody out.
    """
    from ..settings import get_ldap_settings
    from .directory import authenticate as directory_auth
    from .local import authenticate as local_auth

    # Re-read on every attempt: configuration edits apply to the next login.
    ldap = get_ldap_settings(db)
    directory_details = ""
    if ldap.enabled:
        try:
            res = directory_auth(db, username, password, ldap)
        except Exception as e:
            log.exception("LDAP login step crashed for %s", username)
            db.rollback()
            res = LoginResult(success=False, auth="ldap", details=f"error: {e}"[:512])
        if res.success:
            return res
        log.info("LDAP auth failed for %s: %s", username, res.details)
        directory_details = res.details

    res = local_auth(db, username, password)
    if not res.success and directory_details:
        res.details = f"ldap: {directory_details}; local: {res.details}"
    return res
