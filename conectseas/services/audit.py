from __future__ import annotations

import logging

from fastapi import Request
from sqlalchemy.orm import Session

from ..models import LoginAudit
from .auth import LoginResult

log = logging.getLogger(__name__)


def _client_info(request: Request) -> tuple[str, str]:
    ip = request.client.host if request.client else ""
    return ip[:64], request.headers.get("user-agent", "")[:512]


def audit_login(db: Session, request: Request, username: str, result: LoginResult) -> None:
    """One row per login attempt.

    `details` keeps the directory failure reason that the login reply hides.
    """
    ip, ua = _client_info(request)
    db.add(
        LoginAudit(
            username=username[:128],
            auth_type=result.auth,
            success=result.success,
            ip=ip,
            user_agent=ua,
            result_code="ok" if result.success else "invalid",
            details=(result.details or "")[:512],
        )
    )
    db.commit()
    if not result.success:
        log.info("Login rejected for %s from %s (%s)", username, ip, result.details)
