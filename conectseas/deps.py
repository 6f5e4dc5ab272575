from __future__ import annotations

from fastapi import Request, HTTPException, status

from .models import ROLE_ADMIN
from .session import SESSION_COOKIE, read_session


def _request_token(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    scheme, _, token = auth.partition(" ")
    if scheme.lower() == "bearer" and token.strip():
        return token.strip()
    return request.cookies.get(SESSION_COOKIE, "")


def get_current_user(request: Request) -> dict:
    token = _request_token(request)
    data = read_session(token) if token else None
    if not data:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
    return data


def require_admin(request: Request) -> dict:
    user = get_current_user(request)
    if user.get("role") != ROLE_ADMIN:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return user
