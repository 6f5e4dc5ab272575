from __future__ import annotations

from fastapi.responses import JSONResponse, Response

from .env_settings import get_env
from .session import SESSION_COOKIE, create_session, session_max_age


def api_result(ok: bool, message: str, details: str | None = None, *, status_code: int = 200) -> JSONResponse:
    """Unified result shape for simple JSON replies.

    Format:
      {"success": bool, "message": str, "details": str}
    """

    return JSONResponse(
        {"success": bool(ok), "message": str(message or ""), "details": str(details or "")},
        status_code=status_code,
    )


def session_payload(user_data: dict, auth: str) -> dict:
    return {
        "id": user_data["id"],
        "username": user_data["username"],
        "role": user_data["role"],
        "auth": auth,
    }


def set_session_cookie(resp: Response, token: str) -> None:
    """Set the signed session cookie (kept in one place for all auth flows)."""
    env = get_env()
    resp.set_cookie(
        key=SESSION_COOKIE,
        value=token,
        httponly=True,
        secure=env.cookie_secure,
        samesite="lax",
        max_age=session_max_age(),
    )


def issue_session(user_data: dict, auth: str) -> str:
    return create_session(session_payload(user_data, auth))
