from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from ..deps import get_current_user
from ..repo import db_session, get_user
from ..services import audit_login, login_authenticate, user_to_dict
from ..session import SESSION_COOKIE
from ..webapi import api_result, issue_session, set_session_cookie


router = APIRouter(prefix="/api")
log = logging.getLogger(__name__)

# Same reply whichever layer (directory or local) rejected the attempt.
INVALID_CREDENTIALS = "Invalid credentials"


class LoginRequest(BaseModel):
    username: str = Field(default="", max_length=128)
    password: str = Field(default="", max_length=1024)


@router.post("/login")
def login(request: Request, body: LoginRequest):
    username = body.username.strip()
    password = body.password

    if not username or not password:
        return api_result(False, "Username and password are required.", status_code=status.HTTP_400_BAD_REQUEST)

    with db_session() as db:
        result = login_authenticate(db, username, password)
        if not result.success or not result.user_data:
            audit_login(db, request, username, result)
            return api_result(False, INVALID_CREDENTIALS, status_code=status.HTTP_401_UNAUTHORIZED)

        token = issue_session(result.user_data, result.auth)
        audit_login(db, request, result.user_data["username"], result)

    log.info("User %s logged in (%s)", result.user_data["username"], result.auth)
    resp = JSONResponse({"success": True, "token": token, "user": result.user_data})
    set_session_cookie(resp, token)
    return resp


@router.post("/logout")
def logout():
    resp = api_result(True, "Logged out")
    resp.delete_cookie(SESSION_COOKIE)
    return resp


@router.get("/me")
def me(session: dict = Depends(get_current_user)):
    with db_session() as db:
        u = get_user(db, int(session["id"]))
        if u is None:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not authenticated")
        return user_to_dict(u)
