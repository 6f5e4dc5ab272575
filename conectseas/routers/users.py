from __future__ import annotations

import logging
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from ..deps import require_admin
from ..models import ROLES
from ..repo import db_session, get_user, list_users
from ..services import user_to_dict
from ..webapi import api_result


router = APIRouter(prefix="/api/admin")
log = logging.getLogger(__name__)


class RoleUpdate(BaseModel):
    role: str


@router.get("/users")
def admin_users(_: dict = Depends(require_admin)):
    with db_session() as db:
        return [user_to_dict(u) for u in list_users(db)]


@router.put("/users/{user_id}/role")
def admin_update_role(user_id: int, body: RoleUpdate, user: dict = Depends(require_admin)):
    role = (body.role or "").strip().upper()
    if role not in ROLES:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid role")
    with db_session() as db:
        u = get_user(db, user_id)
        if u is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
        u.role = role
        u.updated_at = datetime.utcnow()
        db.commit()
    log.info("Role of user %s set to %s by %s", user_id, role, user.get("username"))
    return api_result(True, "Saved")
