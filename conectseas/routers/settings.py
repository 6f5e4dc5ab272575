from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, status
from pydantic import BaseModel, ValidationError

from ..deps import require_admin
from ..repo import db_session
from ..services import directory_test
from ..services.settings import (
    LDAP_KEY,
    PUBLIC_SETTING_KEYS,
    SETTING_KEY_RE,
    LdapSettings,
    get_all_settings,
    get_ldap_settings,
    get_setting,
    save_setting,
)
from ..webapi import api_result


router = APIRouter(prefix="/api")
log = logging.getLogger(__name__)


class SettingUpdate(BaseModel):
    value: Any = None


def _validation_error(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=422,
        detail=e.errors(include_url=False, include_context=False, include_input=False),
    )


@router.get("/public/settings/{key}")
def public_setting(key: str):
    if key not in PUBLIC_SETTING_KEYS:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    with db_session() as db:
        value = get_setting(db, key)
    if value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Setting not found")
    return value


@router.get("/admin/settings")
def admin_settings(_: dict = Depends(require_admin)):
    with db_session() as db:
        return get_all_settings(db)


@router.put("/admin/settings/{key}")
def admin_update_setting(key: str, body: SettingUpdate, user: dict = Depends(require_admin)):
    if not SETTING_KEY_RE.fullmatch(key):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid setting key")
    with db_session() as db:
        try:
            save_setting(db, key, body.value)
        except ValidationError as e:
            raise _validation_error(e)
    log.info("Setting %s updated by %s", key, user.get("username"))
    return api_result(True, "Saved")


@router.post("/admin/ldap/test")
def admin_ldap_test(override: dict | None = Body(default=None), user: dict = Depends(require_admin)):
    """Run the directory connection test.

    Without a body the stored `ldap_config` is tested. A body is tested as-is
    and not saved; a blank bindPassword reuses the stored one.
    """
    with db_session() as db:
        st = get_ldap_settings(db)
    if override:
        try:
            candidate = LdapSettings.model_validate(override)
        except ValidationError as e:
            raise _validation_error(e)
        if not candidate.bind_password:
            candidate = candidate.model_copy(update={"bind_password": st.bind_password})
        st = candidate

    log.info("LDAP test requested by %s (%s:%s)", user.get("username"), st.host, st.port)
    return directory_test(st).to_dict()
