from __future__ import annotations

import json
import logging
from typing import Any

from pydantic import ValidationError
from sqlalchemy.orm import Session

from ...crypto import decrypt_secret, encrypt_secret
from ...repo import get_setting_row, list_setting_rows, upsert_setting_row

from .schema import DEFAULT_SETTINGS, LDAP_KEY, LdapSettings

log = logging.getLogger(__name__)


def _loads(raw: str, key: str) -> Any:
    try:
        return json.loads(raw)
    except ValueError:
        log.error("Setting %s holds invalid JSON; treating it as empty", key)
        return None


def get_setting(db: Session, key: str) -> Any:
    row = get_setting_row(db, key)
    if row is None:
        return None
    return _loads(row.value, key)


def save_setting(db: Session, key: str, value: Any) -> None:
    if key == LDAP_KEY:
        save_ldap_settings(db, LdapSettings.model_validate(value or {}))
        return
    upsert_setting_row(db, key, json.dumps(value, ensure_ascii=False))


def get_all_settings(db: Session) -> dict[str, Any]:
    """Every blob keyed by name; the LDAP bind password is masked."""
    out: dict[str, Any] = {}
    for row in list_setting_rows(db):
        if row.key == LDAP_KEY:
            out[row.key] = ldap_settings_public(get_ldap_settings(db))
        else:
            out[row.key] = _loads(row.value, row.key)
    return out


def seed_default_settings(db: Session) -> bool:
    """Insert the default blobs when the table is empty. Returns True if seeded."""
    if list_setting_rows(db):
        return False
    for key, value in DEFAULT_SETTINGS.items():
        upsert_setting_row(db, key, json.dumps(value, ensure_ascii=False))
    log.info("Default system settings inserted")
    return True


def get_ldap_settings(db: Session) -> LdapSettings:
    raw = get_setting(db, LDAP_KEY)
    if not isinstance(raw, dict):
        return LdapSettings()
    data = dict(raw)
    enc = data.pop("bindPasswordEnc", "")
    # Rows written before encryption keep a plaintext bindPassword.
    if enc:
        data["bindPassword"] = decrypt_secret(enc)
    try:
        return LdapSettings.model_validate(data)
    except ValidationError as e:
        # Unusable row: LDAP stays off until an admin saves a valid configuration.
        log.error("Stored %s is invalid, LDAP disabled: %s", LDAP_KEY, e.errors(include_url=False, include_input=False))
        return LdapSettings()


def save_ldap_settings(db: Session, data: LdapSettings, *, keep_secrets_if_blank: bool = True) -> LdapSettings:
    current = get_ldap_settings(db)
    password = data.bind_password
    if not password and keep_secrets_if_blank:
        password = current.bind_password

    blob = {
        "enabled": bool(data.enabled),
        "host": data.host,
        "port": int(data.port),
        "baseDn": data.base_dn,
        "bindDn": data.bind_dn,
        "bindPasswordEnc": encrypt_secret(password),
    }
    upsert_setting_row(db, LDAP_KEY, json.dumps(blob, ensure_ascii=False))
    log.info("LDAP settings saved (enabled=%s, host=%s, port=%s)", data.enabled, data.host, data.port)
    return data.model_copy(update={"bind_password": password})


def ldap_settings_public(data: LdapSettings) -> dict[str, Any]:
    out = data.model_dump(by_alias=True)
    out["bindPassword"] = ""
    out["hasBindPassword"] = bool(data.bind_password)
    return out
