"""Secrets stored in system_settings (LDAP bind password).

Fernet key derived from APP_SECRET_KEY: rotating the app secret makes
previously stored secrets unreadable, and they then read as empty.
"""

from __future__ import annotations

import base64
import hashlib
import logging

from cryptography.fernet import Fernet, InvalidToken

from .env_settings import get_env

log = logging.getLogger(__name__)


def _fernet() -> Fernet:
    digest = hashlib.sha256(get_env().secret_key.encode("utf-8")).digest()
    return Fernet(base64.urlsafe_b64encode(digest))


def encrypt_secret(value: str) -> str:
    if not value:
        return ""
    return _fernet().encrypt(value.encode("utf-8")).decode("ascii")


def decrypt_secret(token: str) -> str:
    if not token:
        return ""
    try:
        return _fernet().decrypt(token.encode("ascii")).decode("utf-8")
    except (InvalidToken, UnicodeEncodeError):
        log.warning("Stored secret cannot be decrypted with the current APP_SECRET_KEY")
        return ""
