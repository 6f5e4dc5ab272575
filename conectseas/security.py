from __future__ import annotations

import secrets

import bcrypt

from .env_settings import get_env


def hash_password(password: str) -> str:
    rounds = max(4, min(16, int(get_env().bcrypt_rounds or 12)))
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Malformed stored hash.
        return False


def unusable_password_hash() -> str:
    """Hash of a random secret, for accounts that only log in through the directory."""
    return hash_password(secrets.token_urlsafe(32))
