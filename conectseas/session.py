from __future__ import annotations

from typing import Dict, Any
from itsdangerous import URLSafeTimedSerializer, BadSignature, SignatureExpired

from .env_settings import get_env

SESSION_COOKIE = "conectseas_session"


def _serializer() -> URLSafeTimedSerializer:
    s = get_env()
    return URLSafeTimedSerializer(s.secret_key, salt="conectseas-session")


def session_max_age() -> int:
    return max(1, int(get_env().session_max_age_minutes or 1440)) * 60


def create_session(data: Dict[str, Any]) -> str:
    return _serializer().dumps(data)


def read_session(token: str, max_age_seconds: int | None = None) -> Dict[str, Any] | None:
    try:
        data = _serializer().loads(token, max_age=max_age_seconds or session_max_age())
    except (BadSignature, SignatureExpired):
        return None
    if not isinstance(data, dict) or "id" not in data:
        return None
    return data
