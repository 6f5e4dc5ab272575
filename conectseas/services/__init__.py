"""Application service layer.

Routers import from here:
    from conectseas.services import ...
"""

from .audit import audit_login
from .auth import LoginResult, authenticate as login_authenticate
from .directory import directory_cfg_from_settings, directory_client, directory_test
from .users import get_or_create_directory_user, user_to_dict

__all__ = [
    "LoginResult",
    "audit_login",
    "directory_cfg_from_settings",
    "directory_client",
    "directory_test",
    "get_or_create_directory_user",
    "login_authenticate",
    "user_to_dict",
]
