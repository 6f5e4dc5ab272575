from __future__ import annotations

import re
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

LDAP_KEY = "ldap_config"

# Readable without a session (login screen branding).
PUBLIC_SETTING_KEYS = ("login_ui", "theme_config")

SETTING_KEY_RE = re.compile(r"^[a-z0-9_]{1,64}$")


class LdapSettings(BaseModel):
    """`ldap_config` blob. Field aliases match the JSON the admin UI sends."""

    model_config = ConfigDict(populate_by_name=True)

    enabled: bool = Field(default=False)
    host: str = Field(default="", max_length=255)
    port: int = Field(default=389, ge=1, le=65535)
    base_dn: str = Field(default="", alias="baseDn", max_length=1024)
    bind_dn: str = Field(default="", alias="bindDn", max_length=1024)
    bind_password: str = Field(default="", alias="bindPassword")  # plaintext; storage decides how to persist

    @field_validator("port", mode="before")
    @classmethod
    def _default_port(cls, v: Any) -> Any:
        if v is None or v == "" or v == 0:
            return 389
        return v

    @field_validator("host")
    @classmethod
    def _validate_host(cls, v: str) -> str:
        s = (v or "").strip()
        for prefix in ("ldaps://", "ldap://"):
            if s.lower().startswith(prefix):
                s = s[len(prefix):]
        s = s.rstrip("/")
        if any(ch.isspace() for ch in s):
            raise ValueError("Host must not contain spaces.")
        return s

    @field_validator("base_dn", "bind_dn")
    @classmethod
    def _strip(cls, v: str) -> str:
        return (v or "").strip()


DEFAULT_SETTINGS: dict[str, dict] = {
    LDAP_KEY: {
        "enabled": False,
        "host": "",
        "port": 389,
        "baseDn": "",
        "bindDn": "",
        "bindPasswordEnc": "",
    },
    "login_ui": {
        "title": "Login Administrativo",
        "subtitle": "Entre com as credenciais locais ou de rede.",
        "logo_url": "",
        "background_url": "",
        "welcome_text": "Gestão Administrativa Integrada",
        "description_text": "Plataforma unificada para serviços de assistência social e ferramentas internas do Estado.",
    },
    "security_policy": {
        "min_password_length": 8,
        "require_special_chars": True,
    },
    "upload_config": {
        "max_file_size": 10 * 1024 * 1024,
        "allowed_types": [
            "image/jpeg",
            "image/png",
            "application/pdf",
            "application/msword",
            "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        ],
    },
    "theme_config": {
        "primary_color": "#2563eb",
        "theme_name": "default",
    },
}
