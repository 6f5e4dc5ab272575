from functools import lru_cache

from pydantic_settings import BaseSettings
from pydantic import Field


class EnvSettings(BaseSettings):
    secret_key: str = Field(..., alias="APP_SECRET_KEY")
    cookie_secure: bool = Field(False, alias="APP_COOKIE_SECURE")
    sqlite_path: str = Field("data/conectseas.db", alias="SQLITE_PATH")
    session_max_age_minutes: int = Field(24 * 60, alias="SESSION_MAX_AGE_MINUTES")

    bootstrap_admin_user: str = Field("admin", alias="BOOTSTRAP_ADMIN_USER")
    bootstrap_admin_password: str = Field("ChangeMe123!", alias="BOOTSTRAP_ADMIN_PASSWORD")
    bcrypt_rounds: int = Field(12, alias="BCRYPT_ROUNDS")

    ldap_timeout_s: float = Field(10.0, alias="LDAP_TIMEOUT_S")
    # Off by default: directory servers commonly present self-signed certificates.
    ldap_tls_validate: bool = Field(False, alias="LDAP_TLS_VALIDATE")

    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_dir: str = Field("data/logs", alias="LOG_DIR")
    log_retention_days: int = Field(30, alias="LOG_RETENTION_DAYS")

    class Config:
        populate_by_name = True


@lru_cache(maxsize=1)
def get_env() -> EnvSettings:
    return EnvSettings()
