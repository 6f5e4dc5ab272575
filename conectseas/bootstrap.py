"""Application bootstrap: schema, default settings, first admin, logging."""

from .env_settings import get_env
from .log_config import setup_logging
from .repo import db_session, ensure_bootstrap_admin
from .schema import ensure_schema
from .security import hash_password
from .services.settings import seed_default_settings


def initialize_application() -> None:
    env = get_env()
    setup_logging(level=env.log_level, retention_days=env.log_retention_days, log_dir=env.log_dir)

    ensure_schema()

    with db_session() as db:
        seed_default_settings(db)
        ensure_bootstrap_admin(db, env.bootstrap_admin_user, hash_password(env.bootstrap_admin_password))
