from __future__ import annotations

from ..directory import DiagnosticTrace, DirectoryClient, DirectoryConfig
from ..env_settings import get_env
from .settings import LdapSettings


def directory_cfg_from_settings(st: LdapSettings) -> DirectoryConfig:
    return DirectoryConfig(
        enabled=bool(st.enabled),
        host=st.host,
        port=int(st.port or 389),
        base_dn=st.base_dn,
        bind_dn=st.bind_dn,
        bind_password=st.bind_password,
    )


def directory_client(cfg: DirectoryConfig) -> DirectoryClient:
    env = get_env()
    return DirectoryClient(cfg, timeout_s=env.ldap_timeout_s, tls_validate=env.ldap_tls_validate)


def directory_test(st: LdapSettings) -> DiagnosticTrace:
    return directory_client(directory_cfg_from_settings(st)).test_connection()
