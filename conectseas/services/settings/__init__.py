"""Settings service package.

Named JSON blobs (schema) persisted in `system_settings` (storage).
"""

from .schema import DEFAULT_SETTINGS, LDAP_KEY, PUBLIC_SETTING_KEYS, SETTING_KEY_RE, LdapSettings
from .storage import (
    get_all_settings,
    get_ldap_settings,
    get_setting,
    ldap_settings_public,
    save_ldap_settings,
    save_setting,
    seed_default_settings,
)

__all__ = [
    "DEFAULT_SETTINGS",
    "LDAP_KEY",
    "PUBLIC_SETTING_KEYS",
    "SETTING_KEY_RE",
    "LdapSettings",
    "get_all_settings",
    "get_ldap_settings",
    "get_setting",
    "ldap_settings_public",
    "save_ldap_settings",
    "save_setting",
    "seed_default_settings",
]
