"""CONECTSEAS portal: authentication and directory (LDAP) integration service."""

__version__ = "1.0.0"
