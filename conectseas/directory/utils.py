from __future__ import annotations

from typing import Any, Mapping, Optional

from .models import DEFAULT_PORT, LDAPS_PORT

# Account-name attributes across AD (sAMAccountName) and OpenLDAP/389ds (cn, uid).
ACCOUNT_ATTRIBUTES = ("sAMAccountName", "cn", "uid")


def escape_ldap_filter_value(value: str) -> str:
    """RFC 4515 escaping for LDAP filter values."""
    out: list[str] = []
    for ch in value:
        if ch == "\\":
            out.append("\\5c")
        elif ch == "*":
            out.append("\\2a")
        elif ch == "(":
            out.append("\\28")
        elif ch == ")":
            out.append("\\29")
        elif ch == "\x00":
            out.append("\\00")
        else:
            out.append(ch)
    return "".join(out)


def select_scheme(port: int | None) -> str:
    """636 is the only port that selects LDAPS."""
    return "ldaps" if int(port or DEFAULT_PORT) == LDAPS_PORT else "ldap"


def build_url(host: str, port: int | None) -> str:
    p = int(port or DEFAULT_PORT)
    return f"{select_scheme(p)}://{(host or '').strip()}:{p}"


def user_search_filter(username: str) -> str:
    v = escape_ldap_filter_value(username)
    return "(|" + "".join(f"({attr}={v})" for attr in ACCOUNT_ATTRIBUTES) + ")"


def _lookup(attrs: Mapping[str, Any], name: str) -> Any:
    if name in attrs:
        return attrs[name]
    lname = name.lower()
    for k, v in attrs.items():
        if str(k).lower() == lname:
            return v
    return None


def _text(v: Any) -> str:
    if isinstance(v, bytes):
        return v.decode("utf-8", errors="replace")
    return str(v)


def first_value(attrs: Mapping[str, Any] | None, name: str) -> Optional[str]:
    """First non-empty value of an attribute, or None.

    Without a loaded schema ldap3 returns every attribute as a list,
    so single and multi-valued attributes are read the same way.
    """
    if not attrs:
        return None
    v = _lookup(attrs, name)
    if isinstance(v, (list, tuple)):
        v = v[0] if v else None
    if v is None:
        return None
    s = _text(v).strip()
    return s or None


def attributes_to_dict(attrs: Mapping[str, Any] | None) -> dict[str, list[str]]:
    """JSON-safe copy of an entry's attribute map (every value as a list of strings)."""
    out: dict[str, list[str]] = {}
    for k, v in (attrs or {}).items():
        values = v if isinstance(v, (list, tuple)) else [v]
        out[str(k)] = [_text(x) for x in values if x is not None]
    return out
