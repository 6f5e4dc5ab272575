from __future__ import annotations

import logging
import ssl
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Optional

from ldap3 import NONE, SUBTREE, Connection, Server, Tls
from ldap3.core.exceptions import LDAPCommunicationError, LDAPException

from .models import (
    AuthFailureReason,
    AuthResult,
    DiagnosticTrace,
    DirectoryConfig,
    DirectoryUserRecord,
)
from .utils import attributes_to_dict, build_url, first_value, select_scheme, user_search_filter

log = logging.getLogger(__name__)

DEFAULT_TIMEOUT_S = 10.0

USER_ATTRIBUTES = ["cn", "mail", "sAMAccountName", "uid", "displayName", "department", "title"]
TEST_ATTRIBUTES = ["cn", "uid", "sAMAccountName", "mail", "displayName", "objectClass"]
TEST_SIZE_LIMIT = 5
# Two is enough to tell "exactly one" from "ambiguous".
USER_SIZE_LIMIT = 2

# success, sizeLimitExceeded (entries up to the limit are still returned)
_SEARCH_OK_CODES = (0, 4)

ConnectionFactory = Callable[[Optional[str], Optional[str]], Any]


class DirectoryStepError(Exception):
    """A protocol step failed; `reason` says which typed failure it maps to."""

    def __init__(self, reason: AuthFailureReason, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


def _result_message(conn: Any) -> str:
    res = dict(getattr(conn, "result", None) or {})
    desc = str(res.get("description") or "").strip()
    msg = str(res.get("message") or "").strip()
    if desc and msg and msg != desc:
        return f"{desc}: {msg}"
    return desc or msg or "unknown error"


class DirectoryClient:
    """Connect/bind/search bridge to an LDAP directory.

    Every operation opens its own short-lived connections through
    `connection_factory(user, password)` and releases them before returning.
    No state is kept between calls.
    """

    def __init__(
        self,
        cfg: DirectoryConfig,
        *,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        tls_validate: bool = False,
        connection_factory: ConnectionFactory | None = None,
    ) -> None:
        self.cfg = cfg
        self.timeout_s = float(timeout_s)
        self.tls_validate = bool(tls_validate)
        self.scheme = select_scheme(cfg.effective_port)
        self.url = build_url(cfg.host, cfg.effective_port)
        self._factory = connection_factory or self._ldap3_connection

    def _server(self) -> Server:
        tls = Tls(validate=ssl.CERT_REQUIRED if self.tls_validate else ssl.CERT_NONE)
        # get_info=NONE: no schema, so attribute names are not checked client-side
        # (AD and OpenLDAP expose different account attributes).
        return Server(
            host=self.cfg.host.strip(),
            port=self.cfg.effective_port,
            use_ssl=self.scheme == "ldaps",
            get_info=NONE,
            tls=tls,
            connect_timeout=self.timeout_s,
        )

    def _ldap3_connection(self, user: str | None, password: str | None) -> Connection:
        return Connection(
            self._server(),
            user=user,
            password=password,
            auto_bind=False,
            receive_timeout=self.timeout_s,
            raise_exceptions=False,
        )

    @staticmethod
    def _release(conn: Any) -> None:
        try:
            conn.unbind()
        except LDAPException as e:
            log.debug("LDAP unbind failed: %s", e)

    @contextmanager
    def _session(
        self, user: str | None, password: str | None, *, failure: AuthFailureReason
    ) -> Iterator[Any]:
        """Open a connection; any transport error while opening maps to `failure`."""
        conn = None
        try:
            conn = self._factory(user or None, password or None)
            conn.open()
        except LDAPException as e:
            if conn is not None:
                self._release(conn)
            raise DirectoryStepError(failure, f"cannot connect to {self.url}: {e}") from e
        try:
            yield conn
        finally:
            self._release(conn)

    @staticmethod
    def _bind(conn: Any, *, failure: AuthFailureReason, transport_failure: AuthFailureReason) -> None:
        try:
            ok = bool(conn.bind())
        except LDAPCommunicationError as e:
            raise DirectoryStepError(transport_failure, str(e)) from e
        except LDAPException as e:
            # Rejected client-side, e.g. a DN without a password.
            raise DirectoryStepError(failure, str(e)) from e
        if not ok:
            raise DirectoryStepError(failure, _result_message(conn))

    def _search(
        self,
        conn: Any,
        search_filter: str,
        attributes: list[str],
        size_limit: int,
    ) -> list[dict]:
        try:
            conn.search(
                search_base=self.cfg.base_dn.strip(),
                search_filter=search_filter,
                search_scope=SUBTREE,
                attributes=attributes,
                size_limit=size_limit,
            )
        except LDAPException as e:
            raise DirectoryStepError(AuthFailureReason.USER_SEARCH_FAILED, str(e)) from e

        code = int(dict(conn.result or {}).get("result", 0) or 0)
        if code not in _SEARCH_OK_CODES:
            raise DirectoryStepError(AuthFailureReason.USER_SEARCH_FAILED, _result_message(conn))

        # Referrals (searchResRef) are not followed.
        entries = [r for r in (conn.response or []) if r.get("type") == "searchResEntry"]
        return entries[:size_limit] if size_limit else entries

    # ---- login path ----

    def authenticate(self, username: str, password: str) -> AuthResult:
        if not self.cfg.is_configured:
            return AuthResult.fail(AuthFailureReason.NOT_CONFIGURED, "LDAP not configured")

        username = (username or "").strip()
        if not username:
            return AuthResult.fail(AuthFailureReason.USER_NOT_FOUND, "empty username")
        if not password:
            # An empty password would turn the user bind into an unauthenticated bind,
            # which many servers accept.
            return AuthResult.fail(AuthFailureReason.INVALID_CREDENTIALS, "empty password")

        log.info("Connecting to LDAP: %s", self.url)
        try:
            entry = self._find_user(username)
            self._verify_password(str(entry.get("dn") or ""), password)
        except DirectoryStepError as e:
            log.warning("LDAP auth failed for %s: %s (%s)", username, e.reason.value, e.message)
            return AuthResult.fail(e.reason, e.message)

        user = self._user_record(entry, username)
        log.info("LDAP auth ok for %s (%s)", username, user.distinguished_name)
        return AuthResult.ok(user)

    def _find_user(self, username: str) -> dict:
        with self._session(
            self.cfg.bind_dn, self.cfg.bind_password, failure=AuthFailureReason.CONNECTION_ERROR
        ) as conn:
            self._bind(
                conn,
                failure=AuthFailureReason.SERVICE_BIND_FAILED,
                transport_failure=AuthFailureReason.CONNECTION_ERROR,
            )
            entries = self._search(conn, user_search_filter(username), USER_ATTRIBUTES, USER_SIZE_LIMIT)

        if not entries:
            raise DirectoryStepError(AuthFailureReason.USER_NOT_FOUND, f"no entry for '{username}' under {self.cfg.base_dn}")
        if len(entries) > 1:
            dns = ", ".join(str(e.get("dn") or "") for e in entries)
            raise DirectoryStepError(AuthFailureReason.AMBIGUOUS_USER, f"'{username}' matches several entries: {dns}")
        return entries[0]

    def _verify_password(self, user_dn: str, password: str) -> None:
        # Binds are connection-scoped: the user bind gets its own connection.
        with self._session(user_dn, password, failure=AuthFailureReason.USER_AUTH_ERROR) as conn:
            self._bind(
                conn,
                failure=AuthFailureReason.INVALID_CREDENTIALS,
                transport_failure=AuthFailureReason.USER_AUTH_ERROR,
            )

    @staticmethod
    def _user_record(entry: dict, username: str) -> DirectoryUserRecord:
        attrs = entry.get("attributes") or {}
        cn = first_value(attrs, "cn")
        return DirectoryUserRecord(
            distinguished_name=str(entry.get("dn") or ""),
            account_name=first_value(attrs, "sAMAccountName") or first_value(attrs, "uid") or username,
            display_name=first_value(attrs, "displayName") or cn or username,
            email=first_value(attrs, "mail") or f"{username}@ldap.local",
            department=first_value(attrs, "department"),
            title=first_value(attrs, "title"),
        )

    # ---- admin test path ----

    def test_connection(self) -> DiagnosticTrace:
        """Step-by-step reachability/credentials/base DN check.

        Never raises: every failure ends up as a step in the returned trace.
        """
        trace = DiagnosticTrace(url=self.url, protocol=self.scheme)
        if not self.cfg.is_configured:
            trace.error = "LDAP is not configured"
            trace.details = "Check that LDAP is enabled and host, port and base DN are filled in"
            return trace

        log.info("[LDAP TEST] Connecting to: %s", self.url)
        try:
            anonymous = not self.cfg.bind_dn and not self.cfg.bind_password
            with self._session(
                None if anonymous else self.cfg.bind_dn,
                None if anonymous else self.cfg.bind_password,
                failure=AuthFailureReason.CONNECTION_ERROR,
            ) as conn:
                self._run_test(conn, trace, anonymous)
        except DirectoryStepError as e:
            log.warning("[LDAP TEST] Connection error: %s", e.message)
            trace.add("Connection", "error", e.message)
        except Exception as e:
            log.exception("[LDAP TEST] Unexpected error")
            trace.add("Connection", "error", f"Unexpected error: {e}")
        return trace

    def _run_test(self, conn: Any, trace: DiagnosticTrace, anonymous: bool) -> None:
        if anonymous:
            log.info("[LDAP TEST] Using anonymous bind")
            trace.add("Anonymous Bind", "info", "Trying an anonymous connection (no credentials)")
        else:
            log.info("[LDAP TEST] Attempting bind with: %s", self.cfg.bind_dn)
            try:
                self._bind(
                    conn,
                    failure=AuthFailureReason.SERVICE_BIND_FAILED,
                    transport_failure=AuthFailureReason.CONNECTION_ERROR,
                )
            except DirectoryStepError as e:
                if e.reason is AuthFailureReason.CONNECTION_ERROR:
                    raise
                log.warning("[LDAP TEST] Bind error: %s", e.message)
                trace.add("Service Account Bind", "error", e.message, bindDn=self.cfg.bind_dn)
                return
            trace.add("Service Account Bind", "success", "Connected successfully", bindDn=self.cfg.bind_dn)

        log.info("[LDAP TEST] Searching in: %s", self.cfg.base_dn)
        try:
            found = self._search(conn, "(objectClass=*)", TEST_ATTRIBUTES, TEST_SIZE_LIMIT)
        except DirectoryStepError as e:
            log.warning("[LDAP TEST] Search error: %s", e.message)
            trace.add("User Search", "error", e.message, baseDn=self.cfg.base_dn)
            return

        entries = [
            {"dn": str(e.get("dn") or ""), "attributes": attributes_to_dict(e.get("attributes"))}
            for e in found
        ]
        if entries:
            trace.success = True
            trace.add("User Search", "success", f"Found {len(entries)} entries", entries=entries)
        else:
            trace.add("User Search", "warning", "No entries found under the base DN", baseDn=self.cfg.base_dn)
