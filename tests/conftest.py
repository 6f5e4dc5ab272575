"""Shared fixtures.

The environment is configured before the package is imported: the engine
is created at import time from SQLITE_PATH.
"""

import os
import re
import tempfile

_TMP = tempfile.mkdtemp(prefix="conectseas-tests-")
os.environ.setdefault("APP_SECRET_KEY", "test-secret-key")
os.environ["SQLITE_PATH"] = os.path.join(_TMP, "test.db")
os.environ["LOG_DIR"] = os.path.join(_TMP, "logs")
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["BOOTSTRAP_ADMIN_USER"] = "admin"
os.environ["BOOTSTRAP_ADMIN_PASSWORD"] = "admin-pass"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from ldap3.core.exceptions import LDAPPasswordIsMandatoryError, LDAPSocketOpenError  # noqa: E402

from conectseas import models  # noqa: E402,F401
from conectseas.db import Base, engine  # noqa: E402
from conectseas.directory import DirectoryClient, DirectoryConfig  # noqa: E402
from conectseas.main import app  # noqa: E402
from conectseas.repo import db_session  # noqa: E402
from conectseas.services import directory as directory_service  # noqa: E402
from conectseas.services.settings import seed_default_settings  # noqa: E402

SERVICE_DN = "cn=svc,dc=example,dc=org"
SERVICE_PASSWORD = "secret"
BASE_DN = "dc=example,dc=org"
JDOE_DN = "cn=John Doe,ou=users,dc=example,dc=org"

_PAIR_RE = re.compile(r"\(([A-Za-z]+)=([^()]*)\)")


def _unescape(v: str) -> str:
    return re.sub(r"\\([0-9a-fA-F]{2})", lambda m: chr(int(m.group(1), 16)), v)


class FakeConnection:
    """Stands in for ldap3.Connection: open/bind/search/unbind with ldap3's result shapes."""

    def __init__(self, directory, user, password):
        self.directory = directory
        self.user = user
        self.password = password
        self.calls = []
        self.result = {}
        self.response = []

    def open(self):
        self.calls.append("open")
        if self.directory.unreachable or (self.user or "").lower() in self.directory.unreachable_for:
            raise LDAPSocketOpenError("socket connection error while opening: [Errno 111] Connection refused")

    def bind(self):
        self.calls.append("bind")
        if self.user and not self.password:
            # ldap3 refuses this client-side instead of sending an unauthenticated bind
            raise LDAPPasswordIsMandatoryError("password is mandatory in simple bind")
        ok = self.directory.check_bind(self.user, self.password)
        if ok:
            self.result = {"result": 0, "description": "success", "message": ""}
        else:
            self.result = {
                "result": 49,
                "description": "invalidCredentials",
                "message": "80090308: LdapErr: DSID-0C09042A, data 52e",
            }
        return ok

    def search(self, search_base, search_filter, search_scope=None, attributes=None, size_limit=0):
        self.calls.append("search")
        self.directory.searches.append(
            {"base": search_base, "filter": search_filter, "attributes": attributes, "size_limit": size_limit}
        )
        if self.directory.search_error:
            self.result = {"result": 32, "description": "noSuchObject", "message": "0000208D: NameErr"}
            self.response = []
            return False

        matches = [
            (dn, attrs)
            for dn, attrs in self.directory.entries.items()
            if dn.lower().endswith(search_base.lower()) and self.directory.matches(attrs, search_filter)
        ]
        code = 0
        if size_limit and len(matches) > size_limit:
            matches = matches[:size_limit]
            code = 4
        self.response = [{"type": "searchResEntry", "dn": dn, "attributes": dict(attrs)} for dn, attrs in matches]
        self.result = {"result": code, "description": "success" if code == 0 else "sizeLimitExceeded", "message": ""}
        return bool(self.response)

    def unbind(self):
        self.calls.append("unbind")
        return True


class FakeDirectory:
    def __init__(self):
        self.entries = {}
        self.passwords = {SERVICE_DN.lower(): SERVICE_PASSWORD}
        self.connections = []
        self.searches = []
        self.unreachable = False
        self.unreachable_for = set()
        self.search_error = False
        self.allow_anonymous = True

    def add_entry(self, dn, attributes, password=None):
        self.entries[dn] = attributes
        if password is not None:
            self.passwords[dn.lower()] = password

    def add_jdoe(self, **overrides):
        attrs = {
            "cn": ["John Doe"],
            "sAMAccountName": ["jdoe"],
            "displayName": ["John Doe"],
            "mail": ["jdoe@example.org"],
            "department": ["IT"],
            "title": ["Analyst"],
        }
        attrs.update(overrides)
        self.add_entry(JDOE_DN, attrs, password="hunter2")

    def check_bind(self, user, password):
        if not user and not password:
            return self.allow_anonymous
        return bool(password) and self.passwords.get((user or "").lower()) == password

    def matches(self, attrs, search_filter):
        if search_filter == "(objectClass=*)":
            return True
        lowered = {k.lower(): v for k, v in attrs.items()}
        for name, raw in _PAIR_RE.findall(search_filter):
            value = _unescape(raw).lower()
            values = lowered.get(name.lower()) or []
            if any(str(x).lower() == value for x in values):
                return True
        return False

    def connection_factory(self, user, password):
        conn = FakeConnection(self, user, password)
        self.connections.append(conn)
        return conn


@pytest.fixture(autouse=True)
def clean_db():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    with db_session() as db:
        seed_default_settings(db)
    yield


@pytest.fixture
def directory():
    return FakeDirectory()


@pytest.fixture
def config():
    return DirectoryConfig(
        enabled=True,
        host="dc1.example.org",
        port=389,
        base_dn=BASE_DN,
        bind_dn=SERVICE_DN,
        bind_password=SERVICE_PASSWORD,
    )


@pytest.fixture
def make_client(directory):
    def _make(cfg):
        return DirectoryClient(cfg, connection_factory=directory.connection_factory)

    return _make


@pytest.fixture
def ldap_directory(monkeypatch, directory, make_client):
    """Route every DirectoryClient built by the services through the fake directory."""
    monkeypatch.setattr(directory_service, "directory_client", make_client)
    return directory


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


@pytest.fixture
def admin_headers(client):
    resp = client.post("/api/login", json={"username": "admin", "password": "admin-pass"})
    assert resp.status_code == 200
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['token']}"}
