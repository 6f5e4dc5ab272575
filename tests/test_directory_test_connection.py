from dataclasses import replace

import pytest

from conectseas.directory import DirectoryClient

from conftest import SERVICE_DN


def test_not_configured_returns_explanation(config):
    def factory(user, password):
        pytest.fail("no connection expected")

    trace = DirectoryClient(replace(config, enabled=False), connection_factory=factory).test_connection()

    assert trace.success is False
    assert trace.error
    assert trace.details
    assert trace.steps == []


def test_bind_and_search_success(config, directory, make_client):
    directory.add_entry("dc=example,dc=org", {"objectClass": ["top", "domain"]})
    directory.add_jdoe()

    trace = make_client(config).test_connection()

    assert trace.success is True
    assert trace.url == "ldap://dc1.example.org:389"
    assert trace.protocol == "ldap"
    assert [(s.step, s.status) for s in trace.steps] == [
        ("Service Account Bind", "success"),
        ("User Search", "success"),
    ]
    assert trace.steps[0].extra["bindDn"] == SERVICE_DN
    entries = trace.steps[1].extra["entries"]
    assert len(entries) == 2
    assert entries[1]["dn"] == "cn=John Doe,ou=users,dc=example,dc=org"
    assert entries[1]["attributes"]["sAMAccountName"] == ["jdoe"]

    search = directory.searches[0]
    assert search["filter"] == "(objectClass=*)"
    assert search["size_limit"] == 5
    assert directory.connections[0].calls[-1] == "unbind"


def test_search_is_capped_at_five_entries(config, directory, make_client):
    for i in range(7):
        directory.add_entry(f"cn=user{i},dc=example,dc=org", {"cn": [f"user{i}"]})

    trace = make_client(config).test_connection()

    assert trace.success is True
    assert len(trace.last_step.extra["entries"]) == 5


def test_no_entries_is_a_warning(config, directory, make_client):
    trace = make_client(config).test_connection()

    assert trace.success is False
    assert trace.last_step.status == "warning"
    assert trace.last_step.extra["baseDn"] == "dc=example,dc=org"
    assert not any(s.status == "error" for s in trace.steps)


def test_bind_failure_records_one_error_and_skips_search(config, directory, make_client):
    trace = make_client(replace(config, bind_password="wrong")).test_connection()

    assert trace.success is False
    assert len(trace.steps) == 1
    step = trace.steps[0]
    assert step.step == "Service Account Bind"
    assert step.status == "error"
    assert step.extra["bindDn"] == SERVICE_DN
    assert directory.searches == []
    assert directory.connections[0].calls == ["open", "bind", "unbind"]


def test_anonymous_skips_bind(config, directory, make_client):
    directory.add_jdoe()

    trace = make_client(replace(config, bind_dn="", bind_password="")).test_connection()

    conn = directory.connections[0]
    assert "bind" not in conn.calls
    assert conn.user is None
    assert [s.status for s in trace.steps] == ["info", "success"]
    assert trace.steps[0].step == "Anonymous Bind"
    assert trace.success is True


def test_unreachable_server_records_connection_error(config, directory, make_client):
    directory.unreachable = True

    trace = make_client(config).test_connection()

    assert trace.success is False
    assert [(s.step, s.status) for s in trace.steps] == [("Connection", "error")]
    assert "Connection refused" in trace.steps[0].message


def test_unexpected_error_never_escapes(config):
    def factory(user, password):
        raise RuntimeError("boom")

    trace = DirectoryClient(config, connection_factory=factory).test_connection()

    assert trace.success is False
    assert trace.last_step.status == "error"
    assert "boom" in trace.last_step.message


def test_search_error_is_recorded(config, directory, make_client):
    directory.search_error = True

    trace = make_client(config).test_connection()

    assert [s.status for s in trace.steps] == ["success", "error"]
    assert trace.last_step.step == "User Search"
    assert "noSuchObject" in trace.last_step.message


def test_to_dict_flattens_step_extras(config, directory, make_client):
    trace = make_client(replace(config, port=636)).test_connection()
    data = trace.to_dict()

    assert data["protocol"] == "ldaps"
    assert data["url"] == "ldaps://dc1.example.org:636"
    assert data["steps"][0] == {
        "step": "Service Account Bind",
        "status": "success",
        "message": "Connected successfully",
        "bindDn": SERVICE_DN,
    }
    assert data["steps"][1]["status"] == "warning"
    assert "error" not in data


def test_service_dn_without_password_records_bind_error(config, directory, make_client):
    trace = make_client(replace(config, bind_password="")).test_connection()

    assert trace.success is False
    assert [(s.step, s.status) for s in trace.steps] == [("Service Account Bind", "error")]
    assert trace.steps[0].extra["bindDn"] == SERVICE_DN
    assert "password is mandatory" in trace.steps[0].message
    assert directory.searches == []
