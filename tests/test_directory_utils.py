import pytest

from conectseas.directory.client import DirectoryClient
from conectseas.directory.models import DirectoryConfig
from conectseas.directory.utils import (
    attributes_to_dict,
    build_url,
    escape_ldap_filter_value,
    first_value,
    select_scheme,
    user_search_filter,
)


@pytest.mark.parametrize(
    "port, scheme",
    [(635, "ldap"), (636, "ldaps"), (637, "ldap"), (389, "ldap"), (None, "ldap"), (0, "ldap")],
)
def test_select_scheme_only_636_is_ldaps(port, scheme):
    assert select_scheme(port) == scheme


def test_build_url_defaults_port():
    assert build_url("dc1.example.org", None) == "ldap://dc1.example.org:389"
    assert build_url(" dc1.example.org ", 636) == "ldaps://dc1.example.org:636"


def test_client_scheme_ignores_other_fields():
    cfg = DirectoryConfig(enabled=False, host="", port=636)
    c = DirectoryClient(cfg)
    assert c.scheme == "ldaps"
    assert c.url == "ldaps://:636"


def test_escape_ldap_filter_value():
    assert escape_ldap_filter_value("a*b(c)\\d\x00") == "a\\2ab\\28c\\29\\5cd\\00"
    assert escape_ldap_filter_value("jdoe") == "jdoe"


def test_user_search_filter_covers_schema_conventions():
    assert user_search_filter("jdoe") == "(|(sAMAccountName=jdoe)(cn=jdoe)(uid=jdoe))"
    assert "(uid=\\2a)" in user_search_filter("*")


def test_first_value_handles_ldap3_value_shapes():
    attrs = {"mail": ["a@x.org", "b@x.org"], "cn": "Plain", "title": [], "department": [b"IT"]}
    assert first_value(attrs, "mail") == "a@x.org"
    assert first_value(attrs, "CN") == "Plain"
    assert first_value(attrs, "title") is None
    assert first_value(attrs, "department") == "IT"
    assert first_value(attrs, "missing") is None
    assert first_value(None, "cn") is None
    assert first_value({"cn": ["  "]}, "cn") is None


def test_attributes_to_dict_lists_every_value_as_text():
    out = attributes_to_dict({"objectClass": ["top", "person"], "cn": "x", "photo": b"\xff"})
    assert out["objectClass"] == ["top", "person"]
    assert out["cn"] == ["x"]
    assert out["photo"] == ["�"]
