import logging

import pytest

import activexml
from activexml import Registry, Schema, UnknownResource

HOST = "http://www.example.com:8080"


class TestDeclare:
    def test_defaults(self):
        site = Registry(HOST)
        schema = site.declare("User")
        assert schema == Schema(
            name="User", singular="user", plural="users", prefix=HOST
        )
        assert site["User"] is schema

    def test_options(self):
        site = Registry(HOST)
        schema = site.declare(
            "Person",
            plural="folks",
            prefix="/api",
            has_many=["roles"],
            has_one=["account"],
        )
        assert schema.singular == "person"
        assert schema.plural == "folks"
        assert schema.prefix == HOST + "/api"
        assert schema.has_many == frozenset(["roles"])
        assert schema.has_one == frozenset(["account"])

    def test_inflected_plural(self):
        assert Registry(HOST).declare("Person").plural == "people"

    def test_explicit_singular(self):
        schema = Registry(HOST).declare("LineItem", singular="line_item")
        assert schema.singular == "line_item"
        assert schema.plural == "line_items"

    def test_absolute_prefix(self):
        schema = Registry(HOST).declare("User", prefix="https://api.test")
        assert schema.prefix == "https://api.test"

    def test_callable_host(self):
        hosts = iter(["http://one.test", "http://two.test"])
        site = Registry(lambda: next(hosts))
        assert site.declare("User").prefix == "http://one.test"
        assert site.declare("Post").prefix == "http://two.test"

    def test_redeclare_replaces(self):
        site = Registry(HOST)
        site.declare("User")
        schema = site.declare("User", plural="members")
        assert site["User"] is schema
        assert len(site) == 1

    def test_logs(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="activexml.registry"):
            Registry(HOST).declare("User")
        assert "declared" in caplog.text


def test_model():
    site = Registry(HOST)
    User = site.model("User", has_many=["roles"])
    assert isinstance(User, activexml.Resource)
    assert User.schema is site["User"]
    assert User.registry is site
    assert User.new_record()


def test_lookup():
    site = Registry(HOST)
    site.declare("User")
    site.declare("Post")
    assert "User" in site
    assert "Comment" not in site
    assert list(site) == ["User", "Post"]
    assert len(site) == 2
    with pytest.raises(UnknownResource, match="Comment"):
        site["Comment"]
    with pytest.raises(LookupError):
        site["Comment"]


class TestResolve:
    @pytest.fixture
    def site(self):
        site = Registry(HOST)
        site.declare("User", prefix="/people")
        site.declare("Entry", singular="comment", prefix="/blog")
        site.declare("LineItem", prefix="/shop")
        return site

    def test_by_singular(self, site):
        assert site.resolve("comment", site["User"]) is site["Entry"]

    def test_by_plural(self, site):
        assert site.resolve("comments", site["User"]) is site["Entry"]
        assert site.resolve("line-items", site["User"]) is site["LineItem"]

    def test_by_name(self, site):
        assert site.resolve("line-item", site["User"]) is site["LineItem"]

    def test_inferred(self, site):
        schema = site.resolve("tag-group", site["User"])
        assert schema == Schema(
            name="TagGroup",
            singular="tag_group",
            plural="tag_groups",
            prefix=HOST + "/people",
        )
        assert "TagGroup" not in site


def test_execute_blocking(client):
    site = Registry(HOST, client=client, auth=("user", "pw"))
    client.respond("GET", HOST + "/ping.xml", content=b"<ok/>")

    def ping():
        response = yield activexml.GET(HOST + "/ping.xml")
        return response.content

    assert site.execute(ping()) == b"<ok/>"
    assert client.requests[0].headers == {
        "Authorization": "Basic dXNlcjpwdw=="
    }


def test_repr():
    site = Registry(HOST)
    site.declare("User")
    site.declare("Post")
    assert repr(site) == "<Registry: {} [User, Post]>".format(HOST)
