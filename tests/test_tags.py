"""Tests for tag listing and ordering."""

from ghcrmeta.registry.tags import sort_tags

from .helpers import tags_url


def test_latest_sorts_first_then_numeric_descending():
    assert sort_tags(["2", "10", "latest"]) == ["latest", "10", "2"]


def test_latest_first_for_any_set():
    tags = ["v1.9", "beta", "latest", "v1.10", "0.1"]
    assert sort_tags(tags)[0] == "latest"


def test_numeric_aware_versions():
    assert sort_tags(["1.0", "1.2", "1.10", "latest"]) == ["latest", "1.10", "1.2", "1.0"]


def test_duplicates_removed():
    assert sort_tags(["1.0", "1.0", "latest", "latest"]) == ["latest", "1.0"]


def test_without_latest():
    assert sort_tags(["a", "c", "b"]) == ["c", "b", "a"]


def test_list_tags_orders_registry_response(client, transport, repo):
    transport.add(tags_url("acme"), {"name": "versa-node/acme", "tags": ["1.0", "latest", "1.2", "1.0"]})

    assert client.list_tags(repo("acme")) == ["latest", "1.2", "1.0"]


def test_list_tags_sends_bearer_when_token_available(client, transport, repo):
    acme = repo("acme")
    transport.add(client.token_broker.token_url(acme), {"token": "abc"})
    transport.add(tags_url("acme"), {"tags": ["1"]})

    client.list_tags(acme)

    headers = transport.headers_for(tags_url("acme"))[0]
    assert headers["Authorization"] == "Bearer abc"
    assert headers["Docker-Distribution-API-Version"] == "registry/2.0"


def test_list_tags_anonymous_without_token(client, transport, repo):
    transport.add(tags_url("acme"), {"tags": ["1"]})

    assert client.list_tags(repo("acme")) == ["1"]
    assert "Authorization" not in transport.headers_for(tags_url("acme"))[0]


def test_list_tags_failure_returns_empty(client, transport, repo):
    transport.add_error(tags_url("acme"), status=500)

    assert client.list_tags(repo("acme")) == []


def test_list_tags_unparsable_returns_empty(client, transport, repo):
    transport.add(tags_url("acme"), "<html>not json</html>")

    assert client.list_tags(repo("acme")) == []


def test_list_tags_missing_field_returns_empty(client, transport, repo):
    transport.add(tags_url("acme"), {"name": "versa-node/acme", "tags": None})

    assert client.list_tags(repo("acme")) == []


def test_list_tags_cached_until_bypassed(client, transport, repo):
    transport.add(tags_url("acme"), {"tags": ["1"]})

    client.list_tags(repo("acme"))
    client.list_tags(repo("acme"))
    assert transport.count(tags_url("acme")) == 1

    client.list_tags(repo("acme"), bypass_cache=True)
    assert transport.count(tags_url("acme")) == 2


def test_list_tags_page_size_from_config(config_factory, transport, clock, repo):
    from ghcrmeta.registry.resolver import RegistryClient

    client = RegistryClient(config_factory(tag_page_size=50), transport=transport, clock=clock)
    transport.add(tags_url("acme", 50), {"tags": ["x"]})

    assert client.list_tags(repo("acme")) == ["x"]
