"""Tests for manifest and index resolution."""

import pytest

from ghcrmeta.models.manifest import (
    DOCKER_MANIFEST_LIST,
    ManifestIndex,
    Platform,
    SingleManifest,
    parse_manifest,
)

from .helpers import index_manifest, manifest_url, single_manifest


def test_single_manifest_config_digest(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), single_manifest("sha256:cfg"))

    assert client.resolve_config_digest(repo("acme"), "latest") == "sha256:cfg"


def test_index_prefers_linux_amd64(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), index_manifest([
        ("sha256:arm", "linux", "arm"),
        ("sha256:amd", "linux", "amd64"),
    ]))
    transport.add(manifest_url("acme", "sha256:arm"), single_manifest("sha256:cfg-arm"))
    transport.add(manifest_url("acme", "sha256:amd"), single_manifest("sha256:cfg-amd"))

    assert client.resolve_config_digest(repo("acme"), "latest") == "sha256:cfg-amd"
    assert transport.count(manifest_url("acme", "sha256:arm")) == 0


def test_index_without_match_uses_first_entry(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), index_manifest([
        ("sha256:arm", "linux", "arm"),
        ("sha256:s390", "linux", "s390x"),
    ]))
    transport.add(manifest_url("acme", "sha256:arm"), single_manifest("sha256:cfg-arm"))

    assert client.resolve_config_digest(repo("acme"), "latest") == "sha256:cfg-arm"


def test_preferred_platform_is_configurable(config_factory, transport, clock, repo):
    from ghcrmeta.registry.resolver import RegistryClient

    client = RegistryClient(config_factory(platform_architecture="arm64"), transport=transport, clock=clock)
    transport.add(manifest_url("acme", "latest"), index_manifest([
        ("sha256:amd", "linux", "amd64"),
        ("sha256:arm64", "linux", "arm64"),
    ]))
    transport.add(manifest_url("acme", "sha256:arm64"), single_manifest("sha256:cfg-arm64"))

    assert client.resolve_config_digest(repo("acme"), "latest") == "sha256:cfg-arm64"


def test_empty_index_yields_empty(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), index_manifest([]))

    assert client.resolve_config_digest(repo("acme"), "latest") == ""


def test_non_json_manifest_yields_empty(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), "not json")

    assert client.resolve_config_digest(repo("acme"), "latest") == ""


def test_missing_manifest_yields_empty(client, repo):
    assert client.resolve_config_digest(repo("acme"), "latest") == ""


def test_unfetchable_child_manifest_yields_empty(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), index_manifest([("sha256:amd", "linux", "amd64")]))

    assert client.resolve_config_digest(repo("acme"), "latest") == ""


def test_manifest_request_accepts_both_shapes(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), single_manifest("sha256:cfg"))

    client.resolve_config_digest(repo("acme"), "latest")

    accept = transport.headers_for(manifest_url("acme", "latest"))[0]["Accept"]
    assert "application/vnd.oci.image.index.v1+json" in accept
    assert "application/vnd.docker.distribution.manifest.list.v2+json" in accept
    assert "application/vnd.oci.image.manifest.v1+json" in accept
    assert "application/vnd.docker.distribution.manifest.v2+json" in accept


def test_invalid_tag_replaced_with_latest(client, transport, repo):
    transport.add(manifest_url("acme", "latest"), single_manifest("sha256:cfg"))

    assert client.resolve_config_digest(repo("acme"), "bad tag;rm") == "sha256:cfg"


def test_parse_docker_manifest_list():
    document = parse_manifest({
        "mediaType": DOCKER_MANIFEST_LIST,
        "manifests": [{"digest": "sha256:a", "platform": {"os": "linux", "architecture": "amd64"}}],
    })

    assert isinstance(document, ManifestIndex)
    assert document.manifests[0].platform == Platform("linux", "amd64")


def test_parse_uses_content_type_when_body_has_no_media_type():
    document = parse_manifest({"manifests": []}, "application/vnd.oci.image.index.v1+json")

    assert isinstance(document, ManifestIndex)


def test_parse_single_manifest_without_media_type():
    assert parse_manifest({"config": {"digest": "sha256:c"}}) == SingleManifest("sha256:c")


def test_parse_manifest_without_config_raises():
    with pytest.raises(ValueError):
        parse_manifest({"mediaType": "application/vnd.oci.image.manifest.v1+json"})


def test_select_returns_none_for_empty_index():
    assert ManifestIndex([]).select(Platform("linux", "amd64")) is None
