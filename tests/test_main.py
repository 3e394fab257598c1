"""Tests for the command line interface."""

import json
import logging
import sys

import pytest

from ghcrmeta import main as cli

from .helpers import FakeTransport, blob_url, image_config, manifest_url, single_manifest, tags_url


@pytest.fixture(autouse=True)
def restore_logging():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def fake_transport(monkeypatch, tmp_path):
    transport = FakeTransport()
    monkeypatch.setattr("ghcrmeta.registry.resolver.create_transport", lambda config: transport)
    monkeypatch.setenv("GHCRMETA_TOKEN_FILE", str(tmp_path / "absent.token"))
    monkeypatch.setenv("GHCRMETA_USER_FILE", str(tmp_path / "absent.user"))
    return transport


def run_cli(monkeypatch, capsys, *args):
    monkeypatch.setattr(sys, "argv", ["ghcrmeta", *args])
    cli.main()
    return json.loads(capsys.readouterr().out)


def test_tags_command(monkeypatch, capsys, fake_transport):
    fake_transport.add(tags_url("web"), {"tags": ["2", "10", "latest"]})

    output = run_cli(monkeypatch, capsys, "tags", "versa-node/web")

    assert output == {"Operation": "Tags", "Repository": "ghcr.io/versa-node/web", "Tags": ["latest", "10", "2"]}


def test_describe_command(monkeypatch, capsys, fake_transport):
    fake_transport.add(tags_url("web"), {"tags": ["latest"]})
    fake_transport.add(manifest_url("web", "latest"), single_manifest("sha256:cfg"))
    fake_transport.add(blob_url("web", "sha256:cfg"), image_config({"org.opencontainers.image.description": "Web UI"}))

    output = run_cli(monkeypatch, capsys, "describe", "web")

    assert output["Tag"] == "latest"
    assert output["Description"] == "Web UI"


def test_search_without_network_is_empty_not_failed(monkeypatch, capsys, fake_transport):
    output = run_cli(monkeypatch, capsys, "search")

    assert output["Mode"] == "org"
    assert output["Packages"] == []


def test_bad_config_fails(monkeypatch, capsys, fake_transport, tmp_path):
    monkeypatch.setattr(sys, "argv", ["ghcrmeta", "--config", str(tmp_path / "missing.yaml"), "tags", "web"])

    with pytest.raises(SystemExit) as excinfo:
        cli.main()

    assert excinfo.value.code == 1
    assert json.loads(capsys.readouterr().out)["Status"] == "Failed"


def test_no_command_prints_help(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["ghcrmeta"])

    with pytest.raises(SystemExit):
        cli.main()
