"""Shared fixtures: an in-memory transport, a manual clock and a client."""

import pytest

from ghcrmeta.config.settings import Config
from ghcrmeta.models.repository import RepositoryRef
from ghcrmeta.registry.resolver import RegistryClient

from .helpers import FakeTransport, ManualClock


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    for var in ('GHCRMETA_CONFIG', 'GHCRMETA_TOKEN_FILE', 'GHCRMETA_USER_FILE',
                'GHCRMETA_USERNAME', 'GHCRMETA_TIMEOUT', 'GHCRMETA_WORKERS',
                'GHCRMETA_TRANSPORT'):
        monkeypatch.delenv(var, raising=False)


@pytest.fixture
def config_factory(tmp_path):
    def make(**overrides):
        settings = {
            'token_file': str(tmp_path / 'github.token'),
            'user_file': str(tmp_path / 'github.user'),
            'dockerfile_fallback': False,
        }
        settings.update(overrides)
        return Config(overrides=settings)
    return make


@pytest.fixture
def config(config_factory):
    return config_factory()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def client(config, transport, clock):
    return RegistryClient(config, transport=transport, clock=clock)


@pytest.fixture
def default_client(tmp_path, transport, clock):
    """Client with the shipped defaults, Dockerfile fallback included."""
    config = Config(overrides={
        'token_file': str(tmp_path / 'github.token'),
        'user_file': str(tmp_path / 'github.user'),
    })
    return RegistryClient(config, transport=transport, clock=clock)


@pytest.fixture
def repo():
    def make(name):
        return RepositoryRef(registry='ghcr.io', namespace='versa-node', name=name)
    return make


@pytest.fixture
def token_file(tmp_path):
    def write(token, username=None):
        (tmp_path / 'github.token').write_text(token + '\n')
        if username is not None:
            (tmp_path / 'github.user').write_text(username + '\r\n')
    return write
