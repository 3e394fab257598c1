"""Configuration management for ghcrmeta."""

import os
import yaml
from typing import Dict, Any, List, Optional


DEFAULTS: Dict[str, Any] = {
    'registry': 'ghcr.io',
    'org': 'Versa-Node',
    'namespace': 'versa-node',
    'org_aliases': ['versa-node', 'versanode'],
    'token_file': '/etc/versanode/github.token',
    'user_file': '/etc/versanode/github.user',
    'username': None,
    'fallback_usernames': ['oauth2', 'token', ''],
    'platform_os': 'linux',
    'platform_architecture': 'amd64',
    'request_timeout': 15.0,
    'org_listing_ttl': 600.0,
    'resolution_ttl': None,
    'max_workers': 5,
    'tag_page_size': 200,
    'package_page_size': 100,
    'user_agent': 'versanode-cockpit/1.0',
    'github_api_url': 'https://api.github.com',
    'github_api_version': '2022-11-28',
    'transport': 'http',
    'elevated': False,
    'dockerfile_fallback': True,
    'dockerfile_url_template': (
        'https://raw.githubusercontent.com/Versa-Node/container-packages/main/'
        'packages/{name}/Dockerfile'
    ),
}

ENV_VARS = {
    'token_file': 'GHCRMETA_TOKEN_FILE',
    'user_file': 'GHCRMETA_USER_FILE',
    'username': 'GHCRMETA_USERNAME',
    'request_timeout': 'GHCRMETA_TIMEOUT',
    'max_workers': 'GHCRMETA_WORKERS',
    'transport': 'GHCRMETA_TRANSPORT',
}

TRANSPORTS = ('http', 'curl')


class Config:
    """Configuration manager for ghcrmeta."""

    def __init__(self, config_path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None):
        self.config_path = config_path or os.environ.get('GHCRMETA_CONFIG')

        self._settings = dict(DEFAULTS)
        self._settings.update(self._load_environment())
        self._settings.update(self._load_file())
        if overrides:
            self._settings.update(overrides)

        self._validate()

    def _load_environment(self) -> Dict[str, Any]:
        """Collect settings given as environment variables."""
        values = {}
        for key, var in ENV_VARS.items():
            value = os.environ.get(var)
            if value:
                values[key] = value
        return values

    def _load_file(self) -> Dict[str, Any]:
        """Load settings from the YAML config file, if one is named."""
        if not self.config_path:
            return {}

        if not os.path.exists(self.config_path):
            raise FileNotFoundError(f"ghcrmeta config file not found: {self.config_path}")

        with open(self.config_path, 'r') as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"ghcrmeta config file must contain a mapping: {self.config_path}")

        unknown = sorted(set(data) - set(DEFAULTS))
        if unknown:
            raise ValueError(f"Unknown configuration keys: {', '.join(unknown)}")

        return data

    def _validate(self):
        """Coerce and validate settings."""
        s = self._settings

        try:
            s['request_timeout'] = float(s['request_timeout'])
            s['org_listing_ttl'] = float(s['org_listing_ttl'])
            if s['resolution_ttl'] is not None:
                s['resolution_ttl'] = float(s['resolution_ttl'])
            s['max_workers'] = int(s['max_workers'])
            s['tag_page_size'] = int(s['tag_page_size'])
            s['package_page_size'] = int(s['package_page_size'])
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid numeric configuration value: {e}")

        if s['request_timeout'] <= 0:
            raise ValueError("request_timeout must be positive")
        if s['max_workers'] < 1:
            raise ValueError("max_workers must be at least 1")
        if s['transport'] not in TRANSPORTS:
            raise ValueError(f"transport must be one of: {', '.join(TRANSPORTS)}")
        if not isinstance(s['org_aliases'], list) or not s['org_aliases']:
            raise ValueError("org_aliases must be a non-empty list")
        if not isinstance(s['fallback_usernames'], list):
            raise ValueError("fallback_usernames must be a list")

        for key in ('registry', 'namespace', 'org'):
            if not isinstance(s[key], str) or not s[key].strip('/'):
                raise ValueError(f"{key} must be a non-empty string")
        for key in ('elevated', 'dockerfile_fallback'):
            s[key] = self._as_bool(key, s[key])

        s['namespace'] = s['namespace'].strip('/').lower()
        s['registry'] = s['registry'].strip('/').lower()

    @staticmethod
    def _as_bool(key: str, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ('true', 'yes', 'on', '1'):
                return True
            if lowered in ('false', 'no', 'off', '0', ''):
                return False
        raise ValueError(f"{key} must be a boolean, got {value!r}")

    def __getattr__(self, name: str) -> Any:
        settings = self.__dict__.get('_settings')
        if settings is not None and name in settings:
            return settings[name]
        raise AttributeError(name)

    def as_dict(self) -> Dict[str, Any]:
        """Return a copy of the effective settings."""
        return dict(self._settings)

    @property
    def namespace_prefix(self) -> str:
        """Canonical display prefix, e.g. ghcr.io/versa-node/."""
        return f"{self.registry}/{self.namespace}/"

    @property
    def aliases(self) -> List[str]:
        """Org aliases, canonical namespace first."""
        aliases = [self.namespace]
        for alias in self.org_aliases:
            alias = alias.lower()
            if alias not in aliases:
                aliases.append(alias)
        return aliases

    def read_token(self) -> Optional[str]:
        """Read the GitHub token from the token file; None if unavailable."""
        return self._read_secret_file(self.token_file)

    def read_username(self) -> Optional[str]:
        """Configured username, or the contents of the user file."""
        if self.username:
            return self.username
        return self._read_secret_file(self.user_file)

    def has_token_file(self) -> bool:
        """Whether credential material is present on disk."""
        return bool(self.token_file) and os.access(self.token_file, os.R_OK)

    @staticmethod
    def _read_secret_file(path: Optional[str]) -> Optional[str]:
        if not path:
            return None
        try:
            with open(path, 'r') as f:
                value = f.read().replace('\r', '').replace('\n', '')
        except OSError:
            return None
        return value or None
