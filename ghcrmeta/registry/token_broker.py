"""Bearer token acquisition for registry pulls."""

import base64
import logging
from typing import List, Optional
from urllib.parse import urlencode

from ..cache.resolution_cache import MISS, ResolutionCache
from ..config.settings import Config
from ..models.repository import RepositoryRef
from .transport import FetchError, Transport


logger = logging.getLogger(__name__)


class TokenBroker:
    """Acquires repository:pull tokens, anonymous first, then with the stored PAT."""

    def __init__(self, config: Config, transport: Transport, cache: ResolutionCache):
        self.config = config
        self.transport = transport
        self.cache = cache

    def token_url(self, repository: RepositoryRef) -> str:
        query = urlencode({
            'service': self.config.registry,
            'scope': f"repository:{repository.path}:pull",
        })
        return f"https://{self.config.registry}/token?{query}"

    def acquire_token(self, repository: RepositoryRef, bypass_cache: bool = False) -> str:
        """Return a bearer token for the repository, or '' when none can be had."""
        key = repository.path
        if not bypass_cache:
            cached = self.cache.tokens.get(key)
            if cached is not MISS:
                return cached

        token = self._request_token(repository)
        if token:
            logger.debug(f"Anonymous token acquired for {key}")
        else:
            token = self._exchange_credentials(repository)

        self.cache.tokens.put(key, token)
        if not token:
            logger.debug(f"No token for {key}; continuing anonymously")
        return token

    def _exchange_credentials(self, repository: RepositoryRef) -> str:
        pat = self.config.read_token()
        if not pat:
            return ''

        for username in self._identities():
            token = self._request_token(repository, username, pat)
            if token:
                logger.debug(f"Token acquired for {repository.path} via credential exchange")
                return token

        logger.warning(f"Credential exchange failed for {repository.path} with every identity")
        return ''

    def _identities(self) -> List[str]:
        identities = []
        username = self.config.read_username()
        if username:
            identities.append(username)
        for fallback in self.config.fallback_usernames:
            if fallback not in identities:
                identities.append(fallback)
        return identities

    def _request_token(self, repository: RepositoryRef, username: Optional[str] = None,
                       password: Optional[str] = None) -> str:
        headers = {}
        if password is not None:
            credentials = f"{username or ''}:{password}".encode('utf-8')
            headers['Authorization'] = f"Basic {base64.b64encode(credentials).decode('ascii')}"

        try:
            data = self.transport.get_json(self.token_url(repository), headers)
        except (FetchError, ValueError) as e:
            logger.debug(f"Token request for {repository.path} failed: {e}")
            return ''

        if not isinstance(data, dict):
            return ''
        token = data.get('token') or data.get('access_token') or ''
        return token.strip() if isinstance(token, str) else ''
