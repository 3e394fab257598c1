"""Organization package discovery through the GitHub Packages API."""

import logging
from typing import List

from ..cache.resolution_cache import MISS, ORG_LISTING_KEY, ResolutionCache
from ..config.settings import Config
from ..models.repository import PackageEntry
from ..registry.transport import FetchError, Transport


logger = logging.getLogger(__name__)


class PackageDiscovery:
    """Lists the container packages of the fixed organization."""

    def __init__(self, config: Config, transport: Transport, cache: ResolutionCache):
        self.config = config
        self.transport = transport
        self.cache = cache

    def packages_url(self) -> str:
        return (
            f"{self.config.github_api_url}/orgs/{self.config.org}/packages"
            f"?package_type=container&per_page={self.config.package_page_size}"
        )

    def _headers(self, token: str):
        headers = {
            'Accept': 'application/vnd.github+json',
            'X-GitHub-Api-Version': self.config.github_api_version,
        }
        if token:
            headers['Authorization'] = f"Bearer {token}"
        return headers

    def list_org_packages(self, bypass_cache: bool = False) -> List[PackageEntry]:
        """Packages as entries named ghcr.io/<namespace>/<package>; [] on any failure."""
        if not bypass_cache:
            cached = self.cache.org_listing.get(ORG_LISTING_KEY)
            if cached is not MISS:
                return [PackageEntry(e.name, e.description) for e in cached]

        token = ''
        if self.config.has_token_file():
            token = self.config.read_token() or ''
            if not token:
                logger.warning(f"Token file {self.config.token_file} is empty; skipping org listing")
                return []

        try:
            data = self.transport.get_json(self.packages_url(), self._headers(token))
        except (FetchError, ValueError) as e:
            logger.warning(f"Failed to list packages for {self.config.org}: {e}")
            return []

        if not isinstance(data, list):
            logger.warning(f"Unexpected package listing for {self.config.org}")
            return []

        entries = []
        for package in data:
            if not isinstance(package, dict) or not package.get('name'):
                continue
            name = str(package['name'])
            description = package.get('description') or ''
            entries.append(PackageEntry(
                name=f"{self.config.namespace_prefix}{name}",
                description=str(description).strip()
            ))

        logger.debug(f"Org packages fetched: {len(entries)}")
        self.cache.org_listing.put(ORG_LISTING_KEY, entries)
        return [PackageEntry(e.name, e.description) for e in entries]
