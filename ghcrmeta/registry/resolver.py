"""Description resolution chain and the client that wires the components together."""

import logging
import time
from typing import Callable, Dict, Iterable, List, Optional

from ..cache.resolution_cache import MISS, ResolutionCache
from ..config.settings import Config
from ..discovery.dockerfile import DockerfileDescriptionSource
from ..discovery.packages import PackageDiscovery
from ..models.repository import PackageEntry, RepositoryRef, sanitize_tag
from .labels import ConfigLabelExtractor
from .manifests import ManifestResolver
from .tags import TagLister
from .token_broker import TokenBroker
from .transport import Transport, create_transport


logger = logging.getLogger(__name__)


class DescriptionResolver:
    """Token -> manifest -> (index sub-manifest) -> config blob -> label, cached per repository and tag."""

    def __init__(self, cache: ResolutionCache, token_broker: TokenBroker,
                 manifests: ManifestResolver, labels: ConfigLabelExtractor):
        self.cache = cache
        self.token_broker = token_broker
        self.manifests = manifests
        self.labels = labels

    def describe(self, repository: RepositoryRef, tag: str = 'latest',
                 bypass_cache: bool = False) -> str:
        tag = sanitize_tag(tag)
        key = self.cache.description_key(repository.path, tag)
        if not bypass_cache:
            cached = self.cache.descriptions.get(key)
            if cached is not MISS:
                return cached

        token = self.token_broker.acquire_token(repository, bypass_cache)
        digest = self.manifests.resolve_config_digest(repository, tag, token)
        description = self.labels.extract_description(repository, digest, token) if digest else ''

        self.cache.descriptions.put(key, description)
        preview = description[:80] + ('...' if len(description) > 80 else '')
        logger.debug(f"Label description {repository.path}:{tag} => {preview or '<empty>'}")
        return description


class RegistryClient:
    """Entry point for all metadata lookups against the fixed registry namespace.

    One client owns one transport and one cache, so everything resolved
    through it shares the session cache.
    """

    def __init__(self, config: Config, transport: Optional[Transport] = None,
                 cache: Optional[ResolutionCache] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.config = config
        self.transport = transport or create_transport(config)
        self.cache = cache or ResolutionCache(
            org_listing_ttl=config.org_listing_ttl,
            resolution_ttl=config.resolution_ttl,
            clock=clock
        )

        self.token_broker = TokenBroker(config, self.transport, self.cache)
        self.tag_lister = TagLister(config, self.transport, self.cache, self.token_broker)
        self.manifest_resolver = ManifestResolver(config, self.transport)
        self.label_extractor = ConfigLabelExtractor(config, self.transport)
        self.discovery = PackageDiscovery(config, self.transport, self.cache)
        self.dockerfile_source = DockerfileDescriptionSource(config, self.transport)
        self.description_resolver = DescriptionResolver(
            self.cache, self.token_broker, self.manifest_resolver, self.label_extractor
        )

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        self.transport.close()

    def repository(self, term: str) -> Optional[RepositoryRef]:
        """Parse a search term or display name into a repository reference."""
        return RepositoryRef.from_term(
            term, self.config.registry, self.config.namespace, self.config.aliases
        )

    def repository_from_full_name(self, full_name: str) -> Optional[RepositoryRef]:
        """Parse a row name such as ghcr.io/versa-node/web; None outside the org."""
        return RepositoryRef.from_full_name(
            full_name, self.config.registry, self.config.namespace, self.config.aliases
        )

    def list_org_packages(self, bypass_cache: bool = False) -> List[PackageEntry]:
        return self.discovery.list_org_packages(bypass_cache)

    def acquire_token(self, repository: RepositoryRef, bypass_cache: bool = False) -> str:
        return self.token_broker.acquire_token(repository, bypass_cache)

    def list_tags(self, repository: RepositoryRef, bypass_cache: bool = False) -> List[str]:
        return self.tag_lister.list_tags(repository, bypass_cache)

    def resolve_config_digest(self, repository: RepositoryRef, tag: str = 'latest',
                              bypass_cache: bool = False) -> str:
        token = self.token_broker.acquire_token(repository, bypass_cache)
        return self.manifest_resolver.resolve_config_digest(repository, sanitize_tag(tag), token)

    def extract_description(self, repository: RepositoryRef, digest: str,
                            bypass_cache: bool = False) -> str:
        token = self.token_broker.acquire_token(repository, bypass_cache)
        return self.label_extractor.extract_description(repository, digest, token)

    def describe(self, repository: RepositoryRef, tag: str = 'latest',
                 bypass_cache: bool = False) -> str:
        """Description label of repository:tag; '' when absent or unavailable."""
        return self.description_resolver.describe(repository, tag, bypass_cache)

    def resolve_description(self, repository: RepositoryRef, tag: str = 'latest',
                            bypass_cache: bool = False) -> str:
        """Label description, falling back to the source Dockerfile when enabled."""
        description = self.describe(repository, tag, bypass_cache)
        if description or not self.config.dockerfile_fallback:
            return description

        key = self.cache.fallback_key(repository.path, sanitize_tag(tag))
        if not bypass_cache:
            cached = self.cache.descriptions.get(key)
            if cached is not MISS:
                return cached

        description = self.dockerfile_source.fetch_description(repository.name)
        self.cache.descriptions.put(key, description)
        return description

    def reload(self, names: Iterable[str], include_org_listing: bool = False) -> Dict[str, int]:
        """Invalidate cached lookups for the given display names or terms."""
        paths = []
        for name in names:
            repository = self.repository(name)
            if repository is not None:
                paths.append(repository.path)
        dropped = self.cache.reload(paths)
        if include_org_listing:
            dropped['org_listing'] = int(self.cache.invalidate_org_listing())
        return dropped
