"""Manifest and manifest-index resolution."""

import logging
from typing import Optional

from ..config.settings import Config
from ..models.manifest import (
    MANIFEST_ACCEPT,
    ManifestDocument,
    ManifestIndex,
    Platform,
    SingleManifest,
    parse_manifest,
)
from ..models.repository import RepositoryRef
from .endpoints import manifest_url, registry_headers
from .transport import FetchError, Transport


logger = logging.getLogger(__name__)


class ManifestResolver:
    """Resolves a tag to the config digest of one concrete manifest.

    A tag may point at a single-platform manifest, whose config digest is the
    answer, or at an index. For an index the preferred platform entry is
    chosen (falling back to the first entry) and that manifest is fetched by
    digest in a second hop.
    """

    def __init__(self, config: Config, transport: Transport):
        self.config = config
        self.transport = transport
        self.preferred_platform = Platform(
            os=config.platform_os,
            architecture=config.platform_architecture
        )

    def fetch_manifest(self, repository: RepositoryRef, reference: str,
                       token: str) -> Optional[ManifestDocument]:
        """Fetch and parse the manifest at a tag or digest; None on failure."""
        url = manifest_url(self.config.registry, repository, reference)
        try:
            result = self.transport.get(url, registry_headers(token, MANIFEST_ACCEPT))
            return parse_manifest(result.json(), result.content_type)
        except (FetchError, ValueError) as e:
            logger.debug(f"Manifest {repository.path}@{reference} unavailable: {e}")
            return None

    def resolve_config_digest(self, repository: RepositoryRef, tag: str, token: str = '') -> str:
        """Config digest for repository:tag, or '' when it cannot be determined."""
        document = self.fetch_manifest(repository, tag, token)

        if isinstance(document, SingleManifest):
            return document.config_digest

        if isinstance(document, ManifestIndex):
            descriptor = document.select(self.preferred_platform)
            if descriptor is None or not descriptor.digest:
                logger.debug(f"Index for {repository.path}:{tag} has no usable entries")
                return ''

            if descriptor.platform != self.preferred_platform:
                logger.debug(
                    f"{repository.path}:{tag} has no {self.preferred_platform} entry; "
                    f"using {descriptor.platform or 'first entry'}"
                )

            child = self.fetch_manifest(repository, descriptor.digest, token)
            if isinstance(child, SingleManifest):
                return child.config_digest
            return ''

        return ''
