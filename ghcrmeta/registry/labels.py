"""Description label extraction from image config blobs."""

import logging

from ..config.settings import Config
from ..models.manifest import ImageConfig
from ..models.repository import RepositoryRef
from .endpoints import blob_url, registry_headers
from .transport import FetchError, Transport


logger = logging.getLogger(__name__)


class ConfigLabelExtractor:
    """Reads the description label from a config blob."""

    def __init__(self, config: Config, transport: Transport):
        self.config = config
        self.transport = transport

    def fetch_config(self, repository: RepositoryRef, digest: str, token: str = '') -> ImageConfig:
        """Fetch and parse the config blob.

        Raises:
            FetchError: The blob could not be fetched.
            ValueError: The blob is not an image configuration document.
        """
        url = blob_url(self.config.registry, repository, digest)
        data = self.transport.get_json(url, registry_headers(token))
        return ImageConfig.from_dict(data)

    def extract_description(self, repository: RepositoryRef, digest: str, token: str = '') -> str:
        if not digest:
            return ''
        try:
            image_config = self.fetch_config(repository, digest, token)
        except (FetchError, ValueError) as e:
            logger.debug(f"Config blob {digest} for {repository.path} unavailable: {e}")
            return ''
        return image_config.description
