"""Description fallback read from the package's source Dockerfile."""

import logging
import re

from ..config.settings import Config
from ..models.manifest import DESCRIPTION_LABEL
from ..registry.transport import FetchError, Transport


logger = logging.getLogger(__name__)

_KEY = re.escape(DESCRIPTION_LABEL)

LABEL_PATTERNS = [
    re.compile(rf'{_KEY}\s*=\s*"([^"]*)"'),
    re.compile(rf"{_KEY}\s*=\s*'([^']*)'"),
    re.compile(rf'"{_KEY}"\s*=\s*"([^"]*)"'),
    re.compile(rf"['\"]{_KEY}['\"]\s*=\s*['\"]([^'\"]*)['\"]"),
]


def extract_label_description(text: str) -> str:
    """Find the description label value in Dockerfile text."""
    for pattern in LABEL_PATTERNS:
        match = pattern.search(text or '')
        if match:
            return (match.group(1) or '').strip()
    return ''


class DockerfileDescriptionSource:
    """Reads the description label out of the package Dockerfile on GitHub."""

    def __init__(self, config: Config, transport: Transport):
        self.config = config
        self.transport = transport

    def dockerfile_url(self, name: str) -> str:
        safe = re.sub(r'[^a-zA-Z0-9._-]', '', name or '')
        return self.config.dockerfile_url_template.format(name=safe)

    def fetch_description(self, name: str) -> str:
        if not re.sub(r'[^a-zA-Z0-9._-]', '', name or ''):
            return ''
        try:
            result = self.transport.get(self.dockerfile_url(name))
            text = result.body.decode('utf-8', errors='replace')
        except FetchError as e:
            logger.debug(f"Dockerfile for {name} unavailable: {e}")
            return ''

        description = extract_label_description(text)
        logger.debug(f"Dockerfile description for {name}: {description or '<empty>'}")
        return description
