"""Reload operation for cached lookups of displayed repositories."""

import logging
from typing import Any, Dict, Iterable

from ..registry.resolver import RegistryClient


logger = logging.getLogger(__name__)


class ReloadOperation:
    """Invalidates cached lookups for the repositories currently shown."""

    def __init__(self, client: RegistryClient):
        self.client = client

    def reload(self, names: Iterable[str], include_org_listing: bool = False) -> Dict[str, Any]:
        names = list(names)
        dropped = self.client.reload(names, include_org_listing=include_org_listing)
        logger.info(f"Reload requested for {len(names)} repositories")
        return {
            'repositories': names,
            'dropped': dropped
        }
