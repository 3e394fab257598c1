"""Row-selection lookups: tags and description of one repository."""

import logging
from typing import Any, Dict, Optional

from ..models.repository import sanitize_tag
from ..registry.resolver import RegistryClient
from ..registry.tags import LATEST


logger = logging.getLogger(__name__)


class DescribeOperation:
    """Resolves the tag list and description for a selected repository."""

    def __init__(self, client: RegistryClient):
        self.client = client

    def describe(self, term: str, tag: Optional[str] = None, bypass_cache: bool = False) -> Dict[str, Any]:
        repository = self.client.repository(term)
        if repository is None:
            logger.info(f"'{term}' does not name a repository in {self.client.config.namespace_prefix}")
            return {
                'name': term,
                'tags': [],
                'selected_tag': LATEST,
                'description': ''
            }

        tags = self.client.list_tags(repository, bypass_cache)
        selected_tag = self._select_tag(tags, tag)
        description = self.client.resolve_description(repository, selected_tag, bypass_cache)

        return {
            'name': repository.full_name,
            'tags': tags,
            'selected_tag': selected_tag,
            'description': description
        }

    @staticmethod
    def _select_tag(tags, requested: Optional[str]) -> str:
        if requested:
            return sanitize_tag(requested)
        if LATEST in tags:
            return LATEST
        if tags:
            return sanitize_tag(tags[0])
        return LATEST
