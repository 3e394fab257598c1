"""Tag listing and ordering."""

import functools
import logging
import re
from typing import Iterable, List, Tuple

from ..cache.resolution_cache import MISS, ResolutionCache
from ..config.settings import Config
from ..models.repository import RepositoryRef
from .endpoints import registry_headers, tags_url
from .token_broker import TokenBroker
from .transport import FetchError, Transport


logger = logging.getLogger(__name__)

LATEST = 'latest'

_CHUNK = re.compile(r'(\d+)')


def _natural_key(tag: str) -> Tuple:
    """Numeric-aware, case-insensitive sort key: digit runs compare as numbers."""
    key = []
    for chunk in _CHUNK.split(tag.lower()):
        if not chunk:
            continue
        if chunk.isdigit():
            key.append((0, int(chunk), ''))
        else:
            key.append((1, 0, chunk))
    return tuple(key)


def _compare_tags(a: str, b: str) -> int:
    if a == LATEST:
        return -1
    if b == LATEST:
        return 1
    key_a, key_b = _natural_key(a), _natural_key(b)
    # descending
    return (key_a < key_b) - (key_a > key_b)


def sort_tags(tags: Iterable[str]) -> List[str]:
    """Deduplicate and order tags: 'latest' first, the rest descending by natural order."""
    unique = list(dict.fromkeys(tag for tag in tags if isinstance(tag, str) and tag))
    return sorted(unique, key=functools.cmp_to_key(_compare_tags))


class TagLister:
    """Lists the tags of a repository."""

    def __init__(self, config: Config, transport: Transport, cache: ResolutionCache,
                 token_broker: TokenBroker):
        self.config = config
        self.transport = transport
        self.cache = cache
        self.token_broker = token_broker

    def list_tags(self, repository: RepositoryRef, bypass_cache: bool = False) -> List[str]:
        """Ordered tags of the repository; [] on any failure."""
        key = repository.path
        if not bypass_cache:
            cached = self.cache.tags.get(key)
            if cached is not MISS:
                return list(cached)

        token = self.token_broker.acquire_token(repository, bypass_cache)
        url = tags_url(self.config.registry, repository, self.config.tag_page_size)

        try:
            data = self.transport.get_json(url, registry_headers(token))
        except (FetchError, ValueError) as e:
            logger.warning(f"Failed to list tags for {key}: {e}")
            return []

        raw_tags = data.get('tags') if isinstance(data, dict) else None
        if not isinstance(raw_tags, list):
            raw_tags = []

        tags = sort_tags(raw_tags)
        self.cache.tags.put(key, tags)

        preview = tags[:10]
        more = f" (+{len(tags) - 10})" if len(tags) > 10 else ""
        logger.debug(f"Tags for {key}: {preview}{more}")
        return list(tags)
