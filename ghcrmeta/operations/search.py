"""Search operations over the organization's packages."""

import logging
from typing import Any, Callable, Dict, Optional

from ..models.repository import PackageEntry, strip_namespace
from ..registry.resolver import RegistryClient
from ..workers.enrichment import EnrichmentOrchestrator


logger = logging.getLogger(__name__)


class SearchOperation:
    """Turns a typed search term into package entries."""

    def __init__(self, client: RegistryClient, num_workers: Optional[int] = None):
        self.client = client
        self.orchestrator = EnrichmentOrchestrator(client, num_workers)

    def search(self, term: str = '', enrich: bool = True, bypass_cache: bool = False,
               progress_callback: Optional[Callable] = None,
               show_progress: bool = False) -> Dict[str, Any]:
        """Search the org.

        An empty term, or one naming only the org, lists every org package.
        A term naming one repository yields that single entry. Anything
        else yields no entries.
        """
        config = self.client.config
        typed = strip_namespace(term, config.registry, config.aliases).strip('/')

        if not typed:
            mode = 'org'
            entries = self.client.list_org_packages(bypass_cache)
        else:
            mode = 'repository'
            repository = self.client.repository(term)
            entries = [PackageEntry(repository.full_name)] if repository else []

        logger.info(f"Search '{term}' ({mode}): {len(entries)} entries")

        if enrich and entries:
            entries = self.orchestrator.enrich(
                entries,
                bypass_cache=bypass_cache,
                progress_callback=progress_callback,
                show_progress=show_progress
            )

        return {
            'term': term,
            'mode': mode,
            'entries': entries
        }
