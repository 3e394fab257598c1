"""Concurrent description enrichment for package listings."""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Optional

from tqdm import tqdm

from ..models.repository import PackageEntry
from ..registry.resolver import RegistryClient


logger = logging.getLogger(__name__)


class EnrichmentWorker:
    """Resolves the description of individual entries."""

    def __init__(self, worker_id: int, client: RegistryClient, tag: str = 'latest'):
        self.worker_id = worker_id
        self.client = client
        self.tag = tag

    def resolve(self, name: str, bypass_cache: bool = False) -> Dict[str, Any]:
        """Resolve one entry's description."""
        result = {
            'worker_id': self.worker_id,
            'name': name,
            'description': '',
            'success': False,
            'error': None
        }

        repository = self.client.repository_from_full_name(name)
        if repository is None:
            result['error'] = f"Not a repository in {self.client.config.namespace_prefix}: {name}"
            return result

        try:
            result['description'] = self.client.resolve_description(repository, self.tag, bypass_cache)
            result['success'] = bool(result['description'])
        except Exception as e:
            result['error'] = str(e)
            logger.warning(f"Enrichment failed for {name}: {e}")

        return result


class EnrichmentOrchestrator:
    """Fills in missing descriptions for a batch of entries using a worker pool.

    Results are merged into the returned list as each resolution completes,
    keyed by entry name, and reported through progress_callback so callers
    can show descriptions as they arrive.
    """

    def __init__(self, client: RegistryClient, num_workers: Optional[int] = None, tag: str = 'latest'):
        self.client = client
        self.num_workers = num_workers or client.config.max_workers
        self.tag = tag
        self._lock = threading.Lock()

    def enrich(self, entries: List[PackageEntry], bypass_cache: bool = False,
               progress_callback: Optional[Callable[[PackageEntry, Dict[str, Any]], None]] = None,
               show_progress: bool = False) -> List[PackageEntry]:
        """Return a copy of entries with descriptions resolved where they were empty."""
        enriched = [PackageEntry(entry.name, entry.description) for entry in entries]

        pending = []
        for entry in enriched:
            if not entry.description and entry.name not in pending:
                pending.append(entry.name)

        if not pending:
            return enriched

        workers = [
            EnrichmentWorker(i, self.client, self.tag)
            for i in range(min(self.num_workers, len(pending)))
        ]

        with ThreadPoolExecutor(max_workers=len(workers)) as executor:
            future_to_name = {
                executor.submit(workers[i % len(workers)].resolve, name, bypass_cache): name
                for i, name in enumerate(pending)
            }

            with tqdm(total=len(pending), desc="Resolving descriptions", unit="pkg",
                      disable=not show_progress) as pbar:
                for future in as_completed(future_to_name):
                    result = future.result()
                    if result['success']:
                        updated = self._merge(enriched, result['name'], result['description'])
                        if progress_callback and updated is not None:
                            progress_callback(updated, result)
                        logger.debug(f"Enriched {result['name']}")
                    pbar.update(1)

        return enriched

    def _merge(self, entries: List[PackageEntry], name: str, description: str) -> Optional[PackageEntry]:
        """Write a description into every entry with this name; returns the first one updated."""
        first = None
        with self._lock:
            for entry in entries:
                if entry.name == name:
                    entry.description = description
                    if first is None:
                        first = PackageEntry(entry.name, entry.description)
        return first
