"""Registry v2 endpoint URLs and request headers."""

from typing import Dict

from ..models.repository import RepositoryRef


def v2_url(registry: str, repository: RepositoryRef, suffix: str) -> str:
    return f"https://{registry}/v2/{repository.path}/{suffix}"


def tags_url(registry: str, repository: RepositoryRef, page_size: int) -> str:
    return v2_url(registry, repository, f"tags/list?n={page_size}")


def manifest_url(registry: str, repository: RepositoryRef, reference: str) -> str:
    """Manifest by tag or digest."""
    return v2_url(registry, repository, f"manifests/{reference}")


def blob_url(registry: str, repository: RepositoryRef, digest: str) -> str:
    return v2_url(registry, repository, f"blobs/{digest}")


def registry_headers(token: str, accept: str = 'application/json') -> Dict[str, str]:
    """Headers for a registry GET; the bearer header is omitted without a token."""
    headers = {
        'Accept': accept,
        'Docker-Distribution-API-Version': 'registry/2.0',
    }
    if token:
        headers['Authorization'] = f"Bearer {token}"
    return headers
