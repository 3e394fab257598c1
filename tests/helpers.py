"""Canned registry documents and test doubles."""

import json

from ghcrmeta.models.manifest import DOCKER_MANIFEST, OCI_INDEX, OCI_MANIFEST
from ghcrmeta.registry.transport import FetchError, FetchResult, Transport


class FakeTransport(Transport):
    """Serves canned bodies by URL and records every request."""

    def __init__(self):
        self.routes = {}
        self.calls = []

    def add(self, url, body, content_type=''):
        if isinstance(body, (dict, list)):
            body = json.dumps(body)
        if isinstance(body, str):
            body = body.encode('utf-8')
        self.routes[url] = (body, content_type)

    def add_error(self, url, status=404):
        self.routes[url] = FetchError(url, f"HTTP {status}", status)

    def get(self, url, headers=None):
        self.calls.append((url, dict(headers or {})))
        route = self.routes.get(url)
        if route is None:
            raise FetchError(url, "HTTP 404", 404)
        if isinstance(route, FetchError):
            raise route
        body, content_type = route
        return FetchResult(body=body, content_type=content_type)

    def count(self, prefix):
        return sum(1 for url, _ in self.calls if url.startswith(prefix))

    def headers_for(self, url):
        return [headers for called, headers in self.calls if called == url]


class ManualClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


REGISTRY = 'https://ghcr.io/v2/versa-node'


def manifest_url(name, reference):
    return f"{REGISTRY}/{name}/manifests/{reference}"


def blob_url(name, digest):
    return f"{REGISTRY}/{name}/blobs/{digest}"


def tags_url(name, page_size=200):
    return f"{REGISTRY}/{name}/tags/list?n={page_size}"


def single_manifest(config_digest, media_type=OCI_MANIFEST):
    return {
        'schemaVersion': 2,
        'mediaType': media_type,
        'config': {'mediaType': 'application/vnd.oci.image.config.v1+json', 'digest': config_digest},
        'layers': [],
    }


def index_manifest(entries):
    return {
        'schemaVersion': 2,
        'mediaType': OCI_INDEX,
        'manifests': [
            {
                'mediaType': DOCKER_MANIFEST,
                'digest': digest,
                'platform': {'os': os_name, 'architecture': arch},
            }
            for digest, os_name, arch in entries
        ],
    }


def image_config(labels=None):
    return {
        'architecture': 'amd64',
        'os': 'linux',
        'config': {'Labels': labels},
    }


