"""Manifest, index and image configuration models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


OCI_INDEX = 'application/vnd.oci.image.index.v1+json'
DOCKER_MANIFEST_LIST = 'application/vnd.docker.distribution.manifest.list.v2+json'
OCI_MANIFEST = 'application/vnd.oci.image.manifest.v1+json'
DOCKER_MANIFEST = 'application/vnd.docker.distribution.manifest.v2+json'

INDEX_MEDIA_TYPES = (OCI_INDEX, DOCKER_MANIFEST_LIST)
MANIFEST_MEDIA_TYPES = (OCI_MANIFEST, DOCKER_MANIFEST)

# Sent on every manifest request so the registry may answer with either shape.
MANIFEST_ACCEPT = ', '.join(INDEX_MEDIA_TYPES + MANIFEST_MEDIA_TYPES)

DESCRIPTION_LABEL = 'org.opencontainers.image.description'


@dataclass(frozen=True)
class Platform:
    """Target platform of a manifest descriptor."""
    os: str
    architecture: str

    def __str__(self) -> str:
        return f"{self.os}/{self.architecture}"


@dataclass(frozen=True)
class ManifestDescriptor:
    """An entry inside a multi-platform index."""
    media_type: str
    digest: str
    platform: Optional[Platform] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ManifestDescriptor':
        platform_data = data.get('platform')
        platform = None
        if isinstance(platform_data, dict):
            platform = Platform(
                os=platform_data.get('os', ''),
                architecture=platform_data.get('architecture', '')
            )
        return cls(
            media_type=data.get('mediaType', ''),
            digest=data.get('digest', ''),
            platform=platform
        )


@dataclass(frozen=True)
class SingleManifest:
    """A platform-specific manifest; only the config digest is kept."""
    config_digest: str


@dataclass(frozen=True)
class ManifestIndex:
    """A multi-platform index."""
    manifests: List[ManifestDescriptor] = field(default_factory=list)

    def select(self, preferred: Platform) -> Optional[ManifestDescriptor]:
        """Pick the preferred platform, else the first entry, else None."""
        for descriptor in self.manifests:
            if descriptor.platform == preferred:
                return descriptor
        if self.manifests:
            return self.manifests[0]
        return None


ManifestDocument = Union[SingleManifest, ManifestIndex]


def is_index_media_type(media_type: str) -> bool:
    media_type = media_type or ''
    return 'image.index' in media_type or 'manifest.list' in media_type


def parse_manifest(data: Dict[str, Any], media_type: str = '') -> ManifestDocument:
    """Build a manifest document from decoded JSON.

    The body's mediaType wins over the response Content-Type. A body without
    either is treated as an index when it carries a manifests list.

    Raises:
        ValueError: The document is neither an index nor a manifest with a
            config digest.
    """
    if not isinstance(data, dict):
        raise ValueError("Manifest document is not a JSON object")

    declared = data.get('mediaType') or media_type or ''
    if is_index_media_type(declared) or (not declared and 'manifests' in data):
        entries = data.get('manifests') or []
        if not isinstance(entries, list):
            raise ValueError("Index 'manifests' is not a list")
        return ManifestIndex(manifests=[
            ManifestDescriptor.from_dict(entry) for entry in entries if isinstance(entry, dict)
        ])

    config = data.get('config') or {}
    digest = config.get('digest') if isinstance(config, dict) else None
    if not digest:
        raise ValueError(f"Manifest has no config digest (mediaType={declared or 'unknown'})")
    return SingleManifest(config_digest=digest)


@dataclass
class ImageConfig:
    """Image configuration blob; only the labels are consumed."""
    labels: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ImageConfig':
        if not isinstance(data, dict):
            raise ValueError("Image config is not a JSON object")
        config = data.get('config') or {}
        labels = config.get('Labels') if isinstance(config, dict) else None
        if not isinstance(labels, dict):
            labels = {}
        return cls(labels={str(k): str(v) for k, v in labels.items() if v is not None})

    @property
    def description(self) -> str:
        return (self.labels.get(DESCRIPTION_LABEL) or '').strip()
