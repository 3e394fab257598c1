"""Repository and package data models."""

import re
from dataclasses import dataclass
from typing import List, Optional


TAG_PATTERN = re.compile(r'^[A-Za-z0-9._-]+$')


@dataclass(frozen=True)
class RepositoryRef:
    """Identifies one repository under the fixed registry namespace."""
    registry: str
    namespace: str
    name: str

    def __post_init__(self):
        if not self.name:
            raise ValueError("Repository name must not be empty")
        if '/' in self.name:
            raise ValueError(f"Repository name must not contain '/': {self.name}")

    @property
    def path(self) -> str:
        """Registry path, e.g. versa-node/web."""
        return f"{self.namespace}/{self.name}"

    @property
    def full_name(self) -> str:
        """Display name, e.g. ghcr.io/versa-node/web."""
        return f"{self.registry}/{self.namespace}/{self.name}"

    def __str__(self) -> str:
        return self.full_name

    @classmethod
    def from_term(cls, term: str, registry: str, namespace: str,
                  aliases: List[str]) -> Optional['RepositoryRef']:
        """Build a reference from free-form user input.

        Strips a leading registry host, then a leading org alias, then any
        tag suffix. Returns None when no repository name remains or the
        remainder still contains a path separator.
        """
        name = strip_namespace(term, registry, aliases)
        name = name.split(':')[0].split('@')[0].strip('/')
        if not name or '/' in name:
            return None
        return cls(registry=registry, namespace=namespace, name=name)

    @classmethod
    def from_full_name(cls, full_name: str, registry: str, namespace: str,
                       aliases: List[str]) -> Optional['RepositoryRef']:
        """Parse a display name such as ghcr.io/versa-node/web:1.0.

        Unlike from_term, a bare repository name is rejected: the name must
        carry the org, with or without the registry host.
        """
        if not targets_namespace(full_name, registry, aliases):
            return None
        return cls.from_term(full_name, registry, namespace, aliases)


@dataclass
class PackageEntry:
    """One row returned to the caller; description fills in progressively."""
    name: str
    description: str = ""

    def to_dict(self):
        return {"name": self.name, "description": self.description}


def _alias_group(aliases: List[str]) -> str:
    return '|'.join(re.escape(alias) for alias in aliases)


def strip_namespace(term: str, registry: str, aliases: List[str]) -> str:
    """Remove a leading registry host and org alias from a search term."""
    text = (term or '').strip()
    text = re.sub(rf'^{re.escape(registry)}(/|$)', '', text, flags=re.IGNORECASE)
    text = re.sub(rf'^({_alias_group(aliases)})(/|$)', '', text, flags=re.IGNORECASE)
    return text.strip()


def targets_namespace(term: str, registry: str, aliases: List[str]) -> bool:
    """Whether the term names a repository inside the org (with or without host)."""
    text = (term or '').strip().lower()
    group = _alias_group(aliases)
    return bool(
        re.match(rf'^{re.escape(registry)}/({group})/[^/]+', text)
        or re.match(rf'^({group})/[^/]+', text)
    )


def sanitize_tag(tag: Optional[str]) -> str:
    """Return the tag if it is safe to place in a URL, else 'latest'."""
    tag = (tag or '').strip()
    if not tag or not TAG_PATTERN.match(tag):
        return 'latest'
    return tag
