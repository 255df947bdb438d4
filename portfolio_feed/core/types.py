"""
Core data types for the portfolio feed.

This module defines the records passed between pipeline stages:
- ProjectEntry: A locally maintained project, by repo reference or inline fields
- PackageEntry: A package manifest found inside a repository
- RepoInfo: Repository metadata returned by the GitHub connector
- FeedItem: The unified record written to the output feed
"""

from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any


FEED_TYPES = ("project", "webapp", "library", "article", "release")


@dataclass
class ProjectEntry:
    """A project from the local project list.

    Either ``repo`` is set (metadata is fetched from GitHub) or the entry is
    described inline through ``name`` and ``description``.

    Attributes:
        repo: Repository reference, "owner/name" or a full GitHub URL
        name: Display name, overrides the fetched name
        description: Description, overrides the fetched description
        url: External link, overrides the resolved link
        tags: Tags, override the fetched topics
        date: Publish date (ISO 8601), overrides the repository creation date
        highlight: Promote the entry to featured placement
        type: Feed type for the entry, overrides the derived type
        image: Preview image path
        icon: Icon path
        packages: Registry package names whose releases should be tracked
    """
    repo: str | None = None
    name: str | None = None
    description: str | None = None
    url: str | None = None
    tags: list[str] | None = None
    date: str | None = None
    highlight: bool = False
    type: str | None = None
    image: str | None = None
    icon: str | None = None
    packages: list[str] = field(default_factory=list)

    def is_renderable(self) -> bool:
        return bool(self.repo) or bool(self.name and self.description)


@dataclass
class PackageEntry:
    """Metadata for one package manifest inside a repository.

    Attributes:
        name: Package name from the manifest
        description: Package description
        tags: Manifest keywords
        private: True when the manifest declares itself private
        links: Mapping of "homepage", "github" and "npm" to URL or None
        link: Resolved external link (homepage, else source, else registry)
        logo: Logo file name found next to the manifest
        stars: Star count of the owning repository
        date: Creation date of the owning repository (YYYY-MM-DD)
        path: Manifest path inside the repository, None for the root manifest
    """
    name: str | None
    description: str | None = None
    tags: list[str] = field(default_factory=list)
    private: bool = False
    links: dict[str, str | None] = field(default_factory=dict)
    link: str | None = None
    logo: str | None = None
    stars: int = 0
    date: str | None = None
    path: str | None = None

    @property
    def is_public(self) -> bool:
        return bool(self.name) and not self.private


@dataclass
class RepoInfo:
    """Repository metadata plus its public packages."""
    owner: str
    name: str
    description: str | None = None
    private: bool = False
    stars: int = 0
    date: str | None = None
    branch: str | None = None
    tags: list[str] = field(default_factory=list)
    logo: str | None = None
    link: str | None = None
    links: dict[str, str | None] = field(default_factory=dict)
    packages: list[PackageEntry] = field(default_factory=list)


@dataclass
class FeedItem:
    """One entry of the output feed.

    Only ``type`` and ``title`` are always present; every other field is
    optional and omitted from the serialized form when unset.
    """
    type: str
    title: str
    description: str | None = None
    url: str | None = None
    published: str | None = None
    tags: list[str] | None = None
    icon: str | None = None
    image: str | None = None
    slug: str | None = None
    canonical: str | None = None
    version: str | None = None
    project: str | None = None
    highlight: bool | None = None
    stars: int | None = None
    downloads: int | None = None
    links: dict[str, str | None] | None = None
    repo: str | None = None
    logo: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict, dropping unset fields."""
        data: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            data[f.name] = value
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FeedItem":
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})
