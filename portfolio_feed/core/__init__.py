"""
Core domain models and business logic.

This package contains data types, merging, deduplication and ordering
that are independent of any specific data source.
"""

from .types import FeedItem, PackageEntry, ProjectEntry, RepoInfo
from .dedup import dedup_releases
from .merge import (
    apply_default_icons,
    merge_fields,
    package_items,
    project_item,
    release_items,
    repo_item,
)
from .sort import sort_by_date, sort_highlighted, sort_items

__all__ = [
    "FeedItem",
    "PackageEntry",
    "ProjectEntry",
    "RepoInfo",
    "dedup_releases",
    "apply_default_icons",
    "merge_fields",
    "package_items",
    "project_item",
    "release_items",
    "repo_item",
    "sort_by_date",
    "sort_highlighted",
    "sort_items",
]
