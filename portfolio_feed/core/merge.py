"""
Merging of local project data with fetched connector data.

Local values always win over fetched values: every field a project sets
explicitly replaces whatever GitHub or npm reported for it.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from ..connectors.npm import clean_description, release_versions
from .types import FeedItem, ProjectEntry, RepoInfo


ARTICLE_ICON = "/logos/article.svg"
RELEASE_ICON = "/logos/release.svg"
REPO_ICON = "/logos/github.svg"

# Project-level fields that also apply to every package of the repository.
SHARED_FIELDS = ("highlight", "image", "icon")


def merge_fields(fetched: dict[str, Any], local: dict[str, Any]) -> dict[str, Any]:
    """Return ``{**fetched, **local}`` where only local values that are set count."""
    merged = dict(fetched)
    for key, value in local.items():
        if value is None:
            continue
        merged[key] = value
    return merged


def local_overrides(project: ProjectEntry) -> dict[str, Any]:
    """FeedItem fields explicitly set on a project entry."""
    return {
        "type": project.type,
        "title": project.name,
        "description": project.description,
        "url": project.url,
        "published": project.date,
        "tags": sorted(project.tags) if project.tags is not None else None,
        "highlight": project.highlight,
        "image": project.image,
        "icon": project.icon,
    }


def project_item(project: ProjectEntry) -> FeedItem:
    """Build the FeedItem of a project described inline."""
    fetched = {"type": "project", "tags": []}
    return FeedItem(**merge_fields(fetched, local_overrides(project)))


def repo_item(project: ProjectEntry, repo: RepoInfo) -> FeedItem:
    """Build the FeedItem of a repository without public packages."""
    fetched = {
        "type": "webapp" if repo.private else "project",
        "title": repo.name,
        "description": repo.description,
        "url": repo.link,
        "published": repo.date,
        "tags": sorted(repo.tags),
        "stars": repo.stars,
        "links": dict(repo.links),
        "repo": project.repo,
        "logo": repo.logo,
    }
    return FeedItem(**merge_fields(fetched, local_overrides(project)))


def package_items(project: ProjectEntry, repo: RepoInfo) -> list[FeedItem]:
    """Build one ``library`` FeedItem per public package of a repository."""
    overrides = local_overrides(project)
    shared = {key: overrides[key] for key in SHARED_FIELDS}

    items: list[FeedItem] = []
    for package in repo.packages:
        if not package.is_public:
            continue
        fetched = {
            "type": "library",
            "title": package.name,
            "description": package.description,
            "url": package.link,
            "published": package.date,
            "tags": sorted(package.tags),
            "stars": package.stars,
            "links": dict(package.links),
            "repo": project.repo,
            "logo": package.logo,
        }
        items.append(FeedItem(**merge_fields(fetched, shared)))
    return items


def release_items(
    package_name: str,
    record: dict[str, Any],
    project_title: str | None = None,
    fallback_description: str | None = None,
) -> list[FeedItem]:
    """Build one ``release`` FeedItem per version in a registry record."""
    title = record.get("name") or package_name
    description = clean_description(record.get("description")) or fallback_description
    return [
        FeedItem(
            type="release",
            title=title,
            description=description,
            url=f"https://npmjs.com/{package_name}",
            published=published,
            project=project_title,
            version=version,
        )
        for version, published in release_versions(record.get("time"))
    ]


def apply_default_icons(items: list[FeedItem]) -> list[FeedItem]:
    """Fill in the per-type default icon where none is set."""
    result: list[FeedItem] = []
    for item in items:
        if item.icon:
            result.append(item)
        elif item.type == "article":
            result.append(replace(item, icon=ARTICLE_ICON))
        elif item.type == "release":
            result.append(replace(item, icon=RELEASE_ICON))
        elif item.repo:
            result.append(replace(item, icon=REPO_ICON))
        else:
            result.append(item)
    return result
