"""
Source connectors.

Each connector fetches and normalizes data from one external source:
GitHub repositories, the npm registry and the dev.to article index.
"""

from .articles import ArticlesConnector, article_to_item, clean_slug, transform_markdown
from .github import GitHubConnector, GitHubError, parse_repo_ref
from .npm import NpmConnector, clean_description, release_versions

__all__ = [
    "ArticlesConnector",
    "article_to_item",
    "clean_slug",
    "transform_markdown",
    "GitHubConnector",
    "GitHubError",
    "parse_repo_ref",
    "NpmConnector",
    "clean_description",
    "release_versions",
]
