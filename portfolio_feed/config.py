"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- GitHubConfig: GitHub GraphQL/REST API settings
- NpmConfig: npm registry and downloads API settings
- ArticlesConfig: dev.to article index settings
- FeedConfig: Which sources to include and how to order the feed
- OutputConfig: Output file locations and layout
- LoggingConfig: Logging behavior
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from typing import Any

import yaml


USER_AGENT = "portfolio-feed/0.1.0"


@dataclass
class GitHubConfig:
    """Configuration for the GitHub connector.

    Attributes:
        graphql_url: GraphQL endpoint used for repository queries
        api_url: REST API base URL used for repository listings
        token: Optional inline token (overrides env var)
        token_env: Environment variable name containing the bearer token
        timeout_seconds: HTTP request timeout, None to wait indefinitely
        trust_env: Whether to respect system proxy settings
        topics_limit: Maximum number of repository topics to request
    """

    graphql_url: str = "https://api.github.com/graphql"
    api_url: str = "https://api.github.com"
    token: str | None = None
    token_env: str = "GITHUB_TOKEN"
    timeout_seconds: float | None = 30.0
    trust_env: bool = True
    topics_limit: int = 10


@dataclass
class NpmConfig:
    """Configuration for the npm registry connector.

    Attributes:
        registry_url: Registry base URL for package records
        downloads_url: Base URL of the downloads API
        downloads_from: First day of the download count window
        downloads_till: Last day of the download count window
        timeout_seconds: HTTP request timeout, None to wait indefinitely
        trust_env: Whether to respect system proxy settings
    """

    registry_url: str = "https://registry.npmjs.org"
    downloads_url: str = "https://api.npmjs.org/downloads"
    downloads_from: str = "1900-01-01"
    downloads_till: str = "2100-01-31"
    timeout_seconds: float | None = 30.0
    trust_env: bool = True


@dataclass
class ArticlesConfig:
    """Configuration for the dev.to article index.

    Attributes:
        enabled: Whether articles are pulled into the feed
        api_url: Base URL of the dev.to API
        api_key: Optional inline API key (overrides env var)
        api_key_env: Environment variable name containing the API key
        per_page: Page size requested from the index
        excluded_tags: Tags dropped from article entries
        site_url: Base URL of the local article pages, used for imported links
            and canonical URLs
        profile: dev.to user name whose article links are rewritten on import
        update_canonical: Point the canonical URL of each imported article at
            the local page
        timeout_seconds: HTTP request timeout, None to wait indefinitely
        trust_env: Whether to respect system proxy settings
    """

    enabled: bool = True
    api_url: str = "https://dev.to/api"
    api_key: str | None = None
    api_key_env: str = "DEV_TO_API_KEY"
    per_page: int = 1000
    excluded_tags: list[str] = field(
        default_factory=lambda: ["development", "updraftsapp", "makers"]
    )
    site_url: str = "https://meijer.ws/articles"
    profile: str = "smeijer"
    update_canonical: bool = False
    timeout_seconds: float | None = 30.0
    trust_env: bool = True


@dataclass
class FeedConfig:
    """Configuration for feed assembly.

    Attributes:
        include_releases: Derive release entries from registry version history
        include_downloads: Attach download counts to library entries
        dedup_releases: Keep only the first release entry per title
        sort: Final ordering: "date", "date_asc" or "highlight"
    """

    include_releases: bool = True
    include_downloads: bool = True
    dedup_releases: bool = True
    sort: str = "date"


@dataclass
class OutputConfig:
    """Configuration for output generation.

    Attributes:
        feed_path: Where the full feed is written
        packages_path: Where the project/library listing is written
        layout: "list" for a JSON array, "categories" for an object keyed by type
        indent: JSON indentation
        articles_dir: Directory holding authored articles (for cover checks)
        covers_dir: Directory holding article cover images
    """

    feed_path: str = "data/feed.json"
    packages_path: str = "data/packages.json"
    layout: str = "list"
    indent: int = 2
    articles_dir: str = "src/pages/articles"
    covers_dir: str = "public/articles"


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the log file
        dir: Directory the log file is written to
    """

    level: str = "INFO"
    console: bool = True
    file: bool = False
    format: str = "jsonl"
    filename: str = "sync.jsonl"
    dir: str = ".logs"


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    projects_path: str = "data/projects.yaml"
    github: GitHubConfig = field(default_factory=GitHubConfig)
    npm: NpmConfig = field(default_factory=NpmConfig)
    articles: ArticlesConfig = field(default_factory=ArticlesConfig)
    feed: FeedConfig = field(default_factory=FeedConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return AppConfig()

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(AppConfig(), raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "projects_path": cfg.projects_path,
        "github": {
            "graphql_url": cfg.github.graphql_url,
            "api_url": cfg.github.api_url,
            "token": cfg.github.token,
            "token_env": cfg.github.token_env,
            "timeout_seconds": cfg.github.timeout_seconds,
            "trust_env": cfg.github.trust_env,
            "topics_limit": cfg.github.topics_limit,
        },
        "npm": {
            "registry_url": cfg.npm.registry_url,
            "downloads_url": cfg.npm.downloads_url,
            "downloads_from": cfg.npm.downloads_from,
            "downloads_till": cfg.npm.downloads_till,
            "timeout_seconds": cfg.npm.timeout_seconds,
            "trust_env": cfg.npm.trust_env,
        },
        "articles": {
            "enabled": cfg.articles.enabled,
            "api_url": cfg.articles.api_url,
            "api_key": cfg.articles.api_key,
            "api_key_env": cfg.articles.api_key_env,
            "per_page": cfg.articles.per_page,
            "excluded_tags": list(cfg.articles.excluded_tags),
            "timeout_seconds": cfg.articles.timeout_seconds,
            "trust_env": cfg.articles.trust_env,
        },
        "feed": {
            "include_releases": cfg.feed.include_releases,
            "include_downloads": cfg.feed.include_downloads,
            "dedup_releases": cfg.feed.dedup_releases,
            "sort": cfg.feed.sort,
        },
        "output": {
            "feed_path": cfg.output.feed_path,
            "packages_path": cfg.output.packages_path,
            "layout": cfg.output.layout,
            "indent": cfg.output.indent,
            "articles_dir": cfg.output.articles_dir,
            "covers_dir": cfg.output.covers_dir,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
            "dir": cfg.logging.dir,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        projects_path=data["projects_path"],
        github=GitHubConfig(**data["github"]),
        npm=NpmConfig(**data["npm"]),
        articles=ArticlesConfig(**data["articles"]),
        feed=FeedConfig(**data["feed"]),
        output=OutputConfig(**data["output"]),
        logging=LoggingConfig(**data["logging"]),
    )


def get_github_token(cfg: GitHubConfig) -> str | None:
    """Get the GitHub token from inline config or environment variable."""
    if cfg.token:
        return cfg.token
    return os.getenv(cfg.token_env)


def get_articles_api_key(cfg: ArticlesConfig) -> str | None:
    """Get the dev.to API key from inline config or environment variable."""
    if cfg.api_key:
        return cfg.api_key
    return os.getenv(cfg.api_key_env)
