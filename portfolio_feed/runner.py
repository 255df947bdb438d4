"""
Main pipeline orchestration for the portfolio feed.

This module coordinates the whole sync:
1. Load the local project list
2. Fetch repository metadata and packages from GitHub
3. Fetch download counts and release history from npm
4. Pull published articles from dev.to
5. Deduplicate releases and sort
6. Write the JSON feed

It also writes the project listing and imports dev.to articles as local
markdown pages.

Every external call is awaited in turn; a failing call aborts the run.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Callable

from rich.console import Console
from rich.progress import (
    BarColumn,
    Progress,
    SpinnerColumn,
    TaskProgressColumn,
    TextColumn,
    TimeRemainingColumn,
)

from .config import AppConfig, get_articles_api_key, get_github_token
from .connectors.articles import ArticlesConnector, article_to_item, clean_slug, transform_markdown
from .connectors.github import GitHubConnector
from .connectors.npm import NpmConnector
from .core.dedup import dedup_releases
from .core.merge import apply_default_icons, package_items, project_item, release_items, repo_item
from .core.sort import sort_by_date, sort_items
from .core.types import FeedItem, ProjectEntry
from .input.projects import load_projects
from .output.writer import write_feed
from .utils.logging import log_event, setup_logging


@dataclass
class SyncStats:
    """Counters collected during a sync.

    Attributes:
        projects: Number of local project entries processed
        repos: Repositories fetched from GitHub
        libraries: Library entries produced from package manifests
        releases: Release entries before deduplication
        articles: Article entries
        written: Entries in the written file
    """
    projects: int = 0
    repos: int = 0
    libraries: int = 0
    releases: int = 0
    articles: int = 0
    written: int = 0


def run_pipeline(
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
    github: GitHubConnector | None = None,
    npm: NpmConnector | None = None,
    articles: ArticlesConnector | None = None,
) -> Path:
    """Run the full sync and write the feed file.

    Connectors are built from ``cfg`` unless passed in explicitly.

    Returns:
        Path to the written feed file
    """
    logger = setup_logging(cfg.logging)
    console = console or Console()
    stats = SyncStats()

    projects = load_projects(cfg.projects_path)
    log_event(logger, "Sync start", event="sync_start", projects=len(projects))

    github = github or _build_github(cfg, projects)
    npm = npm or NpmConnector(cfg.npm)

    items = _collect_with_progress(
        projects,
        github,
        npm,
        cfg,
        stats,
        logger,
        include_releases=cfg.feed.include_releases,
        show_progress=show_progress,
        console=console,
    )

    if cfg.articles.enabled:
        articles = articles or ArticlesConnector(cfg.articles, get_articles_api_key(cfg.articles))
        article_items = [
            article_to_item(raw, cfg.articles.excluded_tags) for raw in articles.list_articles()
        ]
        stats.articles = len(article_items)
        items.extend(article_items)
        log_event(logger, f"Fetched {len(article_items)} articles", event="articles", count=len(article_items))

    # Oldest first so the earliest release of each title is the one kept
    items = sort_by_date(items, descending=False)
    if cfg.feed.dedup_releases:
        items = dedup_releases(items)
    items = apply_default_icons(items)
    items = sort_items(items, cfg.feed.sort)

    path = write_feed(items, cfg.output.feed_path, cfg.output.layout, cfg.output.indent)
    stats.written = len(items)
    log_event(logger, f"Wrote {stats.written} entries to {path}", event="sync_done", path=str(path))
    _render_stats(stats, console)
    return path


def run_projects(
    cfg: AppConfig,
    show_progress: bool = True,
    console: Console | None = None,
    github: GitHubConnector | None = None,
    npm: NpmConnector | None = None,
) -> Path:
    """Write the project/library listing, highlight-ordered.

    Only projects linked to a repository are listed; inline entries belong
    to the full feed.

    Returns:
        Path to the written packages file
    """
    logger = setup_logging(cfg.logging)
    console = console or Console()
    stats = SyncStats()

    projects = [project for project in load_projects(cfg.projects_path) if project.repo]
    github = github or _build_github(cfg, projects)
    npm = npm or NpmConnector(cfg.npm)

    items = _collect_with_progress(
        projects,
        github,
        npm,
        cfg,
        stats,
        logger,
        include_releases=False,
        show_progress=show_progress,
        console=console,
    )
    items = sort_items(items, "highlight")

    path = write_feed(items, cfg.output.packages_path, "list", cfg.output.indent)
    stats.written = len(items)
    log_event(logger, f"Wrote {stats.written} projects to {path}", event="projects_done", path=str(path))
    _render_stats(stats, console)
    return path


def import_articles(
    cfg: AppConfig,
    articles: ArticlesConnector | None = None,
    output_dir: str | Path | None = None,
) -> list[Path]:
    """Fetch every published article and save it as ``<slug>.mdx``.

    Each body is rewritten with ``transform_markdown``. When
    ``articles.update_canonical`` is set, articles whose canonical URL does
    not point at the local pages are updated on dev.to first.

    Returns:
        Paths of the written article files
    """
    logger = setup_logging(cfg.logging)
    articles = articles or ArticlesConnector(cfg.articles, get_articles_api_key(cfg.articles))
    site_url = cfg.articles.site_url.rstrip("/")
    target = Path(output_dir or cfg.output.articles_dir)
    target.mkdir(parents=True, exist_ok=True)

    written: list[Path] = []
    for summary in articles.list_articles():
        article = articles.get_article(summary["id"])
        slug = clean_slug(article["slug"])

        canonical = article.get("canonical_url") or ""
        if cfg.articles.update_canonical and not canonical.startswith(site_url):
            canonical = f"{site_url}/{slug}"
            log_event(logger, f"Updating canonical to {canonical}", event="canonical", slug=slug)
            articles.update_canonical(article["id"], canonical)

        content = transform_markdown(
            article.get("body_markdown") or "",
            article.get("created_at") or "",
            site_url,
            cfg.articles.profile,
        )
        path = target / f"{slug}.mdx"
        path.write_text(content, encoding="utf-8")
        log_event(logger, f"Saved {slug}", event="article_saved", path=str(path))
        written.append(path)

    return written


def collect_project_items(
    projects: list[ProjectEntry],
    github: GitHubConnector | None,
    npm: NpmConnector,
    cfg: AppConfig,
    stats: SyncStats,
    logger: logging.Logger,
    include_releases: bool = True,
    on_project: Callable[[ProjectEntry], None] | None = None,
) -> list[FeedItem]:
    """Turn every local project into feed items, fetching data as needed.

    A project linked to a repository yields one library item per public
    package, or a single item for the repository itself when it has none.
    Inline projects yield one item from their local fields.
    """
    items: list[FeedItem] = []

    for project in projects:
        stats.projects += 1
        release_names = list(project.packages)
        title = project.name

        if project.repo:
            if github is None:
                raise ValueError(f"GitHub connector required for {project.repo}")
            log_event(logger, f"Fetching {project.repo}", event="fetch_repo", repo=project.repo)
            repo = github.get_repo(project.repo)
            stats.repos += 1
            title = title or repo.name

            libraries = package_items(project, repo)
            if not libraries:
                items.append(repo_item(project, repo))
            for library in libraries:
                if cfg.feed.include_downloads:
                    library = replace(library, downloads=npm.get_download_count(library.title))
                items.append(library)
            stats.libraries += len(libraries)

            for package in repo.packages:
                if package.is_public and package.name not in release_names:
                    release_names.append(package.name)
        else:
            items.append(project_item(project))

        if include_releases:
            for name in release_names:
                record = npm.get_package(name)
                releases = release_items(name, record, title, project.description)
                stats.releases += len(releases)
                items.extend(releases)

        if on_project is not None:
            on_project(project)

    return items


def _collect_with_progress(
    projects: list[ProjectEntry],
    github: GitHubConnector | None,
    npm: NpmConnector,
    cfg: AppConfig,
    stats: SyncStats,
    logger: logging.Logger,
    include_releases: bool,
    show_progress: bool,
    console: Console,
) -> list[FeedItem]:
    if not show_progress:
        return collect_project_items(
            projects, github, npm, cfg, stats, logger, include_releases=include_releases
        )

    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        TimeRemainingColumn(),
        console=console,
    )
    with progress:
        task = progress.add_task("Projects", total=len(projects))
        return collect_project_items(
            projects,
            github,
            npm,
            cfg,
            stats,
            logger,
            include_releases=include_releases,
            on_project=lambda _project: progress.advance(task),
        )


def _build_github(cfg: AppConfig, projects: list[ProjectEntry]) -> GitHubConnector | None:
    # Inline-only project lists need no token
    if not any(project.repo for project in projects):
        return None
    return GitHubConnector(cfg.github, get_github_token(cfg.github))


def _render_stats(stats: SyncStats, console: Console) -> None:
    console.print(
        "[bold]Sync summary[/bold]: "
        f"projects={stats.projects}, repos={stats.repos}, libraries={stats.libraries}, "
        f"releases={stats.releases}, articles={stats.articles}, written={stats.written}"
    )
