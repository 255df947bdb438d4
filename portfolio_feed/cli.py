"""
Command-line interface for the portfolio feed.

Uses Typer to provide commands for syncing the feed, writing the project
listing, importing dev.to articles and inspecting the results. Loads
``.env.local`` and ``.env`` for API tokens.
"""

from __future__ import annotations

from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv
from rich.console import Console
from rich.table import Table
import typer

from .config import AppConfig, get_github_token, load_config
from .connectors.github import GitHubConnector
from .output.covers import check_covers
from .output.writer import read_feed
from .runner import import_articles, run_pipeline, run_projects

app = typer.Typer(add_completion=False)
console = Console()

DEFAULT_CONFIG = Path("config.yaml")
CONFIG_HELP = "Config file, config.yaml is used when present."


def _load(
    config: Path | None,
    log_level: str | None = None,
    log_file: bool | None = None,
) -> AppConfig:
    # Load environment variables, .env.local first so it wins
    load_dotenv(".env.local")
    load_dotenv()

    # An explicit --config is checked by typer; the default file is optional
    if config is None and DEFAULT_CONFIG.exists():
        config = DEFAULT_CONFIG
    cfg = load_config(str(config) if config else None)
    if log_level:
        cfg.logging.level = log_level
    if log_file is not None:
        cfg.logging.file = log_file
    return cfg


@app.command()
def sync(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP),
    projects: Path | None = typer.Option(None, "--projects", "-p", help="Project list YAML file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Feed output file."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    sort: str | None = typer.Option(None, "--sort", help="Ordering: date, date_asc or highlight."),
    layout: str | None = typer.Option(None, "--layout", help="Output layout: list or categories."),
    articles: bool | None = typer.Option(
        None, "--articles/--no-articles", help="Include dev.to articles."
    ),
    releases: bool | None = typer.Option(
        None, "--releases/--no-releases", help="Include npm release history."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
    log_file: bool | None = typer.Option(
        None, "--log-file/--no-log-file", help="Enable or disable file logging."
    ),
):
    """Fetch all sources and write the feed file."""
    cfg = _load(config, log_level, log_file)

    if projects is not None:
        cfg.projects_path = str(projects)
    if output is not None:
        cfg.output.feed_path = str(output)
    if sort:
        cfg.feed.sort = sort
    if layout:
        cfg.output.layout = layout
    if articles is not None:
        cfg.articles.enabled = articles
    if releases is not None:
        cfg.feed.include_releases = releases

    path = run_pipeline(cfg, show_progress=progress, console=console)
    console.print(f"Feed written: {path}")


@app.command()
def projects(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP),
    projects_path: Path | None = typer.Option(None, "--projects", "-p", help="Project list YAML file."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Packages output file."),
    progress: bool = typer.Option(True, "--progress/--no-progress"),
    downloads: bool | None = typer.Option(
        None, "--downloads/--no-downloads", help="Attach npm download counts."
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Write the highlight-ordered project and library listing."""
    cfg = _load(config, log_level)

    if projects_path is not None:
        cfg.projects_path = str(projects_path)
    if output is not None:
        cfg.output.packages_path = str(output)
    if downloads is not None:
        cfg.feed.include_downloads = downloads

    path = run_projects(cfg, show_progress=progress, console=console)
    console.print(f"Projects written: {path}")


@app.command("print-projects")
def print_projects(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP),
    input: Path | None = typer.Option(None, "--input", "-i", help="Packages file to read."),
):
    """Tabulate the project listing and its keywords."""
    cfg = _load(config)
    path = input or Path(cfg.output.packages_path)
    items = read_feed(path)

    table = Table(title=str(path))
    for column in ("name", "type", "link", "links", "logo", "stars", "downloads", "tags"):
        table.add_column(column)

    for item in items:
        links = [key for key, value in (item.links or {}).items() if value]
        table.add_row(
            item.title,
            item.type,
            urlparse(item.url).netloc if item.url else "",
            ", ".join(links),
            item.logo or "",
            str(item.stars or 0),
            str(item.downloads) if item.downloads is not None else "",
            ", ".join(item.tags or []),
        )
    console.print(table)

    keywords = sorted({tag for item in items for tag in item.tags or []})
    console.print(f"all keywords: {', '.join(keywords)}")


@app.command("list-repos")
def list_repos(
    login: str = typer.Argument(..., help="GitHub user name."),
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP),
):
    """List a user's repositories, forks excluded."""
    cfg = _load(config)
    github = GitHubConnector(cfg.github, get_github_token(cfg.github))

    table = Table(title=f"{login} repositories")
    for column in ("full name", "visibility", "stars", "topics", "homepage"):
        table.add_column(column)
    for repo in github.list_repos(login):
        table.add_row(
            repo["full_name"] or "",
            repo["visibility"] or "",
            str(repo["stars"]),
            ", ".join(repo["topics"]),
            repo["homepage"] or "",
        )
    console.print(table)


@app.command("import-articles")
def import_articles_command(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP),
    output_dir: Path | None = typer.Option(None, "--output-dir", "-o", help="Directory for the .mdx files."),
    update_canonical: bool | None = typer.Option(
        None,
        "--update-canonical/--no-update-canonical",
        help="Point dev.to canonical URLs at the local article pages.",
    ),
    log_level: str | None = typer.Option(None, "--log-level", help="Logging level."),
):
    """Save every published dev.to article as a local markdown page."""
    cfg = _load(config, log_level)
    if update_canonical is not None:
        cfg.articles.update_canonical = update_canonical

    paths = import_articles(cfg, output_dir=output_dir)
    console.print(f"Imported {len(paths)} articles into {output_dir or cfg.output.articles_dir}")


@app.command("check-covers")
def check_covers_command(
    config: Path | None = typer.Option(None, "--config", "-c", exists=True, dir_okay=False, help=CONFIG_HELP),
    articles_dir: Path | None = typer.Option(None, "--articles-dir", help="Authored articles."),
    covers_dir: Path | None = typer.Option(None, "--covers-dir", help="Cover images."),
):
    """Fail when an article lacks a cover or a cover lacks an article."""
    cfg = _load(config)
    uncovered, redundant = check_covers(
        articles_dir or Path(cfg.output.articles_dir),
        covers_dir or Path(cfg.output.covers_dir),
    )

    if uncovered:
        console.print(f"Uncovered articles: {', '.join(uncovered)}")
    if redundant:
        console.print(f"Redundant images: {', '.join(redundant)}")
    if uncovered or redundant:
        raise typer.Exit(code=1)
    console.print("All articles have a cover image.")


if __name__ == "__main__":
    app()
