"""
Portfolio Feed - build-time aggregator for a personal portfolio site.

This package collects projects from GitHub, package statistics and release
history from npm, and articles from dev.to, and writes them as one JSON
feed that the static site imports at build time.

Main entry point is the CLI via `portfolio-feed sync` command.

Example:
    $ portfolio-feed sync -p data/projects.yaml -o data/feed.json
"""

__all__ = [
    "__version__",
    "load_config",
    "run_pipeline",
    "run_projects",
    "import_articles",
    "FeedItem",
]
__version__ = "0.1.0"

from .config import load_config
from .core.types import FeedItem
from .runner import import_articles, run_pipeline, run_projects
