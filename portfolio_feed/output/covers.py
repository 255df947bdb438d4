"""Cover image consistency check for authored articles."""

from __future__ import annotations

from pathlib import Path


def article_slugs(articles_dir: Path) -> list[str]:
    """Slugs of ``<slug>.mdx`` files and ``<slug>/index.mdx`` folders."""
    slugs = {path.stem for path in articles_dir.glob("*.mdx")}
    slugs.update(path.parent.name for path in articles_dir.glob("*/index.mdx"))
    return sorted(slugs)


def check_covers(articles_dir: Path, covers_dir: Path) -> tuple[list[str], list[str]]:
    """Compare article slugs with ``<slug>.png`` cover images.

    Returns:
        (articles without a cover, cover images without an article)
    """
    slugs = article_slugs(articles_dir)
    images = sorted(path.name for path in covers_dir.glob("*.png"))

    uncovered = [slug for slug in slugs if f"{slug}.png" not in images]
    redundant = [name for name in images if name[: -len(".png")] not in slugs]
    return uncovered, redundant
