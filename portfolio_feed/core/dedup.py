"""
Release deduplication.

Registry history yields one release entry per published version, which
would flood the feed with every version bump. Only the first release entry
per title is kept.
"""

from __future__ import annotations

from .types import FeedItem


def dedup_releases(items: list[FeedItem]) -> list[FeedItem]:
    """Keep the first ``release`` item of each title.

    "First" is the lowest index in ``items``; callers decide which release
    survives by ordering the input. Items of other types pass through, and
    the relative order of kept items is unchanged.

    Args:
        items: Feed items in the order that defines precedence

    Returns:
        A new list without the later duplicate releases
    """
    seen_titles: set[str] = set()
    kept: list[FeedItem] = []

    for item in items:
        if item.type != "release":
            kept.append(item)
            continue
        # Skip if a release with this title was already kept
        if item.title in seen_titles:
            continue
        seen_titles.add(item.title)
        kept.append(item)

    return kept
