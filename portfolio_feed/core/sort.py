"""Feed ordering."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable

from .types import FeedItem


def parse_published(value: str | None) -> datetime | None:
    """Parse an ISO 8601 date or timestamp; naive values are taken as UTC."""
    if not value:
        return None
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def sort_by_date(items: list[FeedItem], descending: bool = True) -> list[FeedItem]:
    """Sort by publish date, keeping input order for equal dates.

    Items without a parseable date go last in either direction.
    """
    dated = [(parse_published(item.published), item) for item in items]
    with_date = [pair for pair in dated if pair[0] is not None]
    without_date = [item for stamp, item in dated if stamp is None]
    # sorted() stays stable with reverse=True
    ordered = sorted(with_date, key=lambda pair: pair[0], reverse=descending)
    return [item for _, item in ordered] + without_date


def sort_highlighted(items: list[FeedItem]) -> list[FeedItem]:
    """Order for the project listing.

    Highlighted entries first, scoped ``@org/pkg`` names last, entries
    without a registry link before those with one, then by stars.
    """
    def key(item: FeedItem) -> tuple[bool, bool, bool, int]:
        has_npm = bool((item.links or {}).get("npm"))
        return (not item.highlight, "@" in item.title, has_npm, -(item.stars or 0))

    return sorted(items, key=key)


SORTERS: dict[str, Callable[[list[FeedItem]], list[FeedItem]]] = {
    "date": lambda items: sort_by_date(items, descending=True),
    "date_asc": lambda items: sort_by_date(items, descending=False),
    "highlight": sort_highlighted,
}


def sort_items(items: list[FeedItem], mode: str) -> list[FeedItem]:
    """Sort with a named strategy: date, date_asc or highlight."""
    sorter = SORTERS.get(mode)
    if sorter is None:
        supported = ", ".join(sorted(SORTERS))
        raise ValueError(f"Unsupported sort mode: {mode}. Supported: {supported}")
    return sorter(items)
