"""
JSON feed writer.

The feed is written as a pretty-printed JSON array, or as an object keyed
by item type when the "categories" layout is selected. Every write fully
replaces the previous file.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
import stat
import tempfile
from typing import Any

from ..core.types import FEED_TYPES, FeedItem


LAYOUTS = ("list", "categories")


def feed_payload(items: list[FeedItem], layout: str = "list") -> Any:
    """Build the JSON-serializable payload for a feed."""
    if layout == "list":
        return [item.to_dict() for item in items]
    if layout == "categories":
        grouped: dict[str, list[dict[str, Any]]] = {kind: [] for kind in FEED_TYPES}
        for item in items:
            grouped.setdefault(item.type, []).append(item.to_dict())
        return grouped
    supported = ", ".join(LAYOUTS)
    raise ValueError(f"Unsupported output layout: {layout}. Supported: {supported}")


def write_feed(
    items: list[FeedItem],
    path: str | Path,
    layout: str = "list",
    indent: int = 2,
) -> Path:
    """Serialize ``items`` to ``path``.

    The content goes to a temporary file in the target directory first and
    is then renamed over the target, so readers never see a partial file.
    An existing target keeps its permission bits; a new one gets the mode
    allowed by the current umask.

    Returns:
        The path written
    """
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    text = json.dumps(feed_payload(items, layout), indent=indent, ensure_ascii=False) + "\n"

    fd, tmp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as handle:
            handle.write(text)
        os.chmod(tmp_name, _target_mode(target))
        os.replace(tmp_name, target)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise
    return target


def _target_mode(target: Path) -> int:
    # mkstemp creates 0600 files; keep the mode a plain open() would give
    try:
        return stat.S_IMODE(target.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def read_feed(path: str | Path) -> list[FeedItem]:
    """Read a feed written by ``write_feed`` in either layout."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        records = [record for group in data.values() for record in group]
    else:
        records = data
    return [FeedItem.from_dict(record) for record in records]
