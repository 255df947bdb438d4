"""
Article index connector.

Pulls the list of published articles from the dev.to API and converts each
record into an ``article`` FeedItem. Full articles can also be fetched by id
and their markdown rewritten for the local article pages.
"""

from __future__ import annotations

import html
import re
from typing import Any, Iterable

import httpx

from ..config import USER_AGENT, ArticlesConfig
from ..core.types import FeedItem
from ..utils.logging import get_logger


logger = get_logger("articles")

_HASH_SUFFIX_RE = re.compile(r"-\w+$")
_FRONTMATTER_END_RE = re.compile(r"^---\n\n", re.M)
_PUBLISHED_RE = re.compile(r"^published.*\n", re.M)
_COVER_IMAGE_RE = re.compile(r"^cover_image.*\n", re.M)
_H1_RE = re.compile(r"^# ", re.M)
_HEADING_RE = re.compile(r"^(#+) ", re.M)
_TWEET_RE = re.compile(r"{% twitter [0-9]* %}")
_FOOTER_RE = re.compile(r"^---\n*_:wave:.*\n*", re.M)


class ArticlesConnector:
    """Client for the dev.to article API."""

    def __init__(
        self,
        cfg: ArticlesConfig,
        api_key: str | None,
        transport: httpx.BaseTransport | None = None,
    ):
        if not api_key:
            raise ValueError(f"Missing dev.to API key (set {cfg.api_key_env})")
        self.cfg = cfg
        self.api_key = api_key
        self.transport = transport

    def list_articles(self) -> list[dict[str, Any]]:
        """Return the raw records of all published articles."""
        data = self._request("GET", "/articles/me/published", params={"per_page": self.cfg.per_page})
        if not isinstance(data, list):
            raise ValueError("Invalid article index: expected a list")
        return data

    def get_article(self, article_id: int | str) -> dict[str, Any]:
        """Return one article record, including its ``body_markdown``."""
        return self._request("GET", f"/articles/{article_id}")

    def update_canonical(self, article_id: int | str, canonical_url: str) -> dict[str, Any]:
        """Set the canonical URL of an article and return the updated record."""
        return self._request(
            "PUT",
            f"/articles/{article_id}",
            json={"article": {"canonical_url": canonical_url}},
        )

    def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        url = f"{self.cfg.api_url.rstrip('/')}{path}"
        headers = {
            "Accept": "application/vnd.forem.api-v1+json",
            "api-key": self.api_key,
            "User-Agent": USER_AGENT,
        }
        try:
            with httpx.Client(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                headers=headers,
                transport=self.transport,
            ) as client:
                resp = client.request(method, url, **kwargs)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            logger.error("Article API request failed (%s %s): %s", method, path, exc)
            raise


def article_to_item(raw: dict[str, Any], excluded_tags: Iterable[str] = ()) -> FeedItem:
    """Convert one dev.to article record into a FeedItem."""
    excluded = set(excluded_tags)
    tags = raw.get("tag_list") or []
    if isinstance(tags, str):
        tags = [tag.strip() for tag in tags.split(",")]
    elif isinstance(tags, dict):
        tags = list(tags.values())

    cover = raw.get("cover_image") or (raw.get("metadata") or {}).get("cover_image")

    return FeedItem(
        type="article",
        title=html.unescape(raw.get("title") or ""),
        description=html.unescape(raw["description"]) if raw.get("description") else None,
        url=raw.get("url"),
        published=raw.get("published_at"),
        tags=[tag for tag in tags if tag and tag not in excluded],
        image=cover or None,
        slug=clean_slug(raw["slug"]) if raw.get("slug") else None,
        canonical=raw.get("canonical_url"),
    )


def clean_slug(slug: str) -> str:
    """Remove the platform hash suffix and contraction artifacts from a slug."""
    return (
        _HASH_SUFFIX_RE.sub("", slug)
        .replace("it-s", "its")
        .replace("don-t", "dont")
    )


def transform_markdown(content: str, created_at: str, site_url: str, profile: str) -> str:
    """Rewrite a dev.to article body for the local article pages.

    The frontmatter gains a ``date`` line and loses ``published`` and
    ``cover_image``. Headings move down one level when the article uses h1,
    tweet embeds and the closing wave footer are dropped, links to the
    author's dev.to articles point at the local pages and ``typescript``
    code fences become ``tsx``.
    """
    site_url = site_url.rstrip("/")
    date = created_at[:10]

    content = _FRONTMATTER_END_RE.sub(lambda _m: f"date: {date}\n---\n\n", content, count=1)
    content = _PUBLISHED_RE.sub("", content, count=1)
    content = _COVER_IMAGE_RE.sub("", content, count=1)

    if _H1_RE.search(content):
        content = _HEADING_RE.sub(r"\1# ", content)

    content = _TWEET_RE.sub("", content)

    profile_link = re.compile(rf"https?://dev\.to/{re.escape(profile)}/([\w-]+)")
    content = profile_link.sub(lambda m: f"{site_url}/{clean_slug(m.group(1))}", content)

    content = content.replace("```typescript", "```tsx")
    return _FOOTER_RE.sub("", content, count=1)
