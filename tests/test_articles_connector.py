"""Tests for the dev.to article connector."""

from __future__ import annotations

import json

import httpx
import pytest

from portfolio_feed.config import AppConfig, ArticlesConfig
from portfolio_feed.connectors.articles import (
    ArticlesConnector,
    article_to_item,
    clean_slug,
    transform_markdown,
)
from portfolio_feed.runner import import_articles


RAW_ARTICLE = {
    "id": 1,
    "title": "Why I don&#39;t use barrel files",
    "description": "Barrels &amp; performance",
    "slug": "why-i-don-t-use-barrel-files-4k2p",
    "url": "https://dev.to/smeijer/why-i-don-t-use-barrel-files-4k2p",
    "canonical_url": "https://meijer.ws/articles/why-i-dont-use-barrel-files",
    "cover_image": "https://dev.to/cover.png",
    "published_at": "2021-03-01T10:00:00Z",
    "tag_list": ["javascript", "development", "node"],
}


def test_article_to_item_maps_fields_and_filters_tags():
    item = article_to_item(RAW_ARTICLE, ["development"])

    assert item.type == "article"
    assert item.title == "Why I don't use barrel files"
    assert item.description == "Barrels & performance"
    assert item.slug == "why-i-dont-use-barrel-files"
    assert item.canonical == "https://meijer.ws/articles/why-i-dont-use-barrel-files"
    assert item.image == "https://dev.to/cover.png"
    assert item.published == "2021-03-01T10:00:00Z"
    assert item.tags == ["javascript", "node"]


def test_article_to_item_accepts_comma_separated_tags():
    raw = dict(RAW_ARTICLE, tag_list="react, testing")
    assert article_to_item(raw).tags == ["react", "testing"]


def test_clean_slug():
    assert clean_slug("it-s-a-trap-1a2b") == "its-a-trap"


def test_list_articles_sends_api_key():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["api-key"] == "devto-key"
        assert request.url.params["per_page"] == "1000"
        return httpx.Response(200, json=[RAW_ARTICLE])

    connector = ArticlesConnector(ArticlesConfig(), "devto-key", transport=httpx.MockTransport(handler))
    assert connector.list_articles() == [RAW_ARTICLE]


def test_list_articles_reraises_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("offline", request=request)

    connector = ArticlesConnector(ArticlesConfig(), "devto-key", transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.ConnectError):
        connector.list_articles()


def test_connector_requires_api_key():
    with pytest.raises(ValueError, match="DEV_TO_API_KEY"):
        ArticlesConnector(ArticlesConfig(), None)


BODY = (
    "---\n"
    "title: Barrel files\n"
    "published: true\n"
    "cover_image: https://dev.to/cover.png\n"
    "tags: javascript\n"
    "---\n"
    "\n"
    "# Intro\n"
    "\n"
    "See https://dev.to/smeijer/it-s-a-trap-1a2b for more.\n"
    "\n"
    "{% twitter 1234567 %}\n"
    "\n"
    "```typescript\n"
    "const a = 1;\n"
    "```\n"
    "\n"
    "## Details\n"
    "\n"
    "---\n"
    "\n"
    "_:wave: I'm Stephan, follow me on twitter_\n"
)


def test_transform_markdown_rewrites_body():
    content = transform_markdown(BODY, "2021-03-01T10:00:00Z", "https://meijer.ws/articles/", "smeijer")

    assert content == (
        "---\n"
        "title: Barrel files\n"
        "tags: javascript\n"
        "date: 2021-03-01\n"
        "---\n"
        "\n"
        "## Intro\n"
        "\n"
        "See https://meijer.ws/articles/its-a-trap for more.\n"
        "\n"
        "\n"
        "\n"
        "```tsx\n"
        "const a = 1;\n"
        "```\n"
        "\n"
        "### Details\n"
        "\n"
    )


def test_transform_markdown_keeps_heading_levels_without_h1():
    body = "---\ntitle: x\n---\n\n## Setup\n\n### Step\n"
    content = transform_markdown(body, "2020-05-04", "https://meijer.ws/articles", "smeijer")

    assert "\n## Setup\n\n### Step\n" in content
    assert "date: 2020-05-04\n---\n" in content


def test_transform_markdown_leaves_other_profiles_alone():
    body = "---\n\nhttps://dev.to/someone/post-1a2b\n"
    content = transform_markdown(body, "2020-05-04", "https://meijer.ws/articles", "smeijer")

    assert "https://dev.to/someone/post-1a2b" in content


def test_get_article_and_update_canonical():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.method == "PUT":
            return httpx.Response(200, json=json.loads(request.content)["article"])
        return httpx.Response(200, json=dict(RAW_ARTICLE, body_markdown=BODY))

    connector = ArticlesConnector(ArticlesConfig(), "devto-key", transport=httpx.MockTransport(handler))

    assert connector.get_article(1)["body_markdown"] == BODY
    updated = connector.update_canonical(1, "https://meijer.ws/articles/barrel-files")

    assert updated == {"canonical_url": "https://meijer.ws/articles/barrel-files"}
    assert [(r.method, r.url.path) for r in requests] == [
        ("GET", "/api/articles/1"),
        ("PUT", "/api/articles/1"),
    ]
    assert all(r.headers["api-key"] == "devto-key" for r in requests)


class _StubArticles:
    def __init__(self, canonical: str):
        self.canonical = canonical
        self.updates: list[tuple[int, str]] = []

    def list_articles(self):
        return [{"id": 7}]

    def get_article(self, article_id):  # noqa: ANN001
        return {
            "id": article_id,
            "slug": "why-i-don-t-use-barrel-files-4k2p",
            "created_at": "2021-03-01T10:00:00Z",
            "canonical_url": self.canonical,
            "body_markdown": "---\ntitle: Barrels\npublished: true\n---\n\nText\n",
        }

    def update_canonical(self, article_id, canonical_url):  # noqa: ANN001
        self.updates.append((article_id, canonical_url))


def _import_config() -> AppConfig:
    cfg = AppConfig()
    cfg.logging.console = False
    cfg.logging.file = False
    return cfg


def test_import_articles_writes_mdx_files(tmp_path):
    stub = _StubArticles("https://dev.to/smeijer/why-i-don-t-use-barrel-files-4k2p")

    (path,) = import_articles(_import_config(), articles=stub, output_dir=tmp_path / "articles")

    assert path == tmp_path / "articles" / "why-i-dont-use-barrel-files.mdx"
    assert path.read_text(encoding="utf-8") == "---\ntitle: Barrels\ndate: 2021-03-01\n---\n\nText\n"
    assert stub.updates == []


def test_import_articles_updates_foreign_canonical_urls(tmp_path):
    cfg = _import_config()
    cfg.articles.update_canonical = True
    foreign = _StubArticles("https://dev.to/smeijer/why-i-don-t-use-barrel-files-4k2p")
    local = _StubArticles("https://meijer.ws/articles/why-i-dont-use-barrel-files")

    import_articles(cfg, articles=foreign, output_dir=tmp_path)
    import_articles(cfg, articles=local, output_dir=tmp_path)

    assert foreign.updates == [(7, "https://meijer.ws/articles/why-i-dont-use-barrel-files")]
    assert local.updates == []
