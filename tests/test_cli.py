"""Tests for the inspection commands of the CLI."""

from __future__ import annotations

from typer.testing import CliRunner

from portfolio_feed import cli
from portfolio_feed.cli import app
from portfolio_feed.core.types import FeedItem
from portfolio_feed.output.writer import write_feed


runner = CliRunner()


def test_print_projects_lists_keywords(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    path = write_feed(
        [
            FeedItem(type="library", title="unimported", url="https://github.com/smeijer/unimported",
                     tags=["cli", "node"], links={"github": "https://github.com/smeijer/unimported", "npm": None}),
            FeedItem(type="project", title="GoWion", tags=["saas", "cli"]),
        ],
        tmp_path / "packages.json",
    )
    result = runner.invoke(app, ["print-projects", "--input", str(path)])

    assert result.exit_code == 0
    assert "all keywords: cli, node, saas" in result.output


def test_missing_config_file_is_rejected(tmp_path):
    result = runner.invoke(
        app,
        ["print-projects", "--config", str(tmp_path / "missing.yaml"), "--input", str(tmp_path / "p.json")],
    )

    assert result.exit_code == 2


def test_explicit_config_file_is_used(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    write_feed([FeedItem(type="project", title="GoWion", tags=["saas"])], tmp_path / "listing.json")
    config = tmp_path / "site.yaml"
    config.write_text(f"output:\n  packages_path: {tmp_path / 'listing.json'}\n", encoding="utf-8")

    result = runner.invoke(app, ["print-projects", "--config", str(config)])

    assert result.exit_code == 0
    assert "all keywords: saas" in result.output


def test_import_articles_passes_options(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    calls = []

    def fake_import(cfg, output_dir=None):
        calls.append((cfg.articles.update_canonical, output_dir))
        return [output_dir / "barrel-files.mdx"]

    monkeypatch.setattr(cli, "import_articles", fake_import)
    out = tmp_path / "articles"
    result = runner.invoke(app, ["import-articles", "--output-dir", str(out), "--update-canonical"])

    assert result.exit_code == 0
    assert calls == [(True, out)]
    assert "Imported 1 articles" in result.output


def test_check_covers_exits_nonzero_for_missing_cover(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    articles = tmp_path / "articles"
    covers = tmp_path / "covers"
    articles.mkdir()
    covers.mkdir()
    (articles / "barrel-files.mdx").write_text("", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "check-covers",
            "--articles-dir", str(articles),
            "--covers-dir", str(covers),
        ],
    )

    assert result.exit_code == 1
    assert "Uncovered articles: barrel-files" in result.output


def test_check_covers_passes_when_consistent(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    articles = tmp_path / "articles"
    covers = tmp_path / "covers"
    articles.mkdir()
    covers.mkdir()
    (articles / "barrel-files.mdx").write_text("", encoding="utf-8")
    (covers / "barrel-files.png").write_bytes(b"")

    result = runner.invoke(
        app,
        [
            "check-covers",
            "--articles-dir", str(articles),
            "--covers-dir", str(covers),
        ],
    )

    assert result.exit_code == 0
