"""Tests for the GitHub connector."""

from __future__ import annotations

import json

import httpx
import pytest

from portfolio_feed.config import GitHubConfig
from portfolio_feed.connectors.github import (
    GitHubConnector,
    GitHubError,
    build_repo_info,
    parse_repo_ref,
)


def _blob(name: str, text: str, path: str | None = None) -> dict:
    entry = {"name": name, "object": {"text": text}}
    if path is not None:
        entry["path"] = path
    return entry


def _workspace(folder: str, manifest: dict, extra: list[dict] | None = None) -> dict:
    entries = [_blob("package.json", json.dumps(manifest), f"packages/{folder}/package.json")]
    entries.extend(extra or [])
    return {"name": folder, "object": {"entries": entries}}


def _monorepo(private: bool = False) -> dict:
    return {
        "name": "rakered",
        "description": "The open source components from rake.red",
        "date": "2021-01-26T10:00:00Z",
        "homepage": None,
        "url": "https://github.com/rakered/rakered",
        "private": private,
        "stars": 42,
        "branch": {"name": "main"},
        "topics": {"nodes": [{"topic": {"name": "mongodb"}}, {"topic": {"name": "email"}}]},
        "root": {
            "entries": [
                _blob("package.json", json.dumps({"name": "rakered-root", "private": True})),
                _blob("README.md", "# rakered"),
            ]
        },
        "packages": {
            "entries": [
                _workspace(
                    "email",
                    {"name": "@rakered/email", "description": "Emails", "keywords": ["email"]},
                    [_blob("logo.svg", "<svg/>", "packages/email/logo.svg")],
                ),
                _workspace(
                    "mongo",
                    {"name": "@rakered/mongo", "homepage": "https://rake.red/docs/mongo"},
                ),
                _workspace("internal", {"name": "@rakered/internal", "private": True}),
            ]
        },
    }


def test_parse_repo_ref_accepts_owner_name_and_urls():
    assert parse_repo_ref("smeijer/unimported") == ("smeijer", "unimported")
    assert parse_repo_ref("https://github.com/smeijer/unimported") == ("smeijer", "unimported")
    assert parse_repo_ref("https://github.com/smeijer/unimported/") == ("smeijer", "unimported")
    assert parse_repo_ref("git@github.com:x/smeijer/unimported.git") == ("smeijer", "unimported")


def test_parse_repo_ref_rejects_single_segment():
    with pytest.raises(ValueError, match="Invalid repository reference"):
        parse_repo_ref("unimported")


def test_monorepo_with_private_package_yields_two_public_packages():
    repo = build_repo_info("rakered", "rakered", _monorepo())

    assert [pkg.name for pkg in repo.packages] == ["@rakered/email", "@rakered/mongo"]
    assert repo.tags == ["mongodb", "email"]
    assert repo.date == "2021-01-26"


def test_nested_package_links():
    repo = build_repo_info("rakered", "rakered", _monorepo())
    email, mongo = repo.packages

    assert email.links == {
        "homepage": None,
        "github": "https://github.com/rakered/rakered/tree/main/packages/email",
        "npm": "https://npmjs.com/@rakered/email",
    }
    assert email.link == "https://github.com/rakered/rakered/tree/main/packages/email"
    assert email.logo == "logo.svg"
    assert mongo.link == "https://rake.red/docs/mongo"
    assert email.stars == 42


def test_private_repository_has_no_source_links():
    repo = build_repo_info("rakered", "rakered", _monorepo(private=True))

    assert repo.link is None
    assert repo.links["github"] is None
    assert all(pkg.links["github"] is None for pkg in repo.packages)
    assert repo.packages[0].link == "https://npmjs.com/@rakered/email"


def test_root_manifest_links_without_path_suffix():
    repository = {
        "name": "unimported",
        "url": "https://github.com/smeijer/unimported",
        "date": "2020-04-26T00:00:00Z",
        "branch": {"name": "main"},
        "root": {"entries": [_blob("package.json", json.dumps({"name": "unimported"}))]},
        "packages": None,
    }
    repo = build_repo_info("smeijer", "unimported", repository)

    assert len(repo.packages) == 1
    assert repo.packages[0].links["github"] == "https://github.com/smeijer/unimported"


def test_repository_without_packages_takes_root_manifest_name():
    repository = {
        "name": "updrafts.app",
        "url": "https://github.com/smeijer/updrafts.app",
        "homepage": "https://updrafts.app",
        "private": True,
        "date": "2020-09-05T00:00:00Z",
        "branch": {"name": "main"},
        "root": {"entries": [_blob("package.json", json.dumps({"name": "updrafts", "private": True}))]},
    }
    repo = build_repo_info("smeijer", "updrafts.app", repository)

    assert repo.packages == []
    assert repo.name == "updrafts"
    assert repo.link == "https://updrafts.app"


def test_missing_manifest_is_not_an_error():
    repository = {"name": "dotfiles", "url": "https://github.com/smeijer/dotfiles", "root": {"entries": []}}
    repo = build_repo_info("smeijer", "dotfiles", repository)

    assert repo.packages == []
    assert repo.name == "dotfiles"


def test_malformed_manifest_raises():
    repository = {"name": "broken", "root": {"entries": [_blob("package.json", "{not json")]}}
    with pytest.raises(json.JSONDecodeError):
        build_repo_info("smeijer", "broken", repository)


def test_get_repo_sends_query_with_bearer_token():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["auth"] = request.headers["authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"data": {"repository": _monorepo()}})

    connector = GitHubConnector(GitHubConfig(), "secret", transport=httpx.MockTransport(handler))
    repo = connector.get_repo("https://github.com/rakered/rakered")

    assert seen["auth"] == "bearer secret"
    assert seen["body"]["variables"] == {"owner": "rakered", "name": "rakered", "topics": 10}
    assert len(repo.packages) == 2


def test_get_repo_reraises_transport_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(502, text="bad gateway")

    connector = GitHubConnector(GitHubConfig(), "secret", transport=httpx.MockTransport(handler))
    with pytest.raises(httpx.HTTPStatusError):
        connector.get_repo("rakered/rakered")


def test_get_repo_raises_on_graphql_errors():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            json={"data": {"repository": None}, "errors": [{"message": "Could not resolve"}]},
        )

    connector = GitHubConnector(GitHubConfig(), "secret", transport=httpx.MockTransport(handler))
    with pytest.raises(GitHubError, match="Could not resolve"):
        connector.get_repo("smeijer/missing")


def test_connector_requires_token():
    with pytest.raises(ValueError, match="GITHUB_TOKEN"):
        GitHubConnector(GitHubConfig(), None)


def test_list_repos_skips_forks():
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.url.path == "/users/smeijer/repos"
        return httpx.Response(
            200,
            json=[
                {"name": "unimported", "full_name": "smeijer/unimported", "fork": False,
                 "stargazers_count": 1900, "visibility": "public", "topics": ["cli"],
                 "permissions": {"admin": True}, "homepage": ""},
                {"name": "react", "full_name": "smeijer/react", "fork": True},
            ],
        )

    connector = GitHubConnector(GitHubConfig(), "secret", transport=httpx.MockTransport(handler))
    repos = connector.list_repos("smeijer")

    assert repos == [
        {
            "name": "unimported",
            "full_name": "smeijer/unimported",
            "admin": True,
            "stars": 1900,
            "visibility": "public",
            "topics": ["cli"],
            "homepage": None,
        }
    ]
