"""
GitHub connector.

Fetches repository metadata and package manifests with a single GraphQL
query per repository, and lists a user's repositories through the REST API.
Manifests are read from the repository root and from every entry of the
``packages/`` folder, so monorepo workspaces resolve to one PackageEntry each.
"""

from __future__ import annotations

import json
from typing import Any

import httpx

from ..config import USER_AGENT, GitHubConfig
from ..core.types import PackageEntry, RepoInfo
from ..utils.logging import get_logger, log_event


logger = get_logger("github")

MANIFEST_NAME = "package.json"
LOGO_NAMES = ("logo.svg", "logo.png", "logo.jpg")

REPO_QUERY = """
query repository($owner: String!, $name: String!, $topics: Int!) {
  repository(owner: $owner, name: $name) {
    name
    description
    date: createdAt
    homepage: homepageUrl
    url
    private: isPrivate
    stars: stargazerCount

    branch: defaultBranchRef {
      name
    }

    topics: repositoryTopics(first: $topics) {
      nodes {
        topic {
          name
        }
      }
    }

    root: object(expression: "HEAD:") {
      ... on Tree {
        entries {
          name
          object {
            ... on Blob {
              text
            }
          }
        }
      }
    }

    packages: object(expression: "HEAD:packages") {
      ... on Tree {
        entries {
          name
          object {
            ... on Blob {
              text
            }
            ... on Tree {
              entries {
                name
                path
                object {
                  ... on Blob {
                    text
                  }
                }
              }
            }
          }
        }
      }
    }
  }
}
"""


class GitHubError(RuntimeError):
    """Raised when the GraphQL API answers without the requested repository."""


def parse_repo_ref(ref: str) -> tuple[str, str]:
    """Split a repository reference into (owner, name).

    Accepts "owner/name" as well as full URLs; only the last two path
    segments are used.

    Raises:
        ValueError: If the reference has fewer than two segments
    """
    cleaned = ref.strip().rstrip("/")
    if cleaned.endswith(".git"):
        cleaned = cleaned[: -len(".git")]
    parts = [part for part in cleaned.split("/") if part]
    if len(parts) < 2:
        raise ValueError(f"Invalid repository reference: {ref!r}")
    return parts[-2], parts[-1]


class GitHubConnector:
    """Client for the GitHub GraphQL and REST APIs."""

    def __init__(
        self,
        cfg: GitHubConfig,
        token: str | None,
        transport: httpx.BaseTransport | None = None,
    ):
        if not token:
            raise ValueError(f"Missing GitHub token (set {cfg.token_env})")
        self.cfg = cfg
        self.token = token
        self.transport = transport

    def get_repo(self, ref: str) -> RepoInfo:
        """Fetch repository metadata and its public packages."""
        owner, name = parse_repo_ref(ref)
        payload = {
            "query": REPO_QUERY,
            "variables": {"owner": owner, "name": name, "topics": self.cfg.topics_limit},
        }
        data = self._post(self.cfg.graphql_url, payload)
        repository = (data.get("data") or {}).get("repository")
        if repository is None:
            errors = data.get("errors") or []
            message = "; ".join(str(err.get("message")) for err in errors) or "repository not found"
            logger.error("GitHub query for %s/%s failed: %s", owner, name, message)
            raise GitHubError(f"{owner}/{name}: {message}")

        repo = build_repo_info(owner, name, repository)
        log_event(
            logger,
            f"Fetched {owner}/{name}",
            event="github_repo",
            repo=f"{owner}/{name}",
            packages=len(repo.packages),
            private=repo.private,
        )
        return repo

    def list_repos(self, login: str, per_page: int = 100) -> list[dict[str, Any]]:
        """List a user's repositories, forks excluded."""
        repos: list[dict[str, Any]] = []
        page = 1
        while True:
            batch = self._get(
                f"{self.cfg.api_url.rstrip('/')}/users/{login}/repos",
                params={"per_page": per_page, "page": page},
            )
            for item in batch:
                if item.get("fork"):
                    continue
                repos.append(
                    {
                        "name": item.get("name"),
                        "full_name": item.get("full_name"),
                        "admin": bool((item.get("permissions") or {}).get("admin")),
                        "stars": item.get("stargazers_count", 0),
                        "visibility": item.get("visibility"),
                        "topics": item.get("topics") or [],
                        "homepage": item.get("homepage") or None,
                    }
                )
            if len(batch) < per_page:
                break
            page += 1
        return repos

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"bearer {self.token}",
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }

    def _client(self) -> httpx.Client:
        return httpx.Client(
            timeout=self.cfg.timeout_seconds,
            trust_env=self.cfg.trust_env,
            headers=self._headers(),
            transport=self.transport,
        )

    def _post(self, url: str, payload: dict[str, Any]) -> dict[str, Any]:
        try:
            with self._client() as client:
                resp = client.post(url, json=payload)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            logger.error("GitHub request to %s failed: %s", url, exc)
            raise

    def _get(self, url: str, params: dict[str, Any] | None = None) -> Any:
        try:
            with self._client() as client:
                resp = client.get(url, params=params)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            logger.error("GitHub request to %s failed: %s", url, exc)
            raise


def build_repo_info(owner: str, name: str, repository: dict[str, Any]) -> RepoInfo:
    """Turn the GraphQL ``repository`` object into a RepoInfo.

    Raises:
        json.JSONDecodeError: If a manifest blob is not valid JSON
    """
    private = bool(repository.get("private"))
    branch = (repository.get("branch") or {}).get("name")
    stars = repository.get("stars") or 0
    date = (repository.get("date") or "")[:10] or None
    homepage = repository.get("homepage") or None
    github_link = None if private else (repository.get("url") or None)

    topics = (repository.get("topics") or {}).get("nodes") or []
    root_entries = _tree_entries(repository.get("root"))

    context = {
        "owner": owner,
        "name": name,
        "private": private,
        "branch": branch,
        "stars": stars,
        "date": date,
    }

    root_package = parse_manifest(find_manifest(root_entries), **context)
    if root_package is not None:
        root_package.logo = find_logo(root_entries)

    workspace: list[PackageEntry] = []
    for entry in _tree_entries(repository.get("packages")):
        sub_entries = _tree_entries(entry.get("object"))
        package = parse_manifest(find_manifest(sub_entries), **context)
        if package is None:
            continue
        package.logo = find_logo(sub_entries)
        workspace.append(package)

    candidates = [root_package] if root_package is not None else []
    candidates.extend(workspace)
    packages = [package for package in candidates if package.is_public]

    repo_name = repository.get("name") or name
    if not packages and root_package is not None and root_package.name:
        repo_name = root_package.name

    return RepoInfo(
        owner=owner,
        name=repo_name,
        description=repository.get("description"),
        private=private,
        stars=stars,
        date=date,
        branch=branch,
        tags=[node["topic"]["name"] for node in topics if node.get("topic")],
        logo=find_logo(root_entries),
        link=homepage or github_link,
        links={"homepage": homepage, "github": github_link, "npm": None},
        packages=packages,
    )


def parse_manifest(
    entry: dict[str, Any] | None,
    *,
    owner: str,
    name: str,
    private: bool,
    branch: str | None,
    stars: int,
    date: str | None,
) -> PackageEntry | None:
    """Parse one ``package.json`` tree entry into a PackageEntry.

    Returns None when the entry or its blob text is missing.
    """
    text = ((entry or {}).get("object") or {}).get("text")
    if not text:
        return None
    manifest = json.loads(text)

    path = entry.get("path")
    if private:
        github_link = None
    else:
        github_link = f"https://github.com/{owner}/{name}"
        if path:
            folder = path[: -len("/" + MANIFEST_NAME)] if path.endswith("/" + MANIFEST_NAME) else path
            github_link += f"/tree/{branch}/{folder}"

    package_private = bool(manifest.get("private"))
    package_name = manifest.get("name")
    npm_link = None if package_private or not package_name else f"https://npmjs.com/{package_name}"
    homepage = manifest.get("homepage") or None

    return PackageEntry(
        name=package_name,
        description=manifest.get("description"),
        tags=list(manifest.get("keywords") or []),
        private=package_private,
        links={"homepage": homepage, "github": github_link, "npm": npm_link},
        link=homepage or github_link or npm_link,
        stars=stars,
        date=date,
        path=path,
    )


def find_manifest(entries: list[dict[str, Any]]) -> dict[str, Any] | None:
    for entry in entries:
        if entry.get("name") == MANIFEST_NAME:
            return entry
    return None


def find_logo(entries: list[dict[str, Any]]) -> str | None:
    names = {entry.get("name") for entry in entries}
    for logo in LOGO_NAMES:
        if logo in names:
            return logo
    return None


def _tree_entries(obj: dict[str, Any] | None) -> list[dict[str, Any]]:
    if not obj:
        return []
    return obj.get("entries") or []
