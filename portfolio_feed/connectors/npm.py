"""npm registry connector: package records and download counts."""

from __future__ import annotations

import re
from typing import Any

import httpx

from ..config import USER_AGENT, NpmConfig
from ..utils.logging import get_logger


logger = get_logger("npm")

# Keys of the registry ``time`` map that are not versions.
TIME_SENTINELS = ("created", "modified")

_HTML_COMMENT_RE = re.compile(r"<!--.*?-->", re.DOTALL)
_MARKDOWN_LINK_RE = re.compile(r"\[([^\]]*)\]\([^)]*\)")


class NpmConnector:
    """Client for the npm registry and downloads API."""

    def __init__(self, cfg: NpmConfig, transport: httpx.BaseTransport | None = None):
        self.cfg = cfg
        self.transport = transport

    def get_package(self, name: str) -> dict[str, Any]:
        """Return the full registry record for ``name``."""
        return self._get(f"{self.cfg.registry_url.rstrip('/')}/{name}")

    def get_download_count(
        self,
        name: str,
        start: str | None = None,
        end: str | None = None,
    ) -> int:
        """Return the number of downloads of ``name`` between two dates."""
        start = start or self.cfg.downloads_from
        end = end or self.cfg.downloads_till
        data = self._get(f"{self.cfg.downloads_url.rstrip('/')}/point/{start}:{end}/{name}")
        return int(data.get("downloads") or 0)

    def _get(self, url: str) -> dict[str, Any]:
        try:
            with httpx.Client(
                timeout=self.cfg.timeout_seconds,
                trust_env=self.cfg.trust_env,
                headers={"Accept": "application/json", "User-Agent": USER_AGENT},
                follow_redirects=True,
                transport=self.transport,
            ) as client:
                resp = client.get(url)
                resp.raise_for_status()
                return resp.json()
        except httpx.HTTPError as exc:
            logger.error("npm request to %s failed: %s", url, exc)
            raise


def release_versions(time_map: dict[str, str] | None) -> list[tuple[str, str]]:
    """Return ``(version, date)`` pairs from a registry time map.

    The ``created`` and ``modified`` keys are skipped; map order is kept.
    """
    return [
        (version, date)
        for version, date in (time_map or {}).items()
        if version not in TIME_SENTINELS
    ]


def clean_description(text: str | None) -> str:
    """Strip HTML comments and reduce markdown links to their label."""
    if not text:
        return ""
    text = _HTML_COMMENT_RE.sub("", text)
    text = _MARKDOWN_LINK_RE.sub(r"\1", text)
    return text.strip()
