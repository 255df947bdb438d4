"""YAML loader for the local project list.

The file is either a plain list of project records or a mapping with a
``projects`` key holding that list:

    projects:
      - repo: smeijer/testing-playground
        highlight: true
      - name: GoWion
        description: A pipeline management system.
        date: 2011-09-17
        tags: [founder, saas]
"""

from __future__ import annotations

from datetime import date, datetime
import logging
from pathlib import Path
from typing import Any

import yaml

from ..core.types import ProjectEntry

logger = logging.getLogger(__name__)


def load_projects(path: str | Path) -> list[ProjectEntry]:
    """Load project entries from a YAML file.

    Raises:
        ValueError: If the file does not contain a list of projects
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or []
    return parse_projects(raw)


def parse_projects(raw: Any) -> list[ProjectEntry]:
    """Parse raw YAML data into ProjectEntry objects.

    Records that are neither linked to a repository nor carry a name and
    description are skipped with a warning.
    """
    if isinstance(raw, dict):
        raw = raw.get("projects")
    if not isinstance(raw, list):
        raise ValueError("Invalid project list: expected a list of projects")

    projects: list[ProjectEntry] = []
    for index, item in enumerate(raw):
        if not isinstance(item, dict):
            logger.warning(f"Skipping project #{index}: not a mapping")
            continue

        project = ProjectEntry(
            repo=item.get("repo"),
            name=item.get("name"),
            description=item.get("description"),
            url=item.get("url") or item.get("link"),
            tags=list(item["tags"]) if item.get("tags") is not None else None,
            date=_date_string(item.get("date") or item.get("published")),
            highlight=bool(item.get("highlight")),
            type=item.get("type"),
            image=item.get("image"),
            icon=item.get("icon"),
            packages=[_package_name(pkg) for pkg in item.get("packages") or []],
        )
        if not project.is_renderable():
            logger.warning(
                f"Skipping project #{index}: needs a repo or both name and description"
            )
            continue
        projects.append(project)

    return projects


def _date_string(value: Any) -> str | None:
    # yaml.safe_load turns unquoted ISO dates into date objects
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if value is None:
        return None
    return str(value)


def _package_name(value: Any) -> str:
    if isinstance(value, dict):
        return str(value["name"])
    return str(value)
