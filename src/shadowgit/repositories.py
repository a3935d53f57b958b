"""Loading the repository snapshot maintained by the ShadowGit app."""

from __future__ import annotations

import json
import logging
import os
import sys
from pathlib import Path

from .types import Repository

logger = logging.getLogger(__name__)

REPOS_FILENAME = "repos.json"


def storage_location() -> Path:
    """Directory where the ShadowGit app keeps its data, per platform."""
    home = Path.home()
    if sys.platform == "darwin":
        return home / ".shadowgit"
    if sys.platform == "win32":
        local = os.getenv("LOCALAPPDATA") or str(home / "AppData" / "Local")
        return Path(local) / "shadowgit"
    data_home = os.getenv("XDG_DATA_HOME") or str(home / ".local" / "share")
    return Path(data_home) / "shadowgit"


def load_repositories(repos_file: Path | str | None = None) -> tuple[Repository, ...]:
    """Read ``repos.json`` into an immutable snapshot.

    A missing or unreadable file yields an empty snapshot. Entries without a
    string ``name`` and ``path`` are skipped; duplicates are kept in order.
    """
    path = Path(repos_file) if repos_file is not None else storage_location() / REPOS_FILENAME
    logger.info("Loading repositories from %s", path)

    try:
        with open(path, encoding="utf-8") as f:
            data = json.load(f)
    except FileNotFoundError:
        data = []
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read %s: %s", path, e)
        data = []

    if not isinstance(data, list):
        logger.warning("Ignoring %s: expected a JSON list", path)
        data = []

    repos: list[Repository] = []
    for entry in data:
        if not isinstance(entry, dict):
            continue
        name, repo_path = entry.get("name"), entry.get("path")
        if isinstance(name, str) and isinstance(repo_path, str) and name and repo_path:
            repos.append(Repository(name=name, path=repo_path))
        else:
            logger.debug("Skipping malformed repository entry: %r", entry)

    logger.info("Loaded %d repositories", len(repos))
    if not repos:
        logger.warning("No repositories found. Please add repositories via ShadowGit app.")
    return tuple(repos)
