"""Map a repository name or path to a directory holding a shadow store.

Resolution is fail-closed: every rejection is ``None``, never an exception.
The presence of ``.shadowgit.git`` is the only thing that makes a directory
eligible.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from ..types import SHADOWGIT_DIR, Repository, ResolvedRepository

logger = logging.getLogger(__name__)

_SEPARATORS = {"/", os.sep}


def expand_home(path: str, home: str) -> str | None:
    """Expand a leading ``~``; return None for unsupported ``~user`` forms.

    A ``~`` anywhere but the first character is left alone.
    """
    if not path.startswith("~"):
        return path
    if path == "~":
        return home
    if path[1] in _SEPARATORS:
        return os.path.join(home, path[2:])
    return None


def looks_like_path(candidate: str) -> bool:
    """Bare tokens are names; only these shapes are treated as paths."""
    return (
        candidate.startswith("/")
        or candidate.startswith("~")
        or ":" in candidate  # Windows drive letter
        or candidate.startswith("\\\\")  # UNC
    )


def _has_shadow_store(path: str) -> bool:
    # os.path.isdir swallows OSError/ValueError, which keeps resolution silent.
    return os.path.isdir(os.path.join(path, SHADOWGIT_DIR))


class RepositoryResolver:
    """Resolve names or paths against an immutable repository snapshot."""

    def __init__(self, repositories: Iterable[Repository], home_dir: str | None = None):
        self._repositories: tuple[Repository, ...] = tuple(repositories)
        self._home_dir = home_dir

    @property
    def repositories(self) -> tuple[Repository, ...]:
        return self._repositories

    def _home(self) -> str:
        return self._home_dir or os.path.expanduser("~")

    def find(self, name: str) -> Repository | None:
        """First repository with exactly this name (snapshot order)."""
        for repo in self._repositories:
            if repo.name == name:
                return repo
        return None

    def resolve(self, name_or_path: str | None) -> ResolvedRepository | None:
        if not name_or_path:
            logger.warning("No repository name or path provided")
            return None

        known = self.find(name_or_path)
        if known is not None:
            return self._resolve_known(known)

        if not looks_like_path(name_or_path):
            logger.debug("Unknown repository name: %s", name_or_path)
            return None
        return self._resolve_path(name_or_path)

    def _resolve_known(self, repo: Repository) -> ResolvedRepository | None:
        # Unsupported "~user" forms stay literal and fail the absolute-path check.
        repo_path = os.path.normpath(expand_home(repo.path, self._home()) or repo.path)
        if not os.path.isabs(repo_path):
            logger.warning("Repository '%s' has a non-absolute path: %s", repo.name, repo.path)
            return None
        if not _has_shadow_store(repo_path):
            logger.warning(
                "Repository '%s' exists but %s was not found at: %s",
                repo.name,
                SHADOWGIT_DIR,
                os.path.join(repo_path, SHADOWGIT_DIR),
            )
            return None
        logger.debug("Resolved repository '%s' to path: %s", repo.name, repo_path)
        return ResolvedRepository(path=Path(repo_path))

    def _resolve_path(self, candidate: str) -> ResolvedRepository | None:
        expanded = expand_home(candidate, self._home())
        if expanded is None:
            logger.warning("Unsupported tilde expansion: %s", candidate)
            return None

        normalized = os.path.normpath(expanded)
        if not os.path.isabs(normalized):
            logger.warning("Invalid path provided: %s", candidate)
            return None
        if not os.path.exists(normalized):
            return None
        if not _has_shadow_store(normalized):
            logger.warning(
                "Path exists but %s was not found at: %s",
                SHADOWGIT_DIR,
                os.path.join(normalized, SHADOWGIT_DIR),
            )
            return None
        return ResolvedRepository(path=Path(normalized))
