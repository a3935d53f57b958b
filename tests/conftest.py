"""Global pytest configuration for hermetic test runs."""

from __future__ import annotations

import os
import shutil
import stat
import subprocess
from pathlib import Path

import pytest

SHADOWGIT_DIR = ".shadowgit.git"

GIT_IDENTITY = {
    "GIT_AUTHOR_NAME": "Test User",
    "GIT_AUTHOR_EMAIL": "test@example.com",
    "GIT_COMMITTER_NAME": "Test User",
    "GIT_COMMITTER_EMAIL": "test@example.com",
}


def pytest_sessionstart(session):  # noqa: ARG001
    # Keep the developer's git configuration out of the tests.
    os.environ.setdefault("GIT_CONFIG_NOSYSTEM", "1")
    os.environ.setdefault("GIT_CONFIG_GLOBAL", os.devnull)

    # Never talk to a real ShadowGit app during tests.
    os.environ.setdefault("SHADOWGIT_SESSION_API", "http://127.0.0.1:9/api")


def shadow_git(repo: Path, *args: str) -> subprocess.CompletedProcess[str]:
    """Run git against the shadow store of ``repo`` (test setup only)."""
    return subprocess.run(
        ["git", f"--git-dir={repo / SHADOWGIT_DIR}", f"--work-tree={repo}", *args],
        cwd=repo,
        check=True,
        capture_output=True,
        text=True,
        env={**os.environ, **GIT_IDENTITY},
    )


@pytest.fixture
def requires_git():
    if shutil.which("git") is None:
        pytest.skip("git not available")


@pytest.fixture
def shadow_repo(tmp_path, requires_git):
    """A working directory tracked by a ``.shadowgit.git`` store with one commit."""
    repo = tmp_path / "project"
    repo.mkdir()
    shadow_git(repo, "init", "-q")

    exclude = repo / SHADOWGIT_DIR / "info" / "exclude"
    exclude.parent.mkdir(parents=True, exist_ok=True)
    with open(exclude, "a", encoding="utf-8") as f:
        f.write(f"\n/{SHADOWGIT_DIR}/\n")

    (repo / "app.py").write_text("def main():\n    return 1\n")
    shadow_git(repo, "add", "-A")
    shadow_git(repo, "commit", "-q", "-m", "Initial commit")
    return repo


@pytest.fixture
def make_script(tmp_path):
    """Write an executable shell script that stands in for the git binary."""
    if os.name == "nt":
        pytest.skip("shell scripts not supported on Windows")

    def _make(name: str, body: str) -> str:
        path = tmp_path / name
        path.write_text("#!/bin/sh\n" + body + "\n")
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return str(path)

    return _make


@pytest.fixture
def run_shadow_git():
    return shadow_git
