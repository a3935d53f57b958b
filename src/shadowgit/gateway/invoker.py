"""Run git against a resolved shadow repository.

Key properties:
- Executes an argv list (no shell).
- ``--git-dir``/``--work-tree`` come only from the ResolvedRepository.
- Interactive prompts and pagers are disabled regardless of the caller's env.
- Wall-clock timeout and combined output cap. git runs in its own process
  group; on timeout, overflow or cancellation the whole group is killed
  and the reap is bounded.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from typing import Mapping, Sequence

from ..types import ResolvedRepository

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 10_000
DEFAULT_MAX_BUFFER_BYTES = 10 * 1024 * 1024

SAFE_ENV: dict[str, str] = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_SSH_COMMAND": "ssh -o BatchMode=yes",
    "GIT_PAGER": "cat",
    "PAGER": "cat",
}

# Location pointers; extra env may never redirect the repository.
PROTECTED_ENV = frozenset({"GIT_DIR", "GIT_WORK_TREE", "GIT_COMMON_DIR", "GIT_INDEX_FILE"})

_CHUNK_SIZE = 64 * 1024

# Upper bound on reaping after a kill.
_REAP_TIMEOUT_S = 2.0

_POSIX = hasattr(os, "killpg")


class InvocationError(RuntimeError):
    pass


class InvocationTimeout(InvocationError):
    def __init__(self, timeout_ms: int):
        super().__init__(f"git timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class OutputLimitExceeded(InvocationError):
    def __init__(self, limit_bytes: int, stdout: str = "", stderr: str = ""):
        super().__init__(f"combined output exceeded {limit_bytes} bytes")
        self.limit_bytes = limit_bytes
        self.stdout = stdout
        self.stderr = stderr


class ProcessExitError(InvocationError):
    def __init__(self, argv: Sequence[str], exit_code: int, stdout: str = "", stderr: str = ""):
        super().__init__(f"Command failed with exit code {exit_code}: {' '.join(argv)}")
        self.argv = list(argv)
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr


class _OutputBudget:
    def __init__(self, limit: int):
        self.limit = limit
        self.used = 0


class _BudgetExhausted(Exception):
    pass


def _decode(data: bytes | bytearray) -> str:
    return bytes(data).decode("utf-8", errors="replace")


def _kill_tree(proc: asyncio.subprocess.Process) -> None:
    """Kill git and everything it spawned (hooks, diff drivers, ssh)."""
    try:
        if _POSIX:
            # The child leads its own session, so its pid is the group id.
            os.killpg(proc.pid, signal.SIGKILL)
        else:
            proc.kill()
    except (ProcessLookupError, PermissionError):
        pass


async def _terminate(proc: asyncio.subprocess.Process) -> None:
    _kill_tree(proc)
    try:
        await asyncio.wait_for(proc.wait(), timeout=_REAP_TIMEOUT_S)
    except asyncio.TimeoutError:
        logger.warning("git process %s still running after kill", proc.pid)


class GitInvoker:
    """Executes git with a locked-down environment."""

    def __init__(
        self,
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        max_buffer_bytes: int = DEFAULT_MAX_BUFFER_BYTES,
        git_binary: str = "git",
    ):
        self.timeout_ms = timeout_ms
        self.max_buffer_bytes = max_buffer_bytes
        self.git_binary = git_binary

    def build_argv(self, repo: ResolvedRepository, argv: Sequence[str]) -> list[str]:
        return [
            self.git_binary,
            f"--git-dir={repo.git_dir}",
            f"--work-tree={repo.path}",
            *argv,
        ]

    def build_env(self, extra_env: Mapping[str, str] | None = None) -> dict[str, str]:
        env = os.environ.copy()
        env.update(SAFE_ENV)
        for key, value in (extra_env or {}).items():
            if key.upper() in PROTECTED_ENV:
                logger.warning("Ignoring protected environment override: %s", key)
                continue
            env[key] = value
        return env

    @staticmethod
    async def _pump(stream: asyncio.StreamReader, sink: bytearray, budget: _OutputBudget) -> None:
        while True:
            chunk = await stream.read(_CHUNK_SIZE)
            if not chunk:
                return
            room = budget.limit - budget.used
            budget.used += len(chunk)
            if budget.used > budget.limit:
                sink.extend(chunk[: max(room, 0)])
                raise _BudgetExhausted
            sink.extend(chunk)

    async def run(
        self,
        repo: ResolvedRepository,
        argv: Sequence[str],
        extra_env: Mapping[str, str] | None = None,
    ) -> str:
        """Run ``git <argv>`` in ``repo`` and return stdout.

        Raises InvocationTimeout, OutputLimitExceeded or ProcessExitError;
        spawn failures propagate as OSError.
        """
        cmd = self.build_argv(repo, argv)
        logger.debug("Executing git %s in %s", argv[0] if argv else "", repo.path)

        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(repo.path),
            env=self.build_env(extra_env),
            start_new_session=_POSIX,
        )
        if proc.stdout is None or proc.stderr is None:
            raise RuntimeError("git subprocess was started without output pipes")

        out = bytearray()
        err = bytearray()
        budget = _OutputBudget(self.max_buffer_bytes)
        tasks = [
            asyncio.ensure_future(self._pump(proc.stdout, out, budget)),
            asyncio.ensure_future(self._pump(proc.stderr, err, budget)),
            asyncio.ensure_future(proc.wait()),
        ]
        finished = False
        try:
            _, pending = await asyncio.wait(
                tasks,
                timeout=self.timeout_ms / 1000,
                return_when=asyncio.FIRST_EXCEPTION,
            )
            finished = not pending and all(t.exception() is None for t in tasks)
        finally:
            for task in tasks:
                if not task.done():
                    task.cancel()
            if not finished:
                await _terminate(proc)
            await asyncio.gather(*tasks, return_exceptions=True)

        if any(t.done() and not t.cancelled() and isinstance(t.exception(), _BudgetExhausted) for t in tasks):
            raise OutputLimitExceeded(self.max_buffer_bytes, _decode(out), _decode(err))
        if pending:
            raise InvocationTimeout(self.timeout_ms)
        if proc.returncode != 0:
            raise ProcessExitError(cmd, proc.returncode or 0, _decode(out), _decode(err))
        return _decode(out)
