"""Core data types for the ShadowGit MCP gateway."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

SHADOWGIT_DIR = ".shadowgit.git"


class InvocationTrust(str, Enum):
    """Who is asking: the checkpoint workflow (internal) or the agent (external)."""

    INTERNAL = "internal"
    EXTERNAL = "external"


class FailureKind(str, Enum):
    """Closed set of gateway failure categories."""

    INVALID_INPUT = "invalid_input"
    SECURITY_REJECTION = "security_rejection"
    REPOSITORY_NOT_FOUND = "repository_not_found"
    TIMEOUT = "timeout"
    BUFFER_OVERFLOW = "buffer_overflow"
    PROCESS_FAILURE = "process_failure"
    UNKNOWN_FAILURE = "unknown_failure"


@dataclass(frozen=True)
class Repository:
    """A repository entry from ShadowGit's repos.json."""

    name: str
    path: str  # May start with "~"


@dataclass(frozen=True)
class ResolvedRepository:
    """A repository directory confirmed to contain the shadow store."""

    path: Path

    @property
    def git_dir(self) -> Path:
        return self.path / SHADOWGIT_DIR


@dataclass(frozen=True)
class GatewayFailure:
    """Structured failure carried until the text boundary."""

    kind: FailureKind
    message: str
    stderr: str = ""
    stdout: str = ""
    exit_code: int | None = None
    timeout_ms: int | None = None
    limit_bytes: int | None = None
    subcommand: str | None = None
    allowed: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of one gateway call: raw output or a classified failure."""

    output: str | None = None
    failure: GatewayFailure | None = None

    @property
    def ok(self) -> bool:
        return self.failure is None

    def render(self) -> str:
        """Render to the text returned to MCP callers."""
        from .gateway.errors import render_failure

        if self.failure is not None:
            return render_failure(self.failure)
        return self.output or "(empty output)"

    @classmethod
    def success(cls, output: str) -> ExecutionOutcome:
        return cls(output=output)

    @classmethod
    def failed(cls, failure: GatewayFailure) -> ExecutionOutcome:
        return cls(failure=failure)
