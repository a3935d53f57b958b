"""Gateway facade: tokenize, validate, invoke, classify."""

from __future__ import annotations

import logging
import os
from typing import Mapping, Sequence, Union

from ..audit import DISABLED, AuditSink
from ..config import GatewayConfig
from ..types import (
    ExecutionOutcome,
    FailureKind,
    GatewayFailure,
    InvocationTrust,
    ResolvedRepository,
    SHADOWGIT_DIR,
)
from .errors import classify_failure
from .invoker import GitInvoker
from .security import validate_argv
from .tokenizer import tokenize

logger = logging.getLogger(__name__)

Command = Union[str, Sequence[str]]


class GitExecutor:
    """Single entry point for running git on behalf of MCP tools.

    ``execute`` never raises for gateway failures; every outcome comes back
    as an ExecutionOutcome.
    """

    def __init__(
        self,
        config: GatewayConfig | None = None,
        invoker: GitInvoker | None = None,
        audit: AuditSink = DISABLED,
    ):
        config = config or GatewayConfig()
        self.max_command_length = config.max_command_length
        self.invoker = invoker or GitInvoker(
            timeout_ms=config.timeout_ms,
            max_buffer_bytes=config.max_buffer_bytes,
            git_binary=config.git_binary,
        )
        self.audit = audit

    def parse(self, command: Command, trust: InvocationTrust) -> list[str] | GatewayFailure:
        """Turn caller input into an argv list, or an InvalidInput failure."""
        if isinstance(command, str):
            if trust is InvocationTrust.EXTERNAL and len(command) > self.max_command_length:
                return GatewayFailure(
                    FailureKind.INVALID_INPUT,
                    f"Command too long (max {self.max_command_length} characters).",
                )
            return tokenize(command)

        if trust is InvocationTrust.EXTERNAL:
            return GatewayFailure(
                FailureKind.INVALID_INPUT,
                "Pre-tokenized commands are only accepted from internal callers.",
            )
        if not all(isinstance(a, str) for a in command):
            return GatewayFailure(FailureKind.INVALID_INPUT, "Command arguments must be strings.")
        return list(command)

    def check(
        self,
        command: Command,
        trust: InvocationTrust = InvocationTrust.EXTERNAL,
    ) -> list[str] | GatewayFailure:
        """Parse and validate without running anything."""
        argv = self.parse(command, trust)
        if isinstance(argv, GatewayFailure):
            return argv
        rejection = validate_argv(argv, trust)
        return rejection if rejection is not None else argv

    async def execute(
        self,
        command: Command,
        repo: ResolvedRepository,
        trust: InvocationTrust = InvocationTrust.EXTERNAL,
        extra_env: Mapping[str, str] | None = None,
    ) -> ExecutionOutcome:
        argv = self.check(command, trust)
        if isinstance(argv, GatewayFailure):
            self._audit_rejection(argv, repo, trust)
            return ExecutionOutcome.failed(argv)

        if extra_env and trust is not InvocationTrust.INTERNAL:
            failure = GatewayFailure(
                FailureKind.INVALID_INPUT,
                "Additional environment is only accepted from internal callers.",
            )
            self._audit_rejection(failure, repo, trust)
            return ExecutionOutcome.failed(failure)

        # The directory could have disappeared since resolution.
        if not os.path.isdir(repo.git_dir):
            return ExecutionOutcome.failed(
                GatewayFailure(
                    FailureKind.REPOSITORY_NOT_FOUND,
                    f"Not a ShadowGit repository. The {SHADOWGIT_DIR} directory "
                    f"was not found at {repo.git_dir}",
                )
            )

        try:
            output = await self.invoker.run(repo, argv, extra_env)
        except Exception as e:  # noqa: BLE001
            failure = classify_failure(e, self.invoker.timeout_ms)
            logger.warning("git %s failed in %s: %s", argv[0], repo.path, failure.kind.value)
            self.audit.log(
                "command_failed",
                {
                    "repo": str(repo.path),
                    "subcommand": argv[0],
                    "trust": trust.value,
                    "kind": failure.kind.value,
                    "exit_code": failure.exit_code,
                    "stderr": failure.stderr,
                },
            )
            return ExecutionOutcome.failed(failure)

        self.audit.log(
            "command_executed",
            {
                "repo": str(repo.path),
                "subcommand": argv[0],
                "trust": trust.value,
                "output_chars": len(output),
            },
        )
        return ExecutionOutcome.success(output)

    def _audit_rejection(
        self,
        failure: GatewayFailure,
        repo: ResolvedRepository,
        trust: InvocationTrust,
    ) -> None:
        logger.info("Rejected git invocation (%s): %s", failure.kind.value, failure.message)
        self.audit.log(
            "command_rejected",
            {
                "repo": str(repo.path),
                "trust": trust.value,
                "kind": failure.kind.value,
                "subcommand": failure.subcommand,
            },
        )
