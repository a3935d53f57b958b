"""Argument blacklist and subcommand whitelist for git invocations."""

from __future__ import annotations

from typing import Sequence

from ..types import FailureKind, GatewayFailure, InvocationTrust

# Read-only subcommands an external caller may run.
SAFE_COMMANDS: tuple[str, ...] = (
    "log",
    "show",
    "diff",
    "status",
    "describe",
    "rev-parse",
    "ls-files",
    "ls-tree",
    "cat-file",
    "show-branch",
    "shortlog",
    "rev-list",
    "blame",
)

# Blocked for every caller. Matched case-insensitively, exactly or as "<pattern>=...".
DANGEROUS_PATTERNS: tuple[str, ...] = (
    "--upload-pack",
    "--receive-pack",
    "--exec",
    "-c",  # config override
    "--config",
    "-e",
    "--git-dir",
    "--work-tree",
    "-C",  # directory change
)

_LOWER_PATTERNS = tuple(p.lower() for p in DANGEROUS_PATTERNS)


def is_dangerous_arg(arg: str) -> bool:
    lowered = arg.lower()
    return any(lowered == p or lowered.startswith(p + "=") for p in _LOWER_PATTERNS)


def is_safe_command(subcommand: str) -> bool:
    return subcommand in SAFE_COMMANDS


def validate_argv(argv: Sequence[str], trust: InvocationTrust) -> GatewayFailure | None:
    """Return None when ``argv`` may run, otherwise the rejection.

    The blacklist applies to both trust levels; internal trust only skips
    the whitelist.
    """
    if not argv:
        return GatewayFailure(FailureKind.INVALID_INPUT, "No command provided.")

    if any(is_dangerous_arg(a) for a in argv):
        return GatewayFailure(
            FailureKind.SECURITY_REJECTION,
            "Command contains potentially dangerous arguments.",
        )

    subcommand = argv[0]
    if trust is InvocationTrust.EXTERNAL and not is_safe_command(subcommand):
        return GatewayFailure(
            FailureKind.SECURITY_REJECTION,
            f"Command '{subcommand}' is not allowed. Only read-only commands are permitted.",
            subcommand=subcommand,
            allowed=SAFE_COMMANDS,
        )
    return None
