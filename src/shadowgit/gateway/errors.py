"""Classify invocation failures, and render failures to caller-facing text.

Classification and rendering are separate steps: ``classify_failure`` decides
the category and keeps the structured fields, ``render_failure`` formats.
"""

from __future__ import annotations

import asyncio
import subprocess

from ..types import FailureKind, GatewayFailure
from .invoker import InvocationTimeout, OutputLimitExceeded, ProcessExitError


def _text(value: object) -> str:
    if value is None:
        return ""
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def classify_failure(error: BaseException, timeout_ms: int) -> GatewayFailure:
    """Map an invocation failure to a GatewayFailure (first match wins)."""
    if isinstance(error, (InvocationTimeout, asyncio.TimeoutError, subprocess.TimeoutExpired)):
        return GatewayFailure(
            FailureKind.TIMEOUT,
            f"Command timed out after {timeout_ms}ms.",
            timeout_ms=timeout_ms,
        )

    if isinstance(error, OutputLimitExceeded):
        return GatewayFailure(
            FailureKind.BUFFER_OVERFLOW,
            f"Command output exceeded the maximum buffer size ({error.limit_bytes} bytes).",
            stdout=error.stdout,
            stderr=error.stderr,
            limit_bytes=error.limit_bytes,
        )

    if isinstance(error, ProcessExitError):
        return GatewayFailure(
            FailureKind.PROCESS_FAILURE,
            str(error),
            stderr=error.stderr,
            stdout=error.stdout,
            exit_code=error.exit_code,
        )

    if isinstance(error, subprocess.CalledProcessError):
        return GatewayFailure(
            FailureKind.PROCESS_FAILURE,
            str(error),
            stderr=_text(error.stderr),
            stdout=_text(error.output),
            exit_code=error.returncode,
        )

    return GatewayFailure(FailureKind.UNKNOWN_FAILURE, repr(error))


def render_failure(failure: GatewayFailure) -> str:
    """Format a failure as the single text outcome handed back to the caller."""
    kind = failure.kind

    if kind is FailureKind.PROCESS_FAILURE:
        parts = [f"Error executing git command:\n{failure.message or 'Unknown error'}"]
        if failure.stderr:
            parts.append(f"\nError output:\n{failure.stderr}")
        if failure.stdout:
            parts.append(f"\nPartial output:\n{failure.stdout}")
        return "\n".join(parts)

    if kind is FailureKind.SECURITY_REJECTION and failure.subcommand is not None:
        return (
            f"Error: {failure.message}\n\n"
            f"Allowed commands: {', '.join(failure.allowed)}"
        )

    return f"Error: {failure.message}"
