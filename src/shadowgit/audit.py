"""JSONL audit trail of gateway decisions.

Command output is never recorded; free-text fields are redacted and truncated.
"""

from __future__ import annotations

import json
import logging
import re
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_FILENAME = "mcp-audit.jsonl"

_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"\bsk-[A-Za-z0-9]{16,}\b"), "sk-REDACTED"),
    (re.compile(r"\bAKIA[0-9A-Z]{16}\b"), "AKIA_REDACTED"),
    (re.compile(r"\bgh[pousr]_[A-Za-z0-9]{20,}\b"), "gh_REDACTED"),
    (re.compile(r"(https?://)[^/\s:@]+:[^/\s@]+@"), r"\1REDACTED@"),
]


def redact_text(s: str, *, max_len: int = 400) -> str:
    """Redact common secret shapes and truncate."""
    if not s:
        return ""
    out = s
    for pat, repl in _PATTERNS:
        out = pat.sub(repl, out)
    out = out.strip()
    if len(out) > max_len:
        out = out[:max_len] + "...(truncated)"
    return out


@dataclass(frozen=True)
class AuditSink:
    """Append-only audit log.

    Event schema:
      {"timestamp": <float>, "type": <str>, "data": <object>}
    """

    enabled: bool
    path: Path | None = None

    def log(self, event_type: str, data: dict[str, Any]) -> None:
        if not self.enabled or self.path is None:
            return

        entry = {
            "timestamp": time.time(),
            "type": event_type,
            "data": {k: redact_text(v) if isinstance(v, str) else v for k, v in data.items()},
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(json.dumps(entry, ensure_ascii=False) + "\n")
        except OSError as e:
            # Auditing must never break a tool call.
            logger.warning("Failed to write audit entry to %s: %s", self.path, e)


DISABLED = AuditSink(enabled=False)
