from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s [shadowgit-mcp] %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "info") -> None:
    """Configure process logging on stderr.

    stdout carries the MCP stdio transport, so nothing may log there.
    Calling this again only updates the level.
    """
    logger = logging.getLogger("shadowgit")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if getattr(logger, "_shadowgit_configured", False):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt="%Y-%m-%dT%H:%M:%S%z"))
    logger.addHandler(handler)
    logger.propagate = False

    setattr(logger, "_shadowgit_configured", True)
