"""Async client for the ShadowGit session API.

Sessions pause ShadowGit's auto-commits while an AI tool works. The API is
an optional side-channel: when it is down every call degrades to
``None``/``False`` instead of raising.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .config import SessionApiConfig

logger = logging.getLogger(__name__)


class SessionClient:
    """HTTP client for ``/session/start``, ``/session/end`` and ``/health``."""

    def __init__(
        self,
        config: SessionApiConfig | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config or SessionApiConfig()
        self._transport = transport

    def _client(self, timeout: float) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.config.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    async def _post(self, path: str, payload: dict[str, Any]) -> dict[str, Any] | None:
        try:
            async with self._client(self.config.timeout_seconds) as client:
                response = await client.post(path, json=payload)
        except httpx.HTTPError as e:
            logger.debug("Session API unavailable: %s", e)
            return None

        if response.status_code != 200:
            logger.warning("Session API %s failed: %s %s", path, response.status_code, response.reason_phrase)
            return None
        try:
            data = response.json()
        except ValueError:
            logger.warning("Session API %s returned invalid JSON", path)
            return None
        return data if isinstance(data, dict) else None

    async def start_session(self, repo_path: str, ai_tool: str, description: str) -> str | None:
        """
        Start a session for a repository.

        Returns:
            The session id, or None if the API refused or is unreachable
        """
        data = await self._post(
            "/session/start",
            {"repoPath": repo_path, "aiTool": ai_tool, "description": description},
        )
        if data and data.get("success") and isinstance(data.get("sessionId"), str):
            logger.info("Session started: %s for %s", data["sessionId"], repo_path)
            return data["sessionId"]
        return None

    async def end_session(self, session_id: str, commit_hash: str | None = None) -> bool:
        payload: dict[str, Any] = {"sessionId": session_id}
        if commit_hash:
            payload["commitHash"] = commit_hash

        data = await self._post("/session/end", payload)
        if data and data.get("success"):
            logger.info("Session ended: %s", session_id)
            return True
        return False

    async def is_healthy(self) -> bool:
        """Check if the session API is accessible."""
        try:
            async with self._client(self.config.health_timeout_seconds) as client:
                response = await client.get("/health")
                return response.status_code == 200
        except httpx.HTTPError:
            return False
