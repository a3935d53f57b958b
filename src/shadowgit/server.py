"""MCP server exposing ShadowGit repositories to AI assistants.

Tools: list_repos, git_command, start_session, checkpoint, end_session.
"""

from __future__ import annotations

import logging
from typing import Any

from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import TextContent, Tool

from . import __version__
from .audit import DISABLED, AuditSink
from .config import ShadowGitConfig
from .gateway import GitExecutor, RepositoryResolver
from .handlers import ToolHandlers
from .repositories import load_repositories
from .responses import ToolResponse
from .session_client import SessionClient

logger = logging.getLogger(__name__)

SERVER_NAME = "shadowgit-mcp-server"

TOOLS: list[Tool] = [
    Tool(
        name="list_repos",
        description=(
            "List all available ShadowGit repositories. Use this first to discover "
            "which repositories you can work with."
        ),
        inputSchema={"type": "object", "properties": {}},
    ),
    Tool(
        name="git_command",
        description=(
            "Execute a read-only git command on a ShadowGit repository. "
            "Only safe, read-only commands are allowed."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "repo": {
                    "type": "string",
                    "description": "Repository name (use list_repos to see available repositories)",
                },
                "command": {
                    "type": "string",
                    "description": 'Git command to execute (e.g., "log -10", "diff HEAD~1", "status")',
                },
            },
            "required": ["repo", "command"],
        },
    ),
    Tool(
        name="start_session",
        description=(
            "Start a work session. MUST be called BEFORE making any changes. Without this, "
            "ShadowGit will create fragmented auto-commits during your work!"
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "repo": {"type": "string", "description": "Repository name"},
                "description": {"type": "string", "description": "What you plan to do in this session"},
            },
            "required": ["repo", "description"],
        },
    ),
    Tool(
        name="checkpoint",
        description=(
            "Create a git commit with your changes. Call this AFTER completing your work but "
            "BEFORE end_session. Creates a clean commit for the user to review."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "repo": {"type": "string", "description": "Repository name"},
                "title": {
                    "type": "string",
                    "description": "Commit title (max 50 chars) - REQUIRED. Be specific about what was changed.",
                },
                "message": {
                    "type": "string",
                    "description": "Detailed commit message (optional, max 1000 chars)",
                },
                "author": {
                    "type": "string",
                    "description": 'Author name (e.g., "Claude", "GPT-4"). Defaults to "AI Assistant"',
                },
            },
            "required": ["repo", "title"],
        },
    ),
    Tool(
        name="end_session",
        description=(
            "End your work session to resume ShadowGit auto-commits. MUST be called AFTER "
            "checkpoint to properly close your work session."
        ),
        inputSchema={
            "type": "object",
            "properties": {
                "sessionId": {"type": "string", "description": "Session ID from start_session"},
                "commitHash": {"type": "string", "description": "Commit hash from checkpoint (optional)"},
            },
            "required": ["sessionId"],
        },
    ),
]


class ShadowGitServer:
    """Wires configuration, the repository snapshot and the gateway into MCP tools."""

    def __init__(
        self,
        config: ShadowGitConfig | None = None,
        handlers: ToolHandlers | None = None,
    ):
        self.config = config or ShadowGitConfig()
        if handlers is None:
            audit = AuditSink(enabled=True, path=self.config.audit_path) if self.config.audit.enabled else DISABLED
            resolver = RepositoryResolver(load_repositories(self.config.repos_file))
            handlers = ToolHandlers(
                resolver=resolver,
                executor=GitExecutor(self.config.gateway, audit=audit),
                session_client=SessionClient(self.config.session_api),
                config=self.config,
            )
        self.handlers = handlers
        self.server: Server = Server(SERVER_NAME, version=__version__)
        self._register()

    def _register(self) -> None:
        @self.server.list_tools()
        async def list_tools() -> list[Tool]:
            return TOOLS

        @self.server.call_tool()
        async def call_tool(name: str, arguments: dict[str, Any] | None) -> list[TextContent]:
            response = await self.dispatch(name, arguments)
            return [TextContent(type="text", text=response.text)]

    async def dispatch(self, name: str, arguments: dict[str, Any] | None) -> ToolResponse:
        """Route a tool call; handler exceptions come back as text."""
        logger.info("Tool called: %s", name)
        routes = {
            "list_repos": self.handlers.list_repos,
            "git_command": self.handlers.git_command,
            "start_session": self.handlers.start_session,
            "checkpoint": self.handlers.checkpoint,
            "end_session": self.handlers.end_session,
        }
        handler = routes.get(name)
        if handler is None:
            return ToolResponse(
                text=f"Unknown tool: {name}. Available tools: {', '.join(routes)}",
                success=False,
            )
        try:
            return await handler(arguments)
        except Exception as e:  # noqa: BLE001
            logger.exception("Tool execution error in %s", name)
            return ToolResponse(text=f"Error executing {name}: {e}", success=False)

    async def serve(self) -> None:
        """Run over stdio until the client disconnects."""
        logger.info("Starting ShadowGit MCP Server v%s", __version__)

        if await self.handlers.session_client.is_healthy():
            logger.info("Session API is available - session tracking enabled")
        else:
            logger.warning("Session API is not available - proceeding without session tracking")

        async with stdio_server() as (read_stream, write_stream):
            logger.info("ShadowGit MCP Server is running")
            await self.server.run(read_stream, write_stream, self.server.create_initialization_options())
